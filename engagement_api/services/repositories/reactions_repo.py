"""Mongo repository for the reactions ledger."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument

from engagement_api.db.mongo import store_call
from engagement_api.models.reactions import (ReactionKind, TargetKind,
                                             TargetRef)


def target_filter(actor: ObjectId, target: TargetRef) -> Dict[str, Any]:
    return {
        'actor': actor,
        'target_kind': target.kind.value,
        'target_id': target.id,
    }


class ReactionsRepo:
    """One document per (actor, target); `kind` tells like from dislike."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = db['reactions']

    async def ensure_indexes(self) -> None:
        """Unique (actor, target) across both kinds + per-target counts."""
        await store_call(self._col.create_index(
            [('actor', ASCENDING),
             ('target_kind', ASCENDING),
             ('target_id', ASCENDING)],
            unique=True,
            name='reactions_actor_target',
        ))
        await store_call(self._col.create_index(
            [('target_id', ASCENDING), ('kind', ASCENDING)],
            name='reactions_target_kind',
        ))

    async def find_for_target(
        self,
        actor: ObjectId,
        target: TargetRef,
    ) -> Optional[Dict[str, Any]]:
        """Current reaction of `actor` on `target`, whatever its kind."""
        return await store_call(
            self._col.find_one(target_filter(actor, target)))

    async def insert(
        self,
        actor: ObjectId,
        target: TargetRef,
        kind: ReactionKind,
    ) -> Dict[str, Any]:
        """Insert a reaction; DuplicateKeyError if one already exists."""
        doc = {
            **target_filter(actor, target),
            'kind': kind.value,
            'created_at': datetime.now(timezone.utc),
        }
        result = await store_call(self._col.insert_one(doc))
        doc['_id'] = result.inserted_id
        return doc

    async def delete_if_kind(
        self,
        reaction_id: ObjectId,
        kind: ReactionKind,
    ) -> bool:
        """Delete only if the reaction is still of `kind`."""
        result = await store_call(self._col.delete_one(
            {'_id': reaction_id, 'kind': kind.value}))
        return result.deleted_count == 1

    async def switch_kind(
        self,
        reaction_id: ObjectId,
        from_kind: ReactionKind,
        to_kind: ReactionKind,
    ) -> Optional[Dict[str, Any]]:
        """Flip like<->dislike in one write, conditional on the old kind."""
        return await store_call(self._col.find_one_and_update(
            {'_id': reaction_id, 'kind': from_kind.value},
            {'$set': {
                'kind': to_kind.value,
                'created_at': datetime.now(timezone.utc),
            }},
            return_document=ReturnDocument.AFTER,
        ))

    async def count_for_target(
        self,
        actor: ObjectId,
        target: TargetRef,
    ) -> int:
        return await store_call(
            self._col.count_documents(target_filter(actor, target)))

    async def delete_for_targets(
        self,
        target_kind: TargetKind,
        target_ids: Iterable[ObjectId],
    ) -> int:
        """Cascade helper: drop every reaction attached to the targets."""
        ids = list(target_ids)
        if not ids:
            return 0
        result = await store_call(self._col.delete_many(
            {'target_kind': target_kind.value, 'target_id': {'$in': ids}}))
        return result.deleted_count
