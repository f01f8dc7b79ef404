"""Mongo repository for video metadata and its like/dislike sets."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from engagement_api.db.mongo import store_call
from engagement_api.models.reactions import ReactionKind

# поле-множество на видео для каждого вида реакции
COUNTER_FIELDS = {
    ReactionKind.like: 'likes',
    ReactionKind.dislike: 'dislikes',
}


class VideosRepo:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.col = db['videos']

    async def ensure_indexes(self) -> None:
        await store_call(self.col.create_index(
            [('owner', ASCENDING), ('created_at', DESCENDING)],
            name='videos_owner_created_desc',
        ))

    async def insert(self, owner: ObjectId, fields: Dict[str, Any]) -> dict:
        now = datetime.now(timezone.utc)
        doc = {
            **fields,
            'owner': owner,
            'views': 0,
            'is_published': True,
            'likes': [],
            'dislikes': [],
            'created_at': now,
            'updated_at': now,
        }
        result = await store_call(self.col.insert_one(doc))
        doc['_id'] = result.inserted_id
        return doc

    async def get_by_id(self, video_id: ObjectId) -> Optional[dict]:
        return await store_call(self.col.find_one({'_id': video_id}))

    async def exists(self, video_id: ObjectId) -> bool:
        doc = await store_call(
            self.col.find_one({'_id': video_id}, {'_id': 1}))
        return doc is not None

    async def update_owned(
        self,
        video_id: ObjectId,
        owner: ObjectId,
        set_: Dict[str, Any],
    ) -> Optional[dict]:
        """Update if `owner` owns the video; None otherwise."""
        set_ = {**set_, 'updated_at': datetime.now(timezone.utc)}
        return await store_call(self.col.find_one_and_update(
            {'_id': video_id, 'owner': owner},
            {'$set': set_},
            return_document=ReturnDocument.AFTER,
        ))

    async def set_published(
        self,
        video_id: ObjectId,
        owner: ObjectId,
        current: bool,
    ) -> Optional[dict]:
        """Flip is_published, conditional on the value we read."""
        return await store_call(self.col.find_one_and_update(
            {'_id': video_id, 'owner': owner, 'is_published': current},
            {'$set': {
                'is_published': not current,
                'updated_at': datetime.now(timezone.utc),
            }},
            return_document=ReturnDocument.AFTER,
        ))

    async def delete_owned(
        self,
        video_id: ObjectId,
        owner: ObjectId,
    ) -> Optional[dict]:
        return await store_call(self.col.find_one_and_delete(
            {'_id': video_id, 'owner': owner},
            projection={'_id': 1, 'title': 1},
        ))

    async def sync_reaction(
        self,
        video_id: ObjectId,
        actor: ObjectId,
        kind: Optional[ReactionKind],
    ) -> Optional[dict]:
        """Put `actor` into the set of `kind` and out of the other one.

        kind=None removes the actor from both sets. Returns the counter
        sets after the update, or None when the video is gone.
        """
        update: Dict[str, Any] = {}
        if kind is None:
            update['$pull'] = {
                field: actor for field in COUNTER_FIELDS.values()}
        else:
            update['$addToSet'] = {COUNTER_FIELDS[kind]: actor}
            update['$pull'] = {COUNTER_FIELDS[kind.opposite]: actor}
        return await store_call(self.col.find_one_and_update(
            {'_id': video_id},
            update,
            projection={'likes': 1, 'dislikes': 1},
            return_document=ReturnDocument.AFTER,
        ))
