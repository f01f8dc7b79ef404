"""Mongo repository for playlists."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument

from engagement_api.db.mongo import store_call


class PlaylistsRepo:
    """CRUD helpers; every write is conditional on the owner."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.col = db['playlists']

    async def ensure_indexes(self) -> None:
        """Unique playlist name per owner."""
        await store_call(self.col.create_index(
            [('owner', ASCENDING), ('name', ASCENDING)],
            unique=True,
            name='playlists_owner_name',
        ))
        await store_call(self.col.create_index(
            [('videos', ASCENDING)], name='playlists_videos'))

    async def insert(
        self,
        owner: ObjectId,
        name: str,
        description: str,
    ) -> Dict[str, Any]:
        """Insert playlist; DuplicateKeyError on (owner, name) clash."""
        now = datetime.now(timezone.utc)
        doc = {
            'name': name,
            'description': description,
            'owner': owner,
            'videos': [],
            'created_at': now,
            'updated_at': now,
        }
        result = await store_call(self.col.insert_one(doc))
        doc['_id'] = result.inserted_id
        return doc

    async def name_taken(
        self,
        owner: ObjectId,
        name: str,
        exclude_id: Optional[ObjectId] = None,
    ) -> bool:
        query: Dict[str, Any] = {'owner': owner, 'name': name}
        if exclude_id is not None:
            query['_id'] = {'$ne': exclude_id}
        doc = await store_call(self.col.find_one(query, {'_id': 1}))
        return doc is not None

    async def get_by_id(self, playlist_id: ObjectId) -> Optional[dict]:
        return await store_call(self.col.find_one({'_id': playlist_id}))

    async def exists_owned(
        self,
        playlist_id: ObjectId,
        owner: ObjectId,
    ) -> bool:
        doc = await store_call(self.col.find_one(
            {'_id': playlist_id, 'owner': owner}, {'_id': 1}))
        return doc is not None

    async def update_owned(
        self,
        playlist_id: ObjectId,
        owner: ObjectId,
        set_: Dict[str, Any],
    ) -> Optional[dict]:
        set_ = {**set_, 'updated_at': datetime.now(timezone.utc)}
        return await store_call(self.col.find_one_and_update(
            {'_id': playlist_id, 'owner': owner},
            {'$set': set_},
            return_document=ReturnDocument.AFTER,
        ))

    async def delete_owned(
        self,
        playlist_id: ObjectId,
        owner: ObjectId,
    ) -> Optional[dict]:
        return await store_call(self.col.find_one_and_delete(
            {'_id': playlist_id, 'owner': owner}))

    async def push_video_owned(
        self,
        playlist_id: ObjectId,
        owner: ObjectId,
        video_id: ObjectId,
    ) -> Optional[dict]:
        """Append video unless it is already there; None if nothing matched."""
        return await store_call(self.col.find_one_and_update(
            {'_id': playlist_id, 'owner': owner,
             'videos': {'$ne': video_id}},
            {'$push': {'videos': video_id},
             '$set': {'updated_at': datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        ))

    async def pull_video_owned(
        self,
        playlist_id: ObjectId,
        owner: ObjectId,
        video_id: ObjectId,
    ) -> Optional[dict]:
        """Remove video if present; None if nothing matched."""
        return await store_call(self.col.find_one_and_update(
            {'_id': playlist_id, 'owner': owner, 'videos': video_id},
            {'$pull': {'videos': video_id},
             '$set': {'updated_at': datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        ))

    async def pull_video_everywhere(self, video_id: ObjectId) -> int:
        result = await store_call(self.col.update_many(
            {'videos': video_id}, {'$pull': {'videos': video_id}}))
        return result.modified_count
