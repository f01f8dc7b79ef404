"""Mongo repository for video comments."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument

from engagement_api.db.mongo import store_call


class CommentsRepo:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.col = db['comments']

    async def ensure_indexes(self) -> None:
        await store_call(self.col.create_index(
            [('video', ASCENDING), ('created_at', ASCENDING)],
            name='comments_video_created',
        ))

    async def insert(
        self,
        video_id: ObjectId,
        owner: ObjectId,
        content: str,
    ) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        doc = {
            'content': content,
            'video': video_id,
            'owner': owner,
            'created_at': now,
            'updated_at': now,
        }
        result = await store_call(self.col.insert_one(doc))
        doc['_id'] = result.inserted_id
        return doc

    async def get_by_id(self, comment_id: ObjectId) -> Optional[dict]:
        return await store_call(self.col.find_one({'_id': comment_id}))

    async def update_content_owned(
        self,
        comment_id: ObjectId,
        owner: ObjectId,
        content: str,
    ) -> Optional[dict]:
        """Edit text if `owner` still owns it; `video` is never touched."""
        return await store_call(self.col.find_one_and_update(
            {'_id': comment_id, 'owner': owner},
            {'$set': {
                'content': content,
                'updated_at': datetime.now(timezone.utc),
            }},
            return_document=ReturnDocument.AFTER,
        ))

    async def delete_owned(
        self,
        comment_id: ObjectId,
        owner: ObjectId,
    ) -> Optional[dict]:
        return await store_call(self.col.find_one_and_delete(
            {'_id': comment_id, 'owner': owner}))

    async def ids_by_video(self, video_id: ObjectId) -> List[ObjectId]:
        cursor = self.col.find({'video': video_id}, {'_id': 1})
        docs = await store_call(cursor.to_list(length=None))
        return [doc['_id'] for doc in docs]

    async def delete_by_video(self, video_id: ObjectId) -> int:
        result = await store_call(
            self.col.delete_many({'video': video_id}))
        return result.deleted_count
