from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument

from engagement_api.db.mongo import store_call


class TweetsRepo:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db['tweets']

    async def ensure_indexes(self) -> None:
        await store_call(self.col.create_index(
            [('owner', ASCENDING), ('created_at', ASCENDING)],
            name='tweets_owner_created',
        ))

    async def insert(self, owner: ObjectId, content: str) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        doc = {
            'content': content,
            'owner': owner,
            'created_at': now,
            'updated_at': now,
        }
        result = await store_call(self.col.insert_one(doc))
        doc['_id'] = result.inserted_id
        return doc

    async def get_by_id(self, tweet_id: ObjectId) -> Optional[dict]:
        return await store_call(self.col.find_one({'_id': tweet_id}))

    async def update_content_owned(
            self,
            tweet_id: ObjectId,
            owner: ObjectId,
            content: str) -> Optional[dict]:
        return await store_call(self.col.find_one_and_update(
            {'_id': tweet_id, 'owner': owner},
            {'$set': {
                'content': content,
                'updated_at': datetime.now(timezone.utc),
            }},
            return_document=ReturnDocument.AFTER,
        ))

    async def delete_owned(
            self,
            tweet_id: ObjectId,
            owner: ObjectId) -> Optional[dict]:
        return await store_call(self.col.find_one_and_delete(
            {'_id': tweet_id, 'owner': owner}))
