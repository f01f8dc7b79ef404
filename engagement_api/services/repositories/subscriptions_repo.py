from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from engagement_api.db.mongo import store_call


class SubscriptionsRepo:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["subscriptions"]

    async def ensure_indexes(self) -> None:
        await store_call(self.col.create_index(
            [("subscriber", ASCENDING), ("channel", ASCENDING)],
            unique=True, name="subscriptions_subscriber_channel"))
        await store_call(self.col.create_index(
            [("channel", ASCENDING), ("created_at", DESCENDING)],
            name="subscriptions_channel_created_desc"))

    async def find(
            self,
            subscriber: ObjectId,
            channel: ObjectId) -> Optional[Dict[str, Any]]:
        return await store_call(self.col.find_one(
            {"subscriber": subscriber, "channel": channel}))

    async def insert(
            self,
            subscriber: ObjectId,
            channel: ObjectId) -> Dict[str, Any]:
        """DuplicateKeyError, если пара уже есть."""
        doc = {
            "subscriber": subscriber,
            "channel": channel,
            "created_at": datetime.now(timezone.utc),
        }
        res = await store_call(self.col.insert_one(doc))
        doc["_id"] = res.inserted_id
        return doc

    async def delete_by_id(self, subscription_id: ObjectId) -> bool:
        res = await store_call(
            self.col.delete_one({"_id": subscription_id}))
        return res.deleted_count == 1

    async def count_by_channel(self, channel: ObjectId) -> int:
        return await store_call(
            self.col.count_documents({"channel": channel}))
