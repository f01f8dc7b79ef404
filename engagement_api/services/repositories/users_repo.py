from __future__ import annotations

from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from engagement_api.db.mongo import store_call

# публичный профиль, который подклеивается к видео/комментам/твитам
PUBLIC_PROFILE = {"username": 1, "full_name": 1, "email": 1, "avatar": 1}


class UsersRepo:
    """Read-only access: users are registered by the auth service."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["users"]

    async def get_profile(self, user_id: ObjectId) -> Optional[dict]:
        return await store_call(
            self.col.find_one({"_id": user_id}, PUBLIC_PROFILE))

    async def exists(self, user_id: ObjectId) -> bool:
        doc = await store_call(
            self.col.find_one({"_id": user_id}, {"_id": 1}))
        return doc is not None
