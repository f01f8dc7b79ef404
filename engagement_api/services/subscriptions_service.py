"""Channel subscriptions: toggle and the two list views."""

from __future__ import annotations

import logging
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from engagement_api.core.config import settings
from engagement_api.core.errors import (ConflictError, NotFoundError,
                                        ValidationError)
from engagement_api.models.common import Page
from engagement_api.models.subscriptions import (SubscribedChannelView,
                                                 SubscriberView,
                                                 SubscriptionToggleResult)
from engagement_api.services.guard import parse_object_id, store_errors
from engagement_api.services.query_engine import PageSpec, QueryEngine
from engagement_api.services.repositories.subscriptions_repo import \
    SubscriptionsRepo
from engagement_api.services.repositories.users_repo import UsersRepo
from engagement_api.services.views import SUBSCRIBED_CHANNELS, SUBSCRIBERS

log = logging.getLogger(__name__)


def _subscriber_row(doc: dict) -> SubscriberView:
    return SubscriberView.model_validate(
        {**doc, "subscribed_at": doc.get("created_at")})


def _channel_row(doc: dict) -> SubscribedChannelView:
    return SubscribedChannelView.model_validate(
        {**doc, "subscribed_at": doc.get("created_at")})


class SubscriptionsService:
    def __init__(
            self,
            db: AsyncIOMotorDatabase,
            max_attempts: Optional[int] = None) -> None:
        self.repo = SubscriptionsRepo(db)
        self.users = UsersRepo(db)
        self.engine = QueryEngine(db)
        self.max_attempts = max_attempts or settings.toggle_max_attempts

    async def toggle_subscription(
            self,
            actor: ObjectId,
            channel_id: str) -> SubscriptionToggleResult:
        """Subscribe if not subscribed, unsubscribe otherwise."""
        channel = parse_object_id(channel_id, "channel id")
        if channel == actor:
            raise ValidationError("You cannot subscribe to your own channel")

        with store_errors("subscription_toggle"):
            if not await self.users.exists(channel):
                raise NotFoundError("Channel not found")
            for _ in range(self.max_attempts):
                subscribed = await self._attempt(actor, channel)
                if subscribed is not None:
                    break
            else:
                raise ConflictError(
                    "Subscription changed concurrently, try again")
            count = await self.repo.count_by_channel(channel)

        log.info(
            "subscription_toggled",
            extra={"subscriber": str(actor), "channel": channel_id,
                   "subscribed": subscribed},
        )
        return SubscriptionToggleResult(
            channel=channel, subscribed=subscribed, subscribers_count=count)

    async def _attempt(
            self,
            actor: ObjectId,
            channel: ObjectId) -> Optional[bool]:
        existing = await self.repo.find(actor, channel)
        if existing is None:
            try:
                await self.repo.insert(actor, channel)
            except DuplicateKeyError:
                # параллельный запрос уже подписал: результат тот же
                return True
            return True
        if await self.repo.delete_by_id(existing["_id"]):
            return False
        if await self.repo.find(actor, channel) is None:
            return False
        return None

    async def list_subscribers(
        self,
        channel_id: str,
        spec: PageSpec,
        actor: Optional[ObjectId] = None,
    ) -> Page[SubscriberView]:
        channel = parse_object_id(channel_id, "channel id")
        with store_errors("subscriber_list"):
            if not await self.users.exists(channel):
                raise NotFoundError("Channel not found")
            return await self.engine.query(
                SUBSCRIBERS, spec, _subscriber_row,
                scope={"channel": channel}, actor=actor)

    async def list_subscribed_channels(
        self,
        subscriber_id: str,
        spec: PageSpec,
        actor: Optional[ObjectId] = None,
    ) -> Page[SubscribedChannelView]:
        subscriber = parse_object_id(subscriber_id, "subscriber id")
        with store_errors("subscribed_channel_list"):
            if not await self.users.exists(subscriber):
                raise NotFoundError("User not found")
            return await self.engine.query(
                SUBSCRIBED_CHANNELS, spec, _channel_row,
                scope={"subscriber": subscriber}, actor=actor)
