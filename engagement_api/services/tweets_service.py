"""Tweets: short text posts on a user's timeline."""

from __future__ import annotations

import logging

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from engagement_api.core.errors import NotFoundError
from engagement_api.models.common import Page
from engagement_api.models.reactions import TargetKind
from engagement_api.models.tweets import TweetView
from engagement_api.services.comments_service import clean_content
from engagement_api.services.guard import (parse_object_id,
                                           require_ownership, store_errors)
from engagement_api.services.query_engine import PageSpec, QueryEngine
from engagement_api.services.repositories.reactions_repo import ReactionsRepo
from engagement_api.services.repositories.tweets_repo import TweetsRepo
from engagement_api.services.repositories.users_repo import UsersRepo
from engagement_api.services.views import TWEETS

log = logging.getLogger(__name__)


class TweetsService:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.repo = TweetsRepo(db)
        self.users = UsersRepo(db)
        self.reactions = ReactionsRepo(db)
        self.engine = QueryEngine(db)

    async def create_tweet(self, actor: ObjectId, content: str) -> TweetView:
        text = clean_content(content)
        with store_errors("tweet_create"):
            doc = await self.repo.insert(actor, text)
            profile = await self.users.get_profile(actor)
        return TweetView.from_doc({**doc, "owner_details": profile})

    async def list_tweets(
            self,
            owner_id: str,
            spec: PageSpec) -> Page[TweetView]:
        oid = parse_object_id(owner_id, "user id")
        with store_errors("tweet_list"):
            if not await self.users.exists(oid):
                raise NotFoundError("User not found")
            return await self.engine.query(
                TWEETS, spec, TweetView.from_doc, scope={"owner": oid})

    async def update_tweet(
            self,
            actor: ObjectId,
            tweet_id: str,
            content: str) -> TweetView:
        oid = parse_object_id(tweet_id, "tweet id")
        text = clean_content(content)
        with store_errors("tweet_update"):
            doc = await self.repo.get_by_id(oid)
            if doc is None:
                raise NotFoundError("Tweet not found")
            require_ownership(doc, actor)
            updated = await self.repo.update_content_owned(oid, actor, text)
            if updated is None:
                raise NotFoundError("Tweet not found")
            profile = await self.users.get_profile(actor)
        return TweetView.from_doc({**updated, "owner_details": profile})

    async def delete_tweet(self, actor: ObjectId, tweet_id: str) -> None:
        oid = parse_object_id(tweet_id, "tweet id")
        with store_errors("tweet_delete"):
            doc = await self.repo.get_by_id(oid)
            if doc is None:
                raise NotFoundError("Tweet not found")
            require_ownership(doc, actor)
            if await self.repo.delete_owned(oid, actor) is None:
                raise NotFoundError("Tweet not found")
            dropped = await self.reactions.delete_for_targets(
                TargetKind.tweet, [oid])
        log.info("tweet_deleted",
                 extra={"tweet_id": tweet_id, "reactions": dropped})
