"""Resolve a (kind, id) pair into an existing reaction target."""

from __future__ import annotations

from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from engagement_api.core.errors import NotFoundError, ValidationError
from engagement_api.models.reactions import TargetKind, TargetRef
from engagement_api.services.guard import parse_object_id
from engagement_api.services.repositories.comments_repo import CommentsRepo
from engagement_api.services.repositories.tweets_repo import TweetsRepo
from engagement_api.services.repositories.videos_repo import VideosRepo


class TargetResolver:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.videos = VideosRepo(db)
        self.comments = CommentsRepo(db)
        self.tweets = TweetsRepo(db)

    async def resolve(self, kind: TargetKind, raw_id: Any) -> TargetRef:
        """TargetRef for an existing entity; NotFoundError otherwise."""
        target_id = parse_object_id(raw_id, f"{kind.value} id")
        if kind is TargetKind.video:
            found = await self.videos.exists(target_id)
        elif kind is TargetKind.comment:
            found = await self.comments.get_by_id(target_id) is not None
        else:
            found = await self.tweets.get_by_id(target_id) is not None
        if not found:
            raise NotFoundError(f"{kind.value.capitalize()} not found")
        return TargetRef(kind, target_id)

    async def resolve_comment_under_video(
        self,
        raw_video_id: Any,
        raw_comment_id: Any,
    ) -> TargetRef:
        """Comment target, checked against the video it was posted under."""
        video_id = parse_object_id(raw_video_id, "video id")
        comment_id = parse_object_id(raw_comment_id, "comment id")
        comment = await self.comments.get_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment['video'] != video_id:
            raise ValidationError(
                "This comment does not exist for particular video")
        return TargetRef(TargetKind.comment, comment_id)
