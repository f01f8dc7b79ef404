"""Comments under videos: list, create, edit, delete."""

from __future__ import annotations

import logging

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from engagement_api.core.errors import NotFoundError, ValidationError
from engagement_api.models.comments import CommentView
from engagement_api.models.common import Page
from engagement_api.models.reactions import TargetKind
from engagement_api.services.guard import (parse_object_id,
                                           require_ownership, store_errors)
from engagement_api.services.query_engine import PageSpec, QueryEngine
from engagement_api.services.repositories.comments_repo import CommentsRepo
from engagement_api.services.repositories.reactions_repo import ReactionsRepo
from engagement_api.services.repositories.users_repo import UsersRepo
from engagement_api.services.repositories.videos_repo import VideosRepo
from engagement_api.services.views import COMMENTS

log = logging.getLogger(__name__)


def clean_content(content: str) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Content is required")
    return text


class CommentsService:
    """Owner-only edits; deleting a comment also drops its reactions."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.repo = CommentsRepo(db)
        self.videos = VideosRepo(db)
        self.users = UsersRepo(db)
        self.reactions = ReactionsRepo(db)
        self.engine = QueryEngine(db)

    async def list_comments(
            self,
            video_id: str,
            spec: PageSpec) -> Page[CommentView]:
        oid = parse_object_id(video_id, "video id")
        with store_errors("comment_list"):
            if not await self.videos.exists(oid):
                raise NotFoundError("Video not found")
            return await self.engine.query(
                COMMENTS, spec, CommentView.from_doc, scope={"video": oid})

    async def create_comment(
            self,
            actor: ObjectId,
            video_id: str,
            content: str) -> CommentView:
        oid = parse_object_id(video_id, "video id")
        text = clean_content(content)
        with store_errors("comment_create"):
            if not await self.videos.exists(oid):
                raise NotFoundError("Video not found")
            doc = await self.repo.insert(oid, actor, text)
            profile = await self.users.get_profile(actor)
        return CommentView.from_doc({**doc, "owner_details": profile})

    async def update_comment(
            self,
            actor: ObjectId,
            comment_id: str,
            content: str) -> CommentView:
        oid = parse_object_id(comment_id, "comment id")
        text = clean_content(content)
        with store_errors("comment_update"):
            doc = await self.repo.get_by_id(oid)
            if doc is None:
                raise NotFoundError("Comment not found")
            require_ownership(doc, actor)
            updated = await self.repo.update_content_owned(oid, actor, text)
            if updated is None:
                # удалили между чтением и записью
                raise NotFoundError("Comment not found")
            profile = await self.users.get_profile(actor)
        return CommentView.from_doc({**updated, "owner_details": profile})

    async def delete_comment(self, actor: ObjectId, comment_id: str) -> None:
        oid = parse_object_id(comment_id, "comment id")
        with store_errors("comment_delete"):
            doc = await self.repo.get_by_id(oid)
            if doc is None:
                raise NotFoundError("Comment not found")
            require_ownership(doc, actor)
            if await self.repo.delete_owned(oid, actor) is None:
                raise NotFoundError("Comment not found")
            dropped = await self.reactions.delete_for_targets(
                TargetKind.comment, [oid])
        log.info("comment_deleted",
                 extra={"comment_id": comment_id, "reactions": dropped})
