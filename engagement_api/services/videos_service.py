"""Video metadata: publish, read, edit, delete, feed."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from engagement_api.core.errors import (ConflictError, NotFoundError,
                                        ValidationError)
from engagement_api.models.common import Page
from engagement_api.models.reactions import TargetKind
from engagement_api.models.videos import (PublishState, VideoPublishRequest,
                                          VideoUpdateRequest, VideoView,
                                          split_tags)
from engagement_api.services.guard import (parse_object_id,
                                           require_ownership, store_errors)
from engagement_api.services.query_engine import (AnyOf, Contains, Eq,
                                                  PageSpec, QueryEngine)
from engagement_api.services.repositories.comments_repo import CommentsRepo
from engagement_api.services.repositories.playlists_repo import PlaylistsRepo
from engagement_api.services.repositories.reactions_repo import ReactionsRepo
from engagement_api.services.repositories.users_repo import UsersRepo
from engagement_api.services.repositories.videos_repo import VideosRepo
from engagement_api.services.views import VIDEOS

log = logging.getLogger(__name__)


class VideosService:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.repo = VideosRepo(db)
        self.users = UsersRepo(db)
        self.comments = CommentsRepo(db)
        self.reactions = ReactionsRepo(db)
        self.playlists = PlaylistsRepo(db)
        self.engine = QueryEngine(db)

    async def publish_video(
            self,
            actor: ObjectId,
            data: VideoPublishRequest) -> VideoView:
        with store_errors("video_publish"):
            doc = await self.repo.insert(actor, data.model_dump())
            profile = await self.users.get_profile(actor)
        log.info("video_published",
                 extra={"video_id": str(doc["_id"]), "owner": str(actor)})
        return VideoView.from_doc({**doc, "owner_details": profile})

    async def get_video(
            self,
            actor: Optional[ObjectId],
            video_id: str) -> VideoView:
        """Unpublished videos are only visible to their owner."""
        oid = parse_object_id(video_id, "video id")
        with store_errors("video_get"):
            doc = await self.repo.get_by_id(oid)
            if doc is None or (
                    not doc.get("is_published", True)
                    and doc.get("owner") != actor):
                raise NotFoundError("Video not found")
            profile = await self.users.get_profile(doc["owner"])
        return VideoView.from_doc({**doc, "owner_details": profile})

    async def update_video(
            self,
            actor: ObjectId,
            video_id: str,
            data: VideoUpdateRequest) -> VideoView:
        oid = parse_object_id(video_id, "video id")
        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError("Nothing to update")
        with store_errors("video_update"):
            doc = await self.repo.get_by_id(oid)
            if doc is None:
                raise NotFoundError("Video not found")
            require_ownership(doc, actor)
            updated = await self.repo.update_owned(oid, actor, changes)
            if updated is None:
                raise NotFoundError("Video not found")
            profile = await self.users.get_profile(actor)
        return VideoView.from_doc({**updated, "owner_details": profile})

    async def delete_video(self, actor: ObjectId, video_id: str) -> None:
        """Conditional delete, then best-effort cleanup of what hung off it."""
        oid = parse_object_id(video_id, "video id")
        with store_errors("video_delete"):
            doc = await self.repo.get_by_id(oid)
            if doc is None:
                raise NotFoundError("Video not found")
            require_ownership(doc, actor)
            if await self.repo.delete_owned(oid, actor) is None:
                raise NotFoundError("Video not found")

            comment_ids = await self.comments.ids_by_video(oid)
            await self.reactions.delete_for_targets(
                TargetKind.comment, comment_ids)
            await self.comments.delete_by_video(oid)
            await self.reactions.delete_for_targets(TargetKind.video, [oid])
            await self.playlists.pull_video_everywhere(oid)
        log.info("video_deleted",
                 extra={"video_id": video_id, "comments": len(comment_ids)})

    async def toggle_publish_status(
            self,
            actor: ObjectId,
            video_id: str) -> PublishState:
        oid = parse_object_id(video_id, "video id")
        with store_errors("video_publish_toggle"):
            doc = await self.repo.get_by_id(oid)
            if doc is None:
                raise NotFoundError("Video not found")
            require_ownership(doc, actor)
            updated = await self.repo.set_published(
                oid, actor, bool(doc.get("is_published", True)))
            if updated is None:
                raise ConflictError("Publish status changed concurrently")
        return PublishState(id=oid, is_published=updated["is_published"])

    async def list_videos(
        self,
        actor: Optional[ObjectId],
        spec: PageSpec,
        owner: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> Page[VideoView]:
        """Feed of published videos; an owner also sees their drafts."""
        filters = dict(spec.filters)
        owner_id = None
        if owner:
            owner_id = parse_object_id(owner, "owner id")
            filters["owner"] = Eq(owner_id)
        if category:
            filters["category"] = Contains(category)
        tag_list = split_tags(tags)
        if tag_list:
            filters["tags"] = AnyOf(tuple(tag_list))

        scope = None
        if actor is None or owner_id != actor:
            scope = {"is_published": True}

        page_spec = replace(spec, filters=filters)
        with store_errors("video_list"):
            return await self.engine.query(
                VIDEOS, page_spec, VideoView.from_doc,
                scope=scope, actor=actor)
