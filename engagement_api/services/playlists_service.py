"""Playlists: named, ordered, duplicate-free lists of videos per owner.

Delete and video add/remove are single writes conditional on the owner,
so a playlist that is missing and one that belongs to somebody else look
the same to the caller: NotFoundError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from engagement_api.core.errors import (ConflictError, NotFoundError,
                                        ValidationError)
from engagement_api.db.mongo import store_call
from engagement_api.models.common import Page
from engagement_api.models.playlists import (PlaylistCreateRequest,
                                             PlaylistDetailView,
                                             PlaylistUpdateRequest,
                                             PlaylistView)
from engagement_api.services.guard import (parse_object_id,
                                           require_ownership, store_errors)
from engagement_api.services.query_engine import PageSpec, QueryEngine
from engagement_api.services.repositories.playlists_repo import PlaylistsRepo
from engagement_api.services.repositories.users_repo import UsersRepo
from engagement_api.services.repositories.videos_repo import VideosRepo
from engagement_api.services.views import (PLAYLISTS,
                                           playlist_detail_pipeline)

log = logging.getLogger(__name__)

DUPLICATE_NAME = "Playlist with this name already exists"


def clean_name(name: str) -> str:
    text = (name or "").strip()
    if not text:
        raise ValidationError("Playlist name is required")
    return text


class PlaylistsService:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.repo = PlaylistsRepo(db)
        self.videos = VideosRepo(db)
        self.users = UsersRepo(db)
        self.engine = QueryEngine(db)

    # ---------- read ----------

    async def list_playlists(
            self,
            owner_id: str,
            spec: PageSpec) -> Page[PlaylistView]:
        oid = parse_object_id(owner_id, "user id")
        with store_errors("playlist_list"):
            if not await self.users.exists(oid):
                raise NotFoundError("User not found")
            return await self.engine.query(
                PLAYLISTS, spec, PlaylistView.from_doc, scope={"owner": oid})

    async def get_playlist(
            self,
            playlist_id: str,
            actor: Optional[ObjectId] = None) -> PlaylistDetailView:
        oid = parse_object_id(playlist_id, "playlist id")
        with store_errors("playlist_get"):
            cursor = self.repo.col.aggregate(
                playlist_detail_pipeline(oid, actor))
            docs = await store_call(cursor.to_list(length=1))
        if not docs:
            raise NotFoundError("Playlist not found")
        return PlaylistDetailView.from_doc(docs[0])

    # ---------- write ----------

    async def create_playlist(
            self,
            actor: ObjectId,
            data: PlaylistCreateRequest) -> PlaylistView:
        name = clean_name(data.name)
        with store_errors("playlist_create"):
            if await self.repo.name_taken(actor, name):
                raise ConflictError(DUPLICATE_NAME)
            try:
                doc = await self.repo.insert(
                    actor, name, data.description.strip())
            except DuplicateKeyError:
                # тот же name успели создать параллельно
                raise ConflictError(DUPLICATE_NAME) from None
        log.info("playlist_created",
                 extra={"playlist_id": str(doc["_id"]), "owner": str(actor)})
        return PlaylistView.from_doc(doc)

    async def update_playlist(
            self,
            actor: ObjectId,
            playlist_id: str,
            data: PlaylistUpdateRequest) -> PlaylistView:
        oid = parse_object_id(playlist_id, "playlist id")
        changes: Dict[str, Any] = {"name": clean_name(data.name)}
        if data.description is not None:
            changes["description"] = data.description.strip()
        with store_errors("playlist_update"):
            doc = await self.repo.get_by_id(oid)
            if doc is None:
                raise NotFoundError("Playlist not found")
            require_ownership(doc, actor)
            if await self.repo.name_taken(actor, changes["name"], oid):
                raise ConflictError(DUPLICATE_NAME)
            try:
                updated = await self.repo.update_owned(oid, actor, changes)
            except DuplicateKeyError:
                raise ConflictError(DUPLICATE_NAME) from None
            if updated is None:
                raise NotFoundError("Playlist not found")
        return PlaylistView.from_doc(updated)

    async def delete_playlist(self, actor: ObjectId, playlist_id: str) -> None:
        oid = parse_object_id(playlist_id, "playlist id")
        with store_errors("playlist_delete"):
            if await self.repo.delete_owned(oid, actor) is None:
                raise NotFoundError("Playlist not found")
        log.info("playlist_deleted", extra={"playlist_id": playlist_id})

    async def add_video(
            self,
            actor: ObjectId,
            playlist_id: str,
            video_id: str) -> PlaylistView:
        """Append a video; ConflictError if it is already in the list."""
        oid = parse_object_id(playlist_id, "playlist id")
        vid = parse_object_id(video_id, "video id")
        with store_errors("playlist_add_video"):
            if not await self.videos.exists(vid):
                raise NotFoundError("Video not found")
            updated = await self.repo.push_video_owned(oid, actor, vid)
            if updated is None:
                # не совпало: либо плейлиста нет/чужой, либо видео уже там
                if await self.repo.exists_owned(oid, actor):
                    raise ConflictError("Video already in playlist")
                raise NotFoundError("Playlist not found")
        return PlaylistView.from_doc(updated)

    async def remove_video(
            self,
            actor: ObjectId,
            playlist_id: str,
            video_id: str) -> PlaylistView:
        oid = parse_object_id(playlist_id, "playlist id")
        vid = parse_object_id(video_id, "video id")
        with store_errors("playlist_remove_video"):
            updated = await self.repo.pull_video_owned(oid, actor, vid)
            if updated is None:
                raise NotFoundError("Playlist or video not found")
        return PlaylistView.from_doc(updated)
