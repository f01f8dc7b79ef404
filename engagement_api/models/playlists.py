from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from engagement_api.models.common import ApiModel, ObjectIdStr


class PlaylistCreateRequest(ApiModel):
    name: str = Field(max_length=150)
    description: str = Field(default="", max_length=5_000)


class PlaylistUpdateRequest(ApiModel):
    name: str = Field(max_length=150)
    description: Optional[str] = Field(default=None, max_length=5_000)


class PlaylistVideoEntry(ApiModel):
    id: ObjectIdStr
    title: str = ""
    thumbnail: Optional[str] = None
    video_file: Optional[str] = None
    duration: float = 0
    views: int = 0
    likes_count: int = 0
    dislikes_count: int = 0


class PlaylistView(ApiModel):
    id: ObjectIdStr
    name: str
    description: str = ""
    owner: ObjectIdStr
    videos: List[ObjectIdStr] = Field(default_factory=list)
    videos_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "PlaylistView":
        videos = doc.get("videos") or []
        return cls.model_validate({
            **doc,
            "id": doc["_id"],
            "videos_count": doc.get("videos_count", len(videos)),
        })


class PlaylistDetailView(PlaylistView):
    video_details: List[PlaylistVideoEntry] = Field(default_factory=list)

    @classmethod
    def from_doc(cls, doc: dict) -> "PlaylistDetailView":
        # $lookup порядок не сохраняет, восстанавливаем по playlist.videos
        by_id = {str(v["_id"]): v for v in doc.get("video_details") or []}
        ordered = [
            {**by_id[str(vid)], "id": by_id[str(vid)]["_id"]}
            for vid in doc.get("videos") or []
            if str(vid) in by_id
        ]
        return cls.model_validate({
            **doc,
            "id": doc["_id"],
            "videos_count": len(doc.get("videos") or []),
            "video_details": ordered,
        })
