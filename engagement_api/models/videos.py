from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from engagement_api.models.common import ApiModel, ObjectIdStr, OwnerProfile


def split_tags(value) -> List[str]:
    """'a, b,a' -> ['a', 'b']: trimmed, de-duplicated, order kept."""
    if value is None:
        return []
    raw = value.split(",") if isinstance(value, str) else list(value)
    tags: List[str] = []
    for tag in raw:
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class VideoPublishRequest(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5_000)
    category: str = Field(min_length=1, max_length=100)
    tags: List[str] = Field(default_factory=list)
    # URL-ы и длительность отдаёт внешний сервис загрузки/транскодинга
    video_file: str = Field(min_length=1)
    thumbnail: str = Field(min_length=1)
    duration: float = Field(ge=0)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return split_tags(value)


class VideoUpdateRequest(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1,
                                       max_length=5_000)
    category: Optional[str] = Field(default=None, min_length=1,
                                    max_length=100)
    tags: Optional[List[str]] = None
    # новый thumbnail/файл загружен снаружи, здесь только URL
    video_file: Optional[str] = Field(default=None, min_length=1)
    thumbnail: Optional[str] = Field(default=None, min_length=1)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        return None if value is None else split_tags(value)


class VideoView(ApiModel):
    id: ObjectIdStr
    title: str
    description: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    video_file: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: float = 0
    views: int = 0
    is_published: bool = True
    owner: ObjectIdStr
    owner_details: Optional[OwnerProfile] = None
    likes_count: int = 0
    dislikes_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "VideoView":
        likes = doc.get("likes_count", len(doc.get("likes") or []))
        dislikes = doc.get("dislikes_count",
                           len(doc.get("dislikes") or []))
        return cls.model_validate({**doc, "id": doc["_id"],
                                   "likes_count": likes,
                                   "dislikes_count": dislikes})


class PublishState(ApiModel):
    id: ObjectIdStr
    is_published: bool
