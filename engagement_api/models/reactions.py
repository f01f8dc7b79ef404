from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional

from bson import ObjectId
from pydantic import Field

from engagement_api.models.common import ApiModel, ObjectIdStr


class ReactionKind(str, Enum):
    like = "like"
    dislike = "dislike"

    @property
    def opposite(self) -> "ReactionKind":
        if self is ReactionKind.like:
            return ReactionKind.dislike
        return ReactionKind.like


class TargetKind(str, Enum):
    video = "video"
    comment = "comment"
    tweet = "tweet"


class TargetRef(NamedTuple):
    """Exactly one video, comment or tweet, by kind + id."""

    kind: TargetKind
    id: ObjectId


class ToggleAction(str, Enum):
    added = "added"
    removed = "removed"
    switched = "switched"


class ToggleResult(ApiModel):
    action: ToggleAction
    kind: ReactionKind
    # только для switched
    from_kind: Optional[ReactionKind] = Field(default=None, alias="from")
    to_kind: Optional[ReactionKind] = Field(default=None, alias="to")
    target_kind: TargetKind
    target_id: ObjectIdStr
    # счётчики есть только у видео
    likes_count: Optional[int] = None
    dislikes_count: Optional[int] = None


class ReactionState(ApiModel):
    target_kind: TargetKind
    target_id: ObjectIdStr
    kind: Optional[ReactionKind] = None  # None = реакции нет
