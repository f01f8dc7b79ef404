from datetime import datetime
from typing import Optional

from pydantic import Field

from engagement_api.models.common import ApiModel, ObjectIdStr, OwnerProfile


class CommentWriteRequest(ApiModel):
    # пустоту после strip проверяет сервис, тут только лимит
    content: str = Field(max_length=10_000)


class CommentView(ApiModel):
    id: ObjectIdStr
    content: str
    video: ObjectIdStr
    owner: ObjectIdStr
    owner_details: Optional[OwnerProfile] = None
    likes_count: int = 0
    dislikes_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "CommentView":
        return cls.model_validate({**doc, "id": doc["_id"]})
