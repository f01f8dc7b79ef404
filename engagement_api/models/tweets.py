from datetime import datetime
from typing import Optional

from pydantic import Field

from engagement_api.models.common import ApiModel, ObjectIdStr, OwnerProfile


class TweetWriteRequest(ApiModel):
    content: str = Field(max_length=280 * 4)


class TweetView(ApiModel):
    id: ObjectIdStr
    content: str
    owner: ObjectIdStr
    owner_details: Optional[OwnerProfile] = None
    likes_count: int = 0
    dislikes_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "TweetView":
        return cls.model_validate({**doc, "id": doc["_id"]})
