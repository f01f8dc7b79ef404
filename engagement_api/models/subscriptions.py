from datetime import datetime
from typing import Optional

from engagement_api.models.common import ApiModel, ObjectIdStr, OwnerProfile


class SubscriptionToggleResult(ApiModel):
    channel: ObjectIdStr
    subscribed: bool
    subscribers_count: int


class SubscriberView(ApiModel):
    """One row of a channel's subscriber list."""

    subscriber: ObjectIdStr
    subscriber_details: Optional[OwnerProfile] = None
    # подписан ли запрашивающий на этого подписчика
    is_subscribed_to: bool = False
    subscribed_at: Optional[datetime] = None


class SubscribedChannelView(ApiModel):
    """One row of the channels a user is subscribed to."""

    channel: ObjectIdStr
    channel_details: Optional[OwnerProfile] = None
    subscribers_count: int = 0
    is_subscribed_to: bool = False
    subscribed_at: Optional[datetime] = None
