from http import HTTPStatus
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends

from engagement_api.dependencies import (current_actor,
                                         get_subscriptions_service,
                                         optional_actor, page_spec)
from engagement_api.models.common import ApiResponse, Page, ok
from engagement_api.models.subscriptions import (SubscribedChannelView,
                                                 SubscriberView,
                                                 SubscriptionToggleResult)
from engagement_api.services.query_engine import PageSpec
from engagement_api.services.subscriptions_service import \
    SubscriptionsService

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


@router.post(
    "/channels/{channel_id}",
    response_model=ApiResponse[SubscriptionToggleResult],
    status_code=HTTPStatus.OK)
async def toggle_subscription(
    channel_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: SubscriptionsService = Depends(get_subscriptions_service),
):
    result = await svc.toggle_subscription(actor, channel_id)
    message = "Subscribed" if result.subscribed else "Unsubscribed"
    return ok(result, message)


@router.get(
    "/channels/{channel_id}/subscribers",
    response_model=ApiResponse[Page[SubscriberView]],
    status_code=HTTPStatus.OK)
async def list_subscribers(
    channel_id: str,
    spec: PageSpec = Depends(page_spec),
    actor: Optional[ObjectId] = Depends(optional_actor),
    svc: SubscriptionsService = Depends(get_subscriptions_service),
):
    page = await svc.list_subscribers(channel_id, spec, actor)
    return ok(page, "Subscribers fetched")


@router.get(
    "/users/{subscriber_id}/channels",
    response_model=ApiResponse[Page[SubscribedChannelView]],
    status_code=HTTPStatus.OK)
async def list_subscribed_channels(
    subscriber_id: str,
    spec: PageSpec = Depends(page_spec),
    actor: Optional[ObjectId] = Depends(optional_actor),
    svc: SubscriptionsService = Depends(get_subscriptions_service),
):
    page = await svc.list_subscribed_channels(subscriber_id, spec, actor)
    return ok(page, "Subscribed channels fetched")
