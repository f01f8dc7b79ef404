from enum import Enum
from http import HTTPStatus

from bson import ObjectId
from fastapi import APIRouter, Depends

from engagement_api.dependencies import current_actor, get_reactions_service
from engagement_api.models.common import ApiResponse, ok
from engagement_api.models.reactions import (ReactionKind, ReactionState,
                                             TargetKind, ToggleResult)
from engagement_api.services.reactions_service import ReactionsService

router = APIRouter(prefix="/api/v1/reactions", tags=["reactions"])


class TargetCollection(str, Enum):
    videos = "videos"
    comments = "comments"
    tweets = "tweets"


TARGET_KINDS = {
    TargetCollection.videos: TargetKind.video,
    TargetCollection.comments: TargetKind.comment,
    TargetCollection.tweets: TargetKind.tweet,
}


@router.post(
    "/{kind}/videos/{video_id}",
    response_model=ApiResponse[ToggleResult],
    status_code=HTTPStatus.OK)
async def toggle_video_reaction(
    kind: ReactionKind,
    video_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: ReactionsService = Depends(get_reactions_service),
):
    result = await svc.toggle_reaction(
        actor, TargetKind.video, video_id, kind)
    return ok(result, f"Video {kind.value} {result.action.value}")


@router.post(
    "/{kind}/videos/{video_id}/comments/{comment_id}",
    response_model=ApiResponse[ToggleResult],
    status_code=HTTPStatus.OK)
async def toggle_comment_reaction(
    kind: ReactionKind,
    video_id: str,
    comment_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: ReactionsService = Depends(get_reactions_service),
):
    result = await svc.toggle_reaction(
        actor, TargetKind.comment, comment_id, kind, video_id=video_id)
    return ok(result, f"Comment {kind.value} {result.action.value}")


@router.post(
    "/{kind}/tweets/{tweet_id}",
    response_model=ApiResponse[ToggleResult],
    status_code=HTTPStatus.OK)
async def toggle_tweet_reaction(
    kind: ReactionKind,
    tweet_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: ReactionsService = Depends(get_reactions_service),
):
    result = await svc.toggle_reaction(
        actor, TargetKind.tweet, tweet_id, kind)
    return ok(result, f"Tweet {kind.value} {result.action.value}")


@router.get(
    "/{target}/{target_id}",
    response_model=ApiResponse[ReactionState],
    status_code=HTTPStatus.OK)
async def get_reaction(
    target: TargetCollection,
    target_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: ReactionsService = Depends(get_reactions_service),
):
    state = await svc.get_state(actor, TARGET_KINDS[target], target_id)
    return ok(state, "Reaction fetched")
