from http import HTTPStatus
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query

from engagement_api.dependencies import (current_actor, get_videos_service,
                                         optional_actor,
                                         search_page_spec)
from engagement_api.models.common import ApiResponse, Page, ok
from engagement_api.models.videos import (PublishState, VideoPublishRequest,
                                          VideoUpdateRequest, VideoView)
from engagement_api.services.query_engine import PageSpec
from engagement_api.services.videos_service import VideosService

router = APIRouter(prefix="/api/v1/videos", tags=["videos"])


@router.get(
    "",
    response_model=ApiResponse[Page[VideoView]],
    status_code=HTTPStatus.OK)
async def list_videos(
    owner: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    tags: Optional[str] = Query(None),
    spec: PageSpec = Depends(search_page_spec),
    actor: Optional[ObjectId] = Depends(optional_actor),
    svc: VideosService = Depends(get_videos_service),
):
    page = await svc.list_videos(
        actor, spec, owner=owner, category=category, tags=tags)
    return ok(page, "Videos fetched")


@router.post(
    "",
    response_model=ApiResponse[VideoView],
    status_code=HTTPStatus.CREATED)
async def publish_video(
    body: VideoPublishRequest,
    actor: ObjectId = Depends(current_actor),
    svc: VideosService = Depends(get_videos_service),
):
    video = await svc.publish_video(actor, body)
    return ok(video, "Video published", HTTPStatus.CREATED)


@router.get(
    "/{video_id}",
    response_model=ApiResponse[VideoView],
    status_code=HTTPStatus.OK)
async def get_video(
    video_id: str,
    actor: Optional[ObjectId] = Depends(optional_actor),
    svc: VideosService = Depends(get_videos_service),
):
    return ok(await svc.get_video(actor, video_id), "Video fetched")


@router.patch(
    "/{video_id}",
    response_model=ApiResponse[VideoView],
    status_code=HTTPStatus.OK)
async def update_video(
    video_id: str,
    body: VideoUpdateRequest,
    actor: ObjectId = Depends(current_actor),
    svc: VideosService = Depends(get_videos_service),
):
    video = await svc.update_video(actor, video_id, body)
    return ok(video, "Video updated")


@router.delete(
    "/{video_id}",
    response_model=ApiResponse[None],
    status_code=HTTPStatus.OK)
async def delete_video(
    video_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: VideosService = Depends(get_videos_service),
):
    await svc.delete_video(actor, video_id)
    return ok(None, "Video deleted")


@router.patch(
    "/{video_id}/publish",
    response_model=ApiResponse[PublishState],
    status_code=HTTPStatus.OK)
async def toggle_publish_status(
    video_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: VideosService = Depends(get_videos_service),
):
    state = await svc.toggle_publish_status(actor, video_id)
    return ok(state, "Publish status toggled")
