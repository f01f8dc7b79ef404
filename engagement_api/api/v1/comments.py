from http import HTTPStatus

from bson import ObjectId
from fastapi import APIRouter, Depends

from engagement_api.dependencies import (current_actor, get_comments_service,
                                         page_spec)
from engagement_api.models.comments import CommentView, CommentWriteRequest
from engagement_api.models.common import ApiResponse, Page, ok
from engagement_api.services.comments_service import CommentsService
from engagement_api.services.query_engine import PageSpec

router = APIRouter(prefix="/api/v1", tags=["comments"])


@router.get(
    "/videos/{video_id}/comments",
    response_model=ApiResponse[Page[CommentView]],
    status_code=HTTPStatus.OK)
async def list_comments(
    video_id: str,
    spec: PageSpec = Depends(page_spec),
    svc: CommentsService = Depends(get_comments_service),
):
    page = await svc.list_comments(video_id, spec)
    return ok(page, "Comments fetched")


@router.post(
    "/videos/{video_id}/comments",
    response_model=ApiResponse[CommentView],
    status_code=HTTPStatus.CREATED)
async def create_comment(
    video_id: str,
    body: CommentWriteRequest,
    actor: ObjectId = Depends(current_actor),
    svc: CommentsService = Depends(get_comments_service),
):
    comment = await svc.create_comment(actor, video_id, body.content)
    return ok(comment, "Comment added", HTTPStatus.CREATED)


@router.patch(
    "/comments/{comment_id}",
    response_model=ApiResponse[CommentView],
    status_code=HTTPStatus.OK)
async def update_comment(
    comment_id: str,
    body: CommentWriteRequest,
    actor: ObjectId = Depends(current_actor),
    svc: CommentsService = Depends(get_comments_service),
):
    comment = await svc.update_comment(actor, comment_id, body.content)
    return ok(comment, "Comment updated")


@router.delete(
    "/comments/{comment_id}",
    response_model=ApiResponse[None],
    status_code=HTTPStatus.OK)
async def delete_comment(
    comment_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: CommentsService = Depends(get_comments_service),
):
    await svc.delete_comment(actor, comment_id)
    return ok(None, "Comment deleted")
