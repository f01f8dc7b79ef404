from http import HTTPStatus
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends

from engagement_api.dependencies import (current_actor,
                                         get_playlists_service,
                                         optional_actor, page_spec)
from engagement_api.models.common import ApiResponse, Page, ok
from engagement_api.models.playlists import (PlaylistCreateRequest,
                                             PlaylistDetailView,
                                             PlaylistUpdateRequest,
                                             PlaylistView)
from engagement_api.services.playlists_service import PlaylistsService
from engagement_api.services.query_engine import PageSpec

router = APIRouter(prefix="/api/v1/playlists", tags=["playlists"])


@router.post(
    "",
    response_model=ApiResponse[PlaylistView],
    status_code=HTTPStatus.CREATED)
async def create_playlist(
    body: PlaylistCreateRequest,
    actor: ObjectId = Depends(current_actor),
    svc: PlaylistsService = Depends(get_playlists_service),
):
    playlist = await svc.create_playlist(actor, body)
    return ok(playlist, "Playlist created", HTTPStatus.CREATED)


@router.get(
    "/users/{owner_id}",
    response_model=ApiResponse[Page[PlaylistView]],
    status_code=HTTPStatus.OK)
async def list_playlists(
    owner_id: str,
    spec: PageSpec = Depends(page_spec),
    svc: PlaylistsService = Depends(get_playlists_service),
):
    page = await svc.list_playlists(owner_id, spec)
    return ok(page, "Playlists fetched")


@router.get(
    "/{playlist_id}",
    response_model=ApiResponse[PlaylistDetailView],
    status_code=HTTPStatus.OK)
async def get_playlist(
    playlist_id: str,
    actor: Optional[ObjectId] = Depends(optional_actor),
    svc: PlaylistsService = Depends(get_playlists_service),
):
    playlist = await svc.get_playlist(playlist_id, actor)
    return ok(playlist, "Playlist fetched")


@router.patch(
    "/{playlist_id}",
    response_model=ApiResponse[PlaylistView],
    status_code=HTTPStatus.OK)
async def update_playlist(
    playlist_id: str,
    body: PlaylistUpdateRequest,
    actor: ObjectId = Depends(current_actor),
    svc: PlaylistsService = Depends(get_playlists_service),
):
    playlist = await svc.update_playlist(actor, playlist_id, body)
    return ok(playlist, "Playlist updated")


@router.delete(
    "/{playlist_id}",
    response_model=ApiResponse[None],
    status_code=HTTPStatus.OK)
async def delete_playlist(
    playlist_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: PlaylistsService = Depends(get_playlists_service),
):
    await svc.delete_playlist(actor, playlist_id)
    return ok(None, "Playlist deleted")


@router.put(
    "/{playlist_id}/videos/{video_id}",
    response_model=ApiResponse[PlaylistView],
    status_code=HTTPStatus.OK)
async def add_video_to_playlist(
    playlist_id: str,
    video_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: PlaylistsService = Depends(get_playlists_service),
):
    playlist = await svc.add_video(actor, playlist_id, video_id)
    return ok(playlist, "Video added to playlist")


@router.delete(
    "/{playlist_id}/videos/{video_id}",
    response_model=ApiResponse[PlaylistView],
    status_code=HTTPStatus.OK)
async def remove_video_from_playlist(
    playlist_id: str,
    video_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: PlaylistsService = Depends(get_playlists_service),
):
    playlist = await svc.remove_video(actor, playlist_id, video_id)
    return ok(playlist, "Video removed from playlist")
