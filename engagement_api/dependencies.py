from typing import Optional

from bson import ObjectId
from fastapi import Depends, Header, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from engagement_api.db.mongo import get_mongo_db
from engagement_api.services.comments_service import CommentsService
from engagement_api.services.guard import require_actor
from engagement_api.services.playlists_service import PlaylistsService
from engagement_api.services.query_engine import PageSpec
from engagement_api.services.reactions_service import ReactionsService
from engagement_api.services.subscriptions_service import \
    SubscriptionsService
from engagement_api.services.tweets_service import TweetsService
from engagement_api.services.videos_service import VideosService


def current_actor(
        x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> ObjectId:
    # аутентификация выше по цепочке, заголовок считаем проверенным
    return require_actor(x_user_id)


def optional_actor(
        x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> Optional[ObjectId]:
    if not x_user_id:
        return None
    return require_actor(x_user_id)


def page_spec(
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None, alias="pageSize"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_direction: Optional[str] = Query(None, alias="sortDirection"),
) -> PageSpec:
    # page/pageSize строками: мусор превращается в дефолт, а не в 422
    return PageSpec(
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        page_size=page_size,
    )


def search_page_spec(
    spec: PageSpec = Depends(page_spec),
    query: Optional[str] = Query(None),
) -> PageSpec:
    # текстовый поиск есть только у ленты видео
    spec.query = query
    return spec


async def get_db() -> AsyncIOMotorDatabase:
    return await get_mongo_db()


async def get_reactions_service(db=Depends(get_db)) -> ReactionsService:
    return ReactionsService(db)


async def get_videos_service(db=Depends(get_db)) -> VideosService:
    return VideosService(db)


async def get_comments_service(db=Depends(get_db)) -> CommentsService:
    return CommentsService(db)


async def get_tweets_service(db=Depends(get_db)) -> TweetsService:
    return TweetsService(db)


async def get_playlists_service(db=Depends(get_db)) -> PlaylistsService:
    return PlaylistsService(db)


async def get_subscriptions_service(
        db=Depends(get_db)) -> SubscriptionsService:
    return SubscriptionsService(db)
