import logging

from fastapi import FastAPI

from contextlib import asynccontextmanager
from motor.motor_asyncio import AsyncIOMotorDatabase

from engagement_api.db.mongo import close_client, get_mongo_db

from engagement_api.core.logger import setup_json_logging, shutdown_logging
from engagement_api.core.sentry import init_sentry
from engagement_api.core.config import settings
from engagement_api.core.middleware import RequestContextMiddleware
from engagement_api.api.http_utils import install_error_handlers

from engagement_api.api.v1.reactions import router as reactions_router
from engagement_api.api.v1.videos import router as videos_router
from engagement_api.api.v1.comments import router as comments_router
from engagement_api.api.v1.tweets import router as tweets_router
from engagement_api.api.v1.playlists import router as playlists_router
from engagement_api.api.v1.subscriptions import \
    router as subscriptions_router
from engagement_api.api.v1.debug import include_debug_routes

from engagement_api.services.repositories.comments_repo import CommentsRepo
from engagement_api.services.repositories.playlists_repo import PlaylistsRepo
from engagement_api.services.repositories.reactions_repo import ReactionsRepo
from engagement_api.services.repositories.subscriptions_repo import \
    SubscriptionsRepo
from engagement_api.services.repositories.tweets_repo import TweetsRepo
from engagement_api.services.repositories.videos_repo import VideosRepo

log = logging.getLogger(__name__)

REPOSITORIES = (
    ReactionsRepo,
    VideosRepo,
    CommentsRepo,
    TweetsRepo,
    PlaylistsRepo,
    SubscriptionsRepo,
)


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    for repo_cls in REPOSITORIES:
        await repo_cls(db).ensure_indexes()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1) логи до всего
    setup_json_logging(service=settings.app_name)
    init_sentry(settings.sentry_dsn, environment=settings.env,
                release=settings.release)

    # 2) Motor-клиент + индексы (уникальные индексы держат инварианты)
    db = await get_mongo_db()
    try:
        await ensure_indexes(db)
    except Exception as e:
        # без Mongo сервис всё равно поднимаем, запросы ответят ошибкой
        log.warning("ensure_indexes_failed", extra={"err": str(e)})

    try:
        yield
    finally:
        await close_client()
        # корректно останавливаем лог-листенер
        shutdown_logging()


app = FastAPI(title="Engagement Service", lifespan=lifespan)

# наш trace_id + дедлайн + access JSON
app.add_middleware(RequestContextMiddleware)
install_error_handlers(app)

# приглушим штатный uvicorn-access, чтобы не было дублей
logging.getLogger("uvicorn.access").setLevel("WARNING")

include_debug_routes(app)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(reactions_router)
app.include_router(videos_router)
app.include_router(comments_router)
app.include_router(tweets_router)
app.include_router(playlists_router)
app.include_router(subscriptions_router)
