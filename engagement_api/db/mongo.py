import asyncio
import logging
from typing import Awaitable, TypeVar

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import (ExecutionTimeout, NetworkTimeout,
                            ServerSelectionTimeoutError, WTimeoutError)

from engagement_api.core.config import settings
from engagement_api.core.context import remaining
from engagement_api.core.errors import RequestTimeoutError

log = logging.getLogger(__name__)

T = TypeVar("T")

_client: AsyncIOMotorClient | None = None

STORE_TIMEOUT_ERRORS = (
    ExecutionTimeout,
    NetworkTimeout,
    ServerSelectionTimeoutError,
    WTimeoutError,
)


async def get_client() -> AsyncIOMotorClient:
    """
    Singleton-клиент Motor с явными таймаутами и пулом.
    """
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(
            settings.mongo_dsn,
            appname="engagement-api",
            tz_aware=True,  # created_at будет aware
            maxPoolSize=50,
            minPoolSize=0,
            serverSelectionTimeoutMS=3000,
            connectTimeoutMS=3000,
            socketTimeoutMS=5000,
            retryWrites=True,
        )
        # быстрая проверка коннекта (не блокируем запуск дольше таймаута)
        try:
            await _client.admin.command("ping")
        except Exception as e:
            log.warning("mongo_ping_failed", extra={"err": str(e)})
    return _client


async def get_mongo_db() -> AsyncIOMotorDatabase:
    client = await get_client()
    return client[settings.mongo_db]


async def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


async def store_call(aw: Awaitable[T]) -> T:
    """Await a store operation within what is left of the request budget.

    Running out of budget (ours or the driver's) is reported as
    RequestTimeoutError and never retried here.
    """
    budget = remaining(settings.request_timeout_s)
    if budget <= 0:
        # корутину всё равно надо закрыть, иначе будет warning
        if asyncio.iscoroutine(aw):
            aw.close()
        raise RequestTimeoutError()
    try:
        return await asyncio.wait_for(aw, timeout=budget)
    except asyncio.TimeoutError as error:
        raise RequestTimeoutError() from error
    except STORE_TIMEOUT_ERRORS as error:
        log.warning("mongo_timeout", extra={"err": str(error)})
        raise RequestTimeoutError() from error
