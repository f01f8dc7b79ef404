import asyncio

import pytest
from pymongo.errors import NetworkTimeout

from engagement_api.core.context import (clear_deadline, remaining,
                                         start_deadline)
from engagement_api.core.errors import RequestTimeoutError
from engagement_api.db.mongo import store_call


@pytest.fixture(autouse=True)
def no_deadline():
    clear_deadline()
    yield
    clear_deadline()


def test_remaining_without_deadline_is_default():
    assert remaining(5.0) == 5.0


async def test_store_call_passes_result_through():
    async def op():
        return 42

    start_deadline(1.0)
    assert await store_call(op()) == 42


async def test_slow_store_call_times_out():
    start_deadline(0.05)
    with pytest.raises(RequestTimeoutError):
        await store_call(asyncio.sleep(1))


async def test_call_after_deadline_fails_without_running():
    ran = []

    async def op():
        ran.append(True)

    start_deadline(-1)
    with pytest.raises(RequestTimeoutError):
        await store_call(op())
    assert ran == []


async def test_driver_timeout_is_reported_as_timeout():
    async def op():
        raise NetworkTimeout("socket timed out")

    with pytest.raises(RequestTimeoutError):
        await store_call(op())


async def test_expired_deadline_surfaces_as_504(client, db, monkeypatch):
    from engagement_api.core import middleware

    monkeypatch.setattr(middleware.settings, "request_timeout_s", -1.0)
    r = await client.get("/api/v1/videos")
    assert r.status_code == 504
    assert r.json()["success"] is False
