from http import HTTPStatus

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from engagement_api.api.http_utils import install_error_handlers
from engagement_api.core.errors import (ConflictError, InternalError,
                                        NotFoundError, RequestTimeoutError)


def make_app() -> FastAPI:
    app = FastAPI()
    install_error_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("Already there")

    @app.get("/timeout")
    async def timeout():
        raise RequestTimeoutError()

    @app.get("/internal")
    async def internal():
        raise InternalError()

    @app.get("/crash")
    async def crash():
        raise KeyError("secret mongo detail")

    @app.get("/items/{item_id}")
    async def item(item_id: int):
        return {"id": item_id}

    return app


async def call(path: str):
    # 500 из ServerErrorMiddleware приходит ответом, исключение не пробрасываем
    transport = ASGITransport(app=make_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport,
                           base_url="http://test") as ac:
        return await ac.get(path)


def test_error_defaults():
    assert NotFoundError().status_code == HTTPStatus.NOT_FOUND
    assert NotFoundError().message == "Not found"
    assert ConflictError("x", errors=[1]).errors == [1]


async def test_api_error_becomes_envelope():
    r = await call("/conflict")
    assert r.status_code == 409
    assert r.json() == {
        "statusCode": 409,
        "message": "Already there",
        "errors": [],
        "success": False,
    }


async def test_timeout_maps_to_504():
    r = await call("/timeout")
    assert r.status_code == 504
    assert r.json()["statusCode"] == 504


async def test_internal_error_has_generic_message():
    r = await call("/internal")
    assert r.status_code == 500
    assert r.json()["message"] == "Internal server error"


async def test_unexpected_exception_does_not_leak_text():
    r = await call("/crash")
    assert r.status_code == 500
    assert "secret" not in r.text
    assert r.json()["success"] is False


async def test_request_validation_is_422_envelope():
    r = await call("/items/abc")
    assert r.status_code == 422
    body = r.json()
    assert body["statusCode"] == 422
    assert body["errors"][0]["loc"] == ["path", "item_id"]
