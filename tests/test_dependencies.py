import pytest
from bson import ObjectId

from engagement_api.core.errors import (AuthenticationError,
                                        AuthorizationError, ValidationError)
from engagement_api.dependencies import (current_actor, optional_actor,
                                         page_spec)
from engagement_api.services.guard import (parse_object_id, require_actor,
                                           require_ownership)
from tests.helpers import new_user, uid_header


def test_require_actor_rejects_missing_and_garbled():
    with pytest.raises(AuthenticationError):
        require_actor(None)
    with pytest.raises(AuthenticationError):
        require_actor("not-an-object-id")
    actor = ObjectId()
    assert require_actor(str(actor)) == actor


def test_optional_actor_allows_anonymous():
    assert optional_actor(None) is None
    with pytest.raises(AuthenticationError):
        optional_actor("zzz")


def test_current_actor_parses_header():
    actor = ObjectId()
    assert current_actor(str(actor)) == actor


def test_require_ownership():
    owner = ObjectId()
    require_ownership({"owner": owner}, owner)
    with pytest.raises(AuthorizationError):
        require_ownership({"owner": owner}, ObjectId())


@pytest.mark.parametrize("raw", ["", "123", "x" * 24, None, 42])
def test_parse_object_id_rejects_malformed(raw):
    with pytest.raises(ValidationError):
        parse_object_id(raw, "video id")


def test_page_spec_keeps_raw_values():
    spec = page_spec(page="abc", page_size="5", sort_by="views",
                     sort_direction="desc")
    assert spec.page == "abc"
    assert spec.page_size == "5"
    assert spec.sort_by == "views"


async def test_missing_header_on_write_is_401(client, db):
    r = await client.post("/api/v1/tweets", json={"content": "x"})
    assert r.status_code == 401


async def test_garbled_header_is_401(client, db):
    r = await client.post("/api/v1/tweets", json={"content": "x"},
                          headers=uid_header("not-an-id"))
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid user id"


async def test_health(client, db):
    await new_user(db)
    r = await client.get("/health")
    assert r.json() == {"status": "ok"}
