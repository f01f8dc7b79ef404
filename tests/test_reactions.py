"""Reaction toggles: add / remove / switch, counter sets, races."""

from __future__ import annotations

import asyncio

import pytest
from bson import ObjectId

from engagement_api.core.errors import ConflictError
from engagement_api.models.reactions import (ReactionKind, TargetKind,
                                             TargetRef, ToggleAction)
from engagement_api.services.reactions_service import ReactionsService
from engagement_api.services.repositories.reactions_repo import ReactionsRepo
from tests.helpers import (insert_video, new_id, new_user, post_comment,
                           publish_video, uid_header)


async def reactions_of(db, actor: str, target_id: str) -> list:
    cursor = db["reactions"].find(
        {"actor": ObjectId(actor), "target_id": ObjectId(target_id)})
    return await cursor.to_list(length=None)


async def video_sets(db, video_id: str) -> dict:
    return await db["videos"].find_one(
        {"_id": ObjectId(video_id)}, {"likes": 1, "dislikes": 1})


async def test_like_video_adds_reaction_and_counter(client, db):
    owner, fan = await new_user(db), await new_user(db)
    video = await publish_video(client, owner)

    r = await client.post(f"/api/v1/reactions/like/videos/{video['id']}",
                          headers=uid_header(fan))
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["action"] == "added"
    assert body["data"]["kind"] == "like"
    assert body["data"]["likesCount"] == 1
    assert body["data"]["dislikesCount"] == 0

    docs = await reactions_of(db, fan, video["id"])
    assert [d["kind"] for d in docs] == ["like"]
    sets = await video_sets(db, video["id"])
    assert sets["likes"] == [ObjectId(fan)]


async def test_like_twice_removes_reaction(client, db):
    owner, fan = await new_user(db), await new_user(db)
    video = await publish_video(client, owner)
    url = f"/api/v1/reactions/like/videos/{video['id']}"

    await client.post(url, headers=uid_header(fan))
    r = await client.post(url, headers=uid_header(fan))

    assert r.json()["data"]["action"] == "removed"
    assert r.json()["data"]["likesCount"] == 0
    assert await reactions_of(db, fan, video["id"]) == []
    sets = await video_sets(db, video["id"])
    assert ObjectId(fan) not in sets["likes"]


async def test_like_then_dislike_switches(client, db):
    owner, fan = await new_user(db), await new_user(db)
    video = await publish_video(client, owner)

    await client.post(f"/api/v1/reactions/like/videos/{video['id']}",
                      headers=uid_header(fan))
    r = await client.post(
        f"/api/v1/reactions/dislike/videos/{video['id']}",
        headers=uid_header(fan))

    data = r.json()["data"]
    assert data["action"] == "switched"
    assert data["from"] == "like"
    assert data["to"] == "dislike"

    docs = await reactions_of(db, fan, video["id"])
    assert [d["kind"] for d in docs] == ["dislike"]
    sets = await video_sets(db, video["id"])
    assert ObjectId(fan) not in sets["likes"]
    assert sets["dislikes"] == [ObjectId(fan)]


async def test_at_most_one_reaction_over_any_sequence(client, db):
    owner, fan = await new_user(db), await new_user(db)
    video = await publish_video(client, owner)

    for kind in ["like", "dislike", "dislike", "like", "like", "dislike"]:
        r = await client.post(
            f"/api/v1/reactions/{kind}/videos/{video['id']}",
            headers=uid_header(fan))
        assert r.status_code == 200
        assert len(await reactions_of(db, fan, video["id"])) <= 1


async def test_counter_drift_heals_on_next_toggle(client, db):
    owner, fan = await new_user(db), await new_user(db)
    # в множестве dislikes "висит" fan, хотя в ledger реакции нет
    video_id = await insert_video(db, owner, dislikes=[fan])

    await client.post(f"/api/v1/reactions/like/videos/{video_id}",
                      headers=uid_header(fan))

    sets = await video_sets(db, video_id)
    assert sets["likes"] == [ObjectId(fan)]
    assert sets["dislikes"] == []


async def test_comment_reaction_checks_video(client, db):
    owner, fan = await new_user(db), await new_user(db)
    video = await publish_video(client, owner)
    other = await publish_video(client, owner, "Other")
    comment = await post_comment(client, video["id"], owner)

    ok = await client.post(
        f"/api/v1/reactions/like/videos/{video['id']}"
        f"/comments/{comment['id']}",
        headers=uid_header(fan))
    assert ok.status_code == 200
    assert ok.json()["data"]["targetKind"] == "comment"
    # у комментов счётчиков в ответе нет
    assert ok.json()["data"]["likesCount"] is None

    wrong = await client.post(
        f"/api/v1/reactions/like/videos/{other['id']}"
        f"/comments/{comment['id']}",
        headers=uid_header(fan))
    assert wrong.status_code == 400
    assert wrong.json()["success"] is False


async def test_tweet_reaction_and_state(client, db):
    author, fan = await new_user(db), await new_user(db)
    r = await client.post("/api/v1/tweets", json={"content": "hello"},
                          headers=uid_header(author))
    tweet_id = r.json()["data"]["id"]

    await client.post(f"/api/v1/reactions/dislike/tweets/{tweet_id}",
                      headers=uid_header(fan))
    state = await client.get(f"/api/v1/reactions/tweets/{tweet_id}",
                             headers=uid_header(fan))
    assert state.json()["data"]["kind"] == "dislike"

    other = await client.get(f"/api/v1/reactions/tweets/{tweet_id}",
                             headers=uid_header(author))
    assert other.json()["data"]["kind"] is None


async def test_reaction_on_missing_target_is_404(client, db):
    fan = await new_user(db)
    r = await client.post(f"/api/v1/reactions/like/videos/{new_id()}",
                          headers=uid_header(fan))
    assert r.status_code == 404
    assert r.json()["message"] == "Video not found"


async def test_reaction_on_malformed_id_is_400(client, db):
    fan = await new_user(db)
    r = await client.post("/api/v1/reactions/like/videos/not-an-id",
                          headers=uid_header(fan))
    assert r.status_code == 400


async def test_reaction_requires_actor(client, db):
    owner = await new_user(db)
    video = await publish_video(client, owner)
    r = await client.post(f"/api/v1/reactions/like/videos/{video['id']}")
    assert r.status_code == 401
    assert r.json() == {
        "statusCode": 401,
        "message": "Unauthorized request",
        "errors": [],
        "success": False,
    }


class GatedReactionsRepo(ReactionsRepo):
    """The first `parties` lookups return only once all of them were made."""

    def __init__(self, db, parties: int):
        super().__init__(db)
        self._waiting = parties
        self._all_read = asyncio.Event()

    async def find_for_target(self, actor, target):
        doc = await super().find_for_target(actor, target)
        if self._waiting > 0:
            self._waiting -= 1
            if self._waiting == 0:
                self._all_read.set()
            await asyncio.wait_for(self._all_read.wait(), timeout=2)
        return doc


async def test_concurrent_identical_likes_leave_one_reaction(db):
    owner, fan = await new_user(db), await new_user(db)
    video_id = await insert_video(db, owner)
    target = TargetRef(TargetKind.video, ObjectId(video_id))

    gated = GatedReactionsRepo(db, parties=2)
    first, second = ReactionsService(db), ReactionsService(db)
    first.repo = second.repo = gated

    results = await asyncio.gather(
        first.toggle(ObjectId(fan), target, ReactionKind.like),
        second.toggle(ObjectId(fan), target, ReactionKind.like),
    )

    # оба увидели "нет реакции", вставил один, второй слился с ним
    assert [r.action for r in results] == [ToggleAction.added] * 2
    docs = await reactions_of(db, fan, video_id)
    assert len(docs) == 1
    sets = await video_sets(db, video_id)
    assert sets["likes"] == [ObjectId(fan)]


async def test_toggle_gives_up_after_bounded_retries(db):
    owner, fan = await new_user(db), await new_user(db)
    video_id = await insert_video(db, owner)
    target = TargetRef(TargetKind.video, ObjectId(video_id))

    class LosingRepo(ReactionsRepo):
        # чужой запрос всегда успевает переключить реакцию
        async def switch_kind(self, reaction_id, from_kind, to_kind):
            return None

    svc = ReactionsService(db, max_attempts=2)
    svc.repo = LosingRepo(db)
    await svc.repo.insert(ObjectId(fan), target, ReactionKind.dislike)

    with pytest.raises(ConflictError):
        await svc.toggle(ObjectId(fan), target, ReactionKind.like)
