"""Subscriptions: toggle, self-subscribe guard and both list views."""

from __future__ import annotations

from tests.helpers import new_id, new_user, uid_header


async def toggle(client, subscriber: str, channel: str):
    return await client.post(f"/api/v1/subscriptions/channels/{channel}",
                             headers=uid_header(subscriber))


async def test_toggle_subscribes_then_unsubscribes(client, db):
    fan, channel = await new_user(db), await new_user(db)

    r = await toggle(client, fan, channel)
    assert r.status_code == 200
    assert r.json()["message"] == "Subscribed"
    assert r.json()["data"] == {
        "channel": channel, "subscribed": True, "subscribersCount": 1}

    r = await toggle(client, fan, channel)
    assert r.json()["data"]["subscribed"] is False
    assert r.json()["data"]["subscribersCount"] == 0
    assert await db["subscriptions"].count_documents({}) == 0


async def test_cannot_subscribe_to_self(client, db):
    me = await new_user(db)
    r = await toggle(client, me, me)
    assert r.status_code == 400


async def test_unknown_channel_is_not_found(client, db):
    fan = await new_user(db)
    r = await toggle(client, fan, new_id())
    assert r.status_code == 404


async def test_subscribers_list_marks_who_actor_follows(client, db):
    channel = await new_user(db, "channel")
    alice = await new_user(db, "alice")
    bob = await new_user(db, "bob")
    viewer = await new_user(db, "viewer")

    await toggle(client, alice, channel)
    await toggle(client, bob, channel)
    # viewer подписан на alice, но не на bob
    await toggle(client, viewer, alice)

    r = await client.get(
        f"/api/v1/subscriptions/channels/{channel}/subscribers",
        headers=uid_header(viewer))
    assert r.status_code == 200
    rows = {row["subscriberDetails"]["username"]: row
            for row in r.json()["data"]["items"]}
    assert set(rows) == {"alice", "bob"}
    assert rows["alice"]["isSubscribedTo"] is True
    assert rows["bob"]["isSubscribedTo"] is False

    # без actor никого не отмечаем
    r = await client.get(
        f"/api/v1/subscriptions/channels/{channel}/subscribers")
    assert all(not row["isSubscribedTo"]
               for row in r.json()["data"]["items"])


async def test_subscribed_channels_with_counts(client, db):
    fan = await new_user(db, "fan")
    big = await new_user(db, "big")
    small = await new_user(db, "small")
    other = await new_user(db, "other")

    await toggle(client, fan, big)
    await toggle(client, other, big)
    await toggle(client, fan, small)

    r = await client.get(f"/api/v1/subscriptions/users/{fan}/channels",
                         headers=uid_header(fan))
    data = r.json()["data"]
    assert data["totalItems"] == 2
    rows = {row["channelDetails"]["username"]: row for row in data["items"]}
    assert rows["big"]["subscribersCount"] == 2
    assert rows["small"]["subscribersCount"] == 1
    assert rows["big"]["isSubscribedTo"] is True
    # по умолчанию сначала последние подписки
    assert [row["channelDetails"]["username"]
            for row in data["items"]] == ["small", "big"]
