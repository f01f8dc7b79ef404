from bson import ObjectId

from tests.helpers import (new_id, new_user, post_comment, publish_video,
                           uid_header, video_body)


async def test_publish_video_normalizes_tags(client, db):
    owner = await new_user(db, "owner")
    video = await publish_video(client, owner, tags=" rock, live ,rock,")

    assert video["tags"] == ["rock", "live"]
    assert video["isPublished"] is True
    assert video["likesCount"] == 0
    assert video["ownerDetails"]["username"] == "owner"


async def test_publish_requires_title(client, db):
    owner = await new_user(db)
    r = await client.post("/api/v1/videos", json=video_body(title=""),
                          headers=uid_header(owner))
    assert r.status_code == 422
    assert r.json()["success"] is False
    assert r.json()["errors"]


async def test_get_video_hides_drafts_from_others(client, db):
    owner, other = await new_user(db), await new_user(db)
    video = await publish_video(client, owner)

    r = await client.patch(f"/api/v1/videos/{video['id']}/publish",
                           headers=uid_header(owner))
    assert r.json()["data"] == {"id": video["id"], "isPublished": False}

    r = await client.get(f"/api/v1/videos/{video['id']}",
                         headers=uid_header(other))
    assert r.status_code == 404
    r = await client.get(f"/api/v1/videos/{video['id']}",
                         headers=uid_header(owner))
    assert r.status_code == 200


async def test_only_owner_updates_video(client, db):
    owner, other = await new_user(db), await new_user(db)
    video = await publish_video(client, owner)

    r = await client.patch(f"/api/v1/videos/{video['id']}",
                           json={"title": "Stolen"},
                           headers=uid_header(other))
    assert r.status_code == 403

    r = await client.patch(f"/api/v1/videos/{video['id']}",
                           json={"title": "Renamed", "tags": "a,b"},
                           headers=uid_header(owner))
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Renamed"
    assert r.json()["data"]["tags"] == ["a", "b"]


async def test_owner_replaces_thumbnail_and_file(client, db):
    owner = await new_user(db)
    video = await publish_video(client, owner)

    r = await client.patch(
        f"/api/v1/videos/{video['id']}",
        json={"thumbnail": "https://cdn.example.com/new.jpg",
              "videoFile": "https://cdn.example.com/new.mp4"},
        headers=uid_header(owner))
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["thumbnail"] == "https://cdn.example.com/new.jpg"
    assert data["videoFile"] == "https://cdn.example.com/new.mp4"
    assert data["title"] == video["title"]

    stored = await db["videos"].find_one({"_id": ObjectId(video["id"])})
    assert stored["thumbnail"] == "https://cdn.example.com/new.jpg"

    r = await client.patch(f"/api/v1/videos/{video['id']}",
                           json={"thumbnail": ""},
                           headers=uid_header(owner))
    assert r.status_code == 422


async def test_delete_video_cascades(client, db):
    owner, fan = await new_user(db), await new_user(db)
    video = await publish_video(client, owner)
    comment = await post_comment(client, video["id"], fan)
    await client.post(f"/api/v1/reactions/like/videos/{video['id']}",
                      headers=uid_header(fan))
    await client.post(
        f"/api/v1/reactions/like/videos/{video['id']}"
        f"/comments/{comment['id']}",
        headers=uid_header(owner))

    r = await client.delete(f"/api/v1/videos/{video['id']}",
                            headers=uid_header(owner))
    assert r.status_code == 200

    assert await db["comments"].count_documents(
        {"video": ObjectId(video["id"])}) == 0
    assert await db["reactions"].count_documents({}) == 0
    r = await client.get(f"/api/v1/videos/{video['id']}")
    assert r.status_code == 404


async def test_delete_missing_video_is_404(client, db):
    owner = await new_user(db)
    r = await client.delete(f"/api/v1/videos/{new_id()}",
                            headers=uid_header(owner))
    assert r.status_code == 404
