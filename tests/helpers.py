from datetime import datetime, timezone
from typing import Dict, Optional

from bson import ObjectId


async def new_user(db, username: Optional[str] = None) -> str:
    """Пользователей заводит auth-сервис, в тестах кладём напрямую."""
    user_id = ObjectId()
    name = username or f"user_{user_id}"
    await db["users"].insert_one({
        "_id": user_id,
        "username": name,
        "full_name": name.title(),
        "email": f"{name}@example.com",
        "avatar": f"https://cdn.example.com/{name}.png",
        "password": "hashed-secret",
    })
    return str(user_id)


def new_id() -> str:
    return str(ObjectId())


def uid_header(user_id: str) -> Dict[str, str]:
    return {"X-User-Id": user_id}


def video_body(title: str = "Video", **overrides) -> dict:
    body = {
        "title": title,
        "description": f"{title} description",
        "category": "music",
        "tags": "live, rock",
        "videoFile": "https://cdn.example.com/v.mp4",
        "thumbnail": "https://cdn.example.com/v.jpg",
        "duration": 120.5,
    }
    body.update(overrides)
    return body


async def publish_video(client, owner: str, title: str = "Video",
                        **overrides) -> dict:
    r = await client.post("/api/v1/videos",
                          json=video_body(title, **overrides),
                          headers=uid_header(owner))
    assert r.status_code == 201, r.text
    return r.json()["data"]


async def insert_video(db, owner: str, title: str = "Video",
                       likes=(), dislikes=(), **fields) -> str:
    """Видео прямо в базу: для сортировок нужны заданные likes/views."""
    now = datetime.now(timezone.utc)
    doc = {
        "title": title,
        "description": "",
        "category": "misc",
        "tags": [],
        "video_file": "v.mp4",
        "thumbnail": "v.jpg",
        "duration": 10,
        "views": 0,
        "is_published": True,
        "owner": ObjectId(owner),
        "likes": [ObjectId(x) for x in likes],
        "dislikes": [ObjectId(x) for x in dislikes],
        "created_at": now,
        "updated_at": now,
    }
    doc.update(fields)
    res = await db["videos"].insert_one(doc)
    return str(res.inserted_id)


async def post_comment(client, video_id: str, user: str,
                       content: str = "nice") -> dict:
    r = await client.post(f"/api/v1/videos/{video_id}/comments",
                          json={"content": content},
                          headers=uid_header(user))
    assert r.status_code == 201, r.text
    return r.json()["data"]
