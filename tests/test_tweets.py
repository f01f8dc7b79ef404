from tests.helpers import new_id, new_user, uid_header


async def create_tweet(client, user: str, content: str) -> dict:
    r = await client.post("/api/v1/tweets", json={"content": content},
                          headers=uid_header(user))
    assert r.status_code == 201, r.text
    return r.json()["data"]


async def test_tweet_timeline_newest_last_by_default(client, db):
    author = await new_user(db, "author")
    for text in ("one", "two", "three"):
        await create_tweet(client, author, text)

    r = await client.get(f"/api/v1/tweets/users/{author}")
    data = r.json()["data"]
    assert [t["content"] for t in data["items"]] == ["one", "two", "three"]
    assert data["items"][0]["ownerDetails"]["username"] == "author"

    r = await client.get(f"/api/v1/tweets/users/{author}",
                         params={"sortDirection": "desc", "pageSize": 2})
    data = r.json()["data"]
    assert [t["content"] for t in data["items"]] == ["three", "two"]
    assert data["hasNext"] is True


async def test_tweet_like_count_is_live(client, db):
    author, fan = await new_user(db), await new_user(db)
    tweet = await create_tweet(client, author, "hello")
    await client.post(f"/api/v1/reactions/like/tweets/{tweet['id']}",
                      headers=uid_header(fan))
    await client.post(f"/api/v1/reactions/dislike/tweets/{tweet['id']}",
                      headers=uid_header(author))

    r = await client.get(f"/api/v1/tweets/users/{author}")
    item = r.json()["data"]["items"][0]
    assert item["likesCount"] == 1
    assert item["dislikesCount"] == 1


async def test_tweet_edit_is_owner_only(client, db):
    author, other = await new_user(db), await new_user(db)
    tweet = await create_tweet(client, author, "draft")

    r = await client.patch(f"/api/v1/tweets/{tweet['id']}",
                           json={"content": "x"}, headers=uid_header(other))
    assert r.status_code == 403

    r = await client.patch(f"/api/v1/tweets/{tweet['id']}",
                           json={"content": "final"},
                           headers=uid_header(author))
    assert r.json()["data"]["content"] == "final"


async def test_delete_tweet(client, db):
    author = await new_user(db)
    tweet = await create_tweet(client, author, "bye")

    r = await client.delete(f"/api/v1/tweets/{tweet['id']}",
                            headers=uid_header(author))
    assert r.status_code == 200
    r = await client.get(f"/api/v1/tweets/users/{author}")
    assert r.json()["data"]["totalItems"] == 0
    assert r.json()["data"]["totalPages"] == 0


async def test_empty_tweet_and_unknown_user(client, db):
    author = await new_user(db)
    r = await client.post("/api/v1/tweets", json={"content": ""},
                          headers=uid_header(author))
    assert r.status_code == 400

    r = await client.get(f"/api/v1/tweets/users/{new_id()}")
    assert r.status_code == 404
