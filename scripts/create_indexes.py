from pymongo import ASCENDING, DESCENDING, MongoClient

from engagement_api.core.config import settings


def main():
    db = MongoClient(settings.mongo_dsn)[settings.mongo_db]

    print("Using DSN:", settings.mongo_dsn, "DB:", settings.mongo_db)
    # reactions: одна реакция на (actor, target), любого вида.
    # Если индекс не строится, сначала scripts/dedup_reactions.py
    db["reactions"].create_index(
        [("actor", ASCENDING),
         ("target_kind", ASCENDING),
         ("target_id", ASCENDING)],
        unique=True, name="reactions_actor_target"
    )
    db["reactions"].create_index(
        [("target_id", ASCENDING), ("kind", ASCENDING)],
        name="reactions_target_kind"
    )

    # videos: лента автора
    db["videos"].create_index(
        [("owner", ASCENDING), ("created_at", DESCENDING)],
        name="videos_owner_created_desc"
    )

    # comments: ветка под видео
    db["comments"].create_index(
        [("video", ASCENDING), ("created_at", ASCENDING)],
        name="comments_video_created"
    )

    # tweets
    db["tweets"].create_index(
        [("owner", ASCENDING), ("created_at", ASCENDING)],
        name="tweets_owner_created"
    )

    # playlists: имя уникально в рамках владельца
    db["playlists"].create_index(
        [("owner", ASCENDING), ("name", ASCENDING)],
        unique=True, name="playlists_owner_name"
    )
    db["playlists"].create_index(
        [("videos", ASCENDING)], name="playlists_videos"
    )

    # subscriptions
    db["subscriptions"].create_index(
        [("subscriber", ASCENDING), ("channel", ASCENDING)],
        unique=True, name="subscriptions_subscriber_channel"
    )
    db["subscriptions"].create_index(
        [("channel", ASCENDING), ("created_at", DESCENDING)],
        name="subscriptions_channel_created_desc"
    )

    print("Indexes ensured.")


if __name__ == "__main__":
    main()
