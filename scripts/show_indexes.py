from pymongo import MongoClient

from engagement_api.core.config import settings

COLLECTIONS = (
    "reactions",
    "videos",
    "comments",
    "tweets",
    "playlists",
    "subscriptions",
)


def dump(db, col_name: str):
    idx = list(db[col_name].list_indexes())
    print(f"\nIndexes in '{col_name}':")
    for i in idx:
        print(" -", i)


if __name__ == "__main__":
    database = MongoClient(settings.mongo_dsn)[settings.mongo_db]
    for name in COLLECTIONS:
        dump(database, name)
