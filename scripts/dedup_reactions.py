from pymongo import DESCENDING, MongoClient

from engagement_api.core.config import settings

COUNTER_FIELDS = {"like": "likes", "dislike": "dislikes"}


def rebuild_video_counters(db, video_ids):
    """likes/dislikes на видео заново из ledger-а."""
    for video_id in video_ids:
        sets = {field: [] for field in COUNTER_FIELDS.values()}
        for r in db["reactions"].find(
                {"target_kind": "video", "target_id": video_id},
                {"actor": 1, "kind": 1}):
            field = COUNTER_FIELDS.get(r["kind"])
            if field:
                sets[field].append(r["actor"])
        db["videos"].update_one({"_id": video_id}, {"$set": sets})


def main():
    db = MongoClient(settings.mongo_dsn)[settings.mongo_db]
    col = db["reactions"]

    # ключи (actor, target) с >1 реакцией, вид не важен
    pipeline = [
        {"$group": {"_id": {"actor": "$actor",
                            "target_kind": "$target_kind",
                            "target_id": "$target_id"},
                    "count": {"$sum": 1}}},
        {"$match": {"count": {"$gt": 1}}}
    ]
    dups = list(col.aggregate(pipeline))
    print(f"Duplicate keys: {len(dups)}")

    touched_videos = set()
    # оставляем самую новую реакцию, остальные удаляем
    for d in dups:
        key = d["_id"]
        docs = list(col.find(key).sort(
            [("created_at", DESCENDING), ("_id", DESCENDING)]))
        keep_id = docs[0]["_id"]
        to_delete = [x["_id"] for x in docs[1:]]
        if to_delete:
            col.delete_many({"_id": {"$in": to_delete}})
            print(f"  kept={keep_id}, deleted={len(to_delete)} for {key}")
        if key["target_kind"] == "video":
            touched_videos.add(key["target_id"])

    rebuild_video_counters(db, touched_videos)
    print(f"Dedup done, videos rebuilt: {len(touched_videos)}")


if __name__ == "__main__":
    main()
