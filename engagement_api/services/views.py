"""Read-views served by the query engine, one per list endpoint."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from bson import ObjectId

from engagement_api.models.reactions import ReactionKind, TargetKind
from engagement_api.services.query_engine import (CollectionView, Join,
                                                  SortDirection, SortField)

PROFILE_FIELDS = ("username", "full_name", "email", "avatar")

OWNER_JOIN = Join(
    source="users",
    local_field="owner",
    foreign_field="_id",
    as_field="owner_details",
    single=True,
    fields=PROFILE_FIELDS,
)

TIMESTAMP_SORTS = {
    "createdAt": SortField("created_at"),
    "updatedAt": SortField("updated_at"),
}


def array_size(path: str) -> Dict[str, Any]:
    return {"$size": {"$ifNull": [path, []]}}


def actor_in(actor: Optional[ObjectId], path: str) -> Any:
    if actor is None:
        return {"$literal": False}
    return {"$in": [actor, {"$ifNull": [path, []]}]}


# ---------- videos ----------

def _video_counts(actor: Optional[ObjectId]) -> Dict[str, Any]:
    return {
        "likes_count": array_size("$likes"),
        "dislikes_count": array_size("$dislikes"),
    }


VIDEOS = CollectionView(
    collection="videos",
    sort_fields={
        **TIMESTAMP_SORTS,
        "likes": SortField("likes", by_size=True),
        "dislikes": SortField("dislikes", by_size=True),
        "views": SortField("views"),
        "duration": SortField("duration"),
    },
    default_sort="createdAt",
    default_direction=SortDirection.asc,
    search_fields=("title", "description", "category", "tags"),
    filter_fields={"owner": "owner", "category": "category", "tags": "tags"},
    joins=(OWNER_JOIN,),
    computed=_video_counts,
    # сами множества id наружу не отдаём, только размеры
    hidden_fields=("likes", "dislikes"),
)


# ---------- comments / tweets ----------

def reaction_counts(target_kind: TargetKind):
    """Live like/dislike counts from the joined `reactions` array."""

    def count(kind: ReactionKind) -> Dict[str, Any]:
        return {"$size": {"$filter": {
            "input": {"$ifNull": ["$reactions", []]},
            "as": "reaction",
            "cond": {"$and": [
                {"$eq": ["$$reaction.kind", kind.value]},
                {"$eq": ["$$reaction.target_kind", target_kind.value]},
            ]},
        }}}

    def computed(actor: Optional[ObjectId]) -> Dict[str, Any]:
        return {
            "likes_count": count(ReactionKind.like),
            "dislikes_count": count(ReactionKind.dislike),
        }

    return computed


REACTIONS_JOIN = Join(
    source="reactions",
    local_field="_id",
    foreign_field="target_id",
    as_field="reactions",
)

COMMENTS = CollectionView(
    collection="comments",
    sort_fields=TIMESTAMP_SORTS,
    default_sort="createdAt",
    joins=(OWNER_JOIN, REACTIONS_JOIN),
    computed=reaction_counts(TargetKind.comment),
    hidden_fields=("reactions",),
)

TWEETS = CollectionView(
    collection="tweets",
    sort_fields=TIMESTAMP_SORTS,
    default_sort="createdAt",
    joins=(OWNER_JOIN, REACTIONS_JOIN),
    computed=reaction_counts(TargetKind.tweet),
    hidden_fields=("reactions",),
)


# ---------- playlists ----------

PLAYLISTS = CollectionView(
    collection="playlists",
    sort_fields={
        **TIMESTAMP_SORTS,
        "name": SortField("name"),
        "videosCount": SortField("videos", by_size=True),
    },
    default_sort="createdAt",
    default_direction=SortDirection.desc,
    computed=lambda actor: {"videos_count": array_size("$videos")},
)

PLAYLIST_ENTRY_FIELDS = (
    "_id", "title", "thumbnail", "video_file", "duration", "views")


def playlist_detail_pipeline(
        playlist_id: ObjectId,
        actor: Optional[ObjectId] = None) -> List[dict]:
    """One playlist with its videos, each annotated with reaction counts.

    Unpublished videos are listed only for their owner, as in getVideo.
    $lookup loses the playlist order; PlaylistDetailView restores it.
    """
    entry = {name: f"$$video.{name}" for name in PLAYLIST_ENTRY_FIELDS}
    entry["likes_count"] = array_size("$$video.likes")
    entry["dislikes_count"] = array_size("$$video.dislikes")
    visible: Dict[str, Any] = {"$eq": ["$$video.is_published", True]}
    if actor is not None:
        visible = {"$or": [visible, {"$eq": ["$$video.owner", actor]}]}
    return [
        {"$match": {"_id": playlist_id}},
        {"$lookup": {
            "from": "videos",
            "localField": "videos",
            "foreignField": "_id",
            "as": "video_details",
        }},
        {"$addFields": {
            "video_details": {"$map": {
                "input": {"$filter": {
                    "input": "$video_details",
                    "as": "video",
                    "cond": visible,
                }},
                "as": "video",
                "in": entry,
            }},
        }},
    ]


# ---------- subscriptions ----------

def _subscriber_fields(actor: Optional[ObjectId]) -> Dict[str, Any]:
    # подписан ли actor на этого подписчика
    return {"is_subscribed_to": actor_in(actor, "$followers.subscriber")}


SUBSCRIBERS = CollectionView(
    collection="subscriptions",
    sort_fields={"subscribedAt": SortField("created_at")},
    default_sort="subscribedAt",
    default_direction=SortDirection.desc,
    joins=(
        Join("users", "subscriber", "_id", "subscriber_details",
             single=True, fields=PROFILE_FIELDS),
        Join("subscriptions", "subscriber", "channel", "followers"),
    ),
    computed=_subscriber_fields,
    hidden_fields=("followers",),
)


def _channel_fields(actor: Optional[ObjectId]) -> Dict[str, Any]:
    return {
        "subscribers_count": array_size("$followers"),
        "is_subscribed_to": actor_in(actor, "$followers.subscriber"),
    }


SUBSCRIBED_CHANNELS = CollectionView(
    collection="subscriptions",
    sort_fields={"subscribedAt": SortField("created_at")},
    default_sort="subscribedAt",
    default_direction=SortDirection.desc,
    joins=(
        Join("users", "channel", "_id", "channel_details",
             single=True, fields=PROFILE_FIELDS),
        Join("subscriptions", "channel", "channel", "followers"),
    ),
    computed=_channel_fields,
    hidden_fields=("followers",),
)
