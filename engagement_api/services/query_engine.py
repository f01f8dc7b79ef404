"""Filtered, sorted, paginated read-views over one collection.

A `CollectionView` says what a collection allows: which fields can be
sorted on, which filters exist, what text search covers, which other
collections are joined in and which fields are computed per query. A
`PageSpec` is what the caller asked for. `QueryEngine.query` turns both
into one aggregation pipeline:

    $match -> (sort key) -> $sort -> $facet {items: skip/limit/joins,
                                             total: $count}

Joins and computed fields run inside the `items` facet, after $limit, so
they only touch one page of documents.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import (Any, Callable, Dict, List, Mapping, Optional, Sequence,
                    Tuple, TypeVar)

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from engagement_api.core.config import settings
from engagement_api.core.errors import ValidationError
from engagement_api.db.mongo import store_call
from engagement_api.models.common import Page

T = TypeVar("T")

SORT_KEY_FIELD = "_sort_key"
MAX_SKIP = 2 ** 63 - 1


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"

    @property
    def order(self) -> int:
        return 1 if self is SortDirection.asc else -1


# ---------- predicates ----------

class Predicate:
    def to_query(self) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Predicate):
    value: Any

    def to_query(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Contains(Predicate):
    """Case-insensitive substring; the text is matched literally."""

    text: str

    def to_query(self) -> Any:
        return {"$regex": re.escape(self.text), "$options": "i"}


@dataclass(frozen=True)
class AnyOf(Predicate):
    values: Tuple[Any, ...]

    def to_query(self) -> Any:
        return {"$in": list(self.values)}


# ---------- view description ----------

@dataclass(frozen=True)
class SortField:
    field: str
    # поле-массив: сортируем по количеству элементов
    by_size: bool = False


@dataclass(frozen=True)
class Join:
    """$lookup of `source` documents into `as_field`.

    `single` unwinds the result to one embedded document (or none);
    `fields` then narrows that document down to the listed keys.
    """

    source: str
    local_field: str
    foreign_field: str
    as_field: str
    single: bool = False
    fields: Tuple[str, ...] = ()

    def stages(self) -> List[dict]:
        narrow = self.single and bool(self.fields)
        # сужаемое поле собираем заново: $addFields поверх вложенного
        # документа сливает ключи, а не заменяет их
        joined = f"_{self.as_field}" if narrow else self.as_field
        stages: List[dict] = [{"$lookup": {
            "from": self.source,
            "localField": self.local_field,
            "foreignField": self.foreign_field,
            "as": joined,
        }}]
        if self.single:
            stages.append({"$unwind": {
                "path": f"${joined}",
                "preserveNullAndEmptyArrays": True,
            }})
        if narrow:
            stages.append({"$addFields": {self.as_field: {
                name: f"${joined}.{name}" for name in self.fields
            }}})
            stages.append({"$project": {joined: 0}})
        return stages


ComputedFields = Callable[[Optional[ObjectId]], Dict[str, Any]]


@dataclass(frozen=True)
class CollectionView:
    collection: str
    sort_fields: Mapping[str, SortField]
    default_sort: str
    default_direction: SortDirection = SortDirection.asc
    search_fields: Tuple[str, ...] = ()
    # имя фильтра в API -> поле в Mongo
    filter_fields: Mapping[str, str] = field(default_factory=dict)
    joins: Tuple[Join, ...] = ()
    # вычисляемые поля зависят от того, кто спрашивает
    computed: Optional[ComputedFields] = None
    hidden_fields: Tuple[str, ...] = ()


@dataclass
class PageSpec:
    """What the caller asked for; raw values are coerced by the engine."""

    filters: Dict[str, Predicate] = field(default_factory=dict)
    query: Optional[str] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    page: Any = None
    page_size: Any = None


# ---------- coercion ----------

def coerce_positive_int(value: Any, default: int) -> int:
    """int(value) if it is a positive integer, `default` otherwise."""
    if isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def resolve_paging(spec: PageSpec) -> Tuple[int, int]:
    page = coerce_positive_int(spec.page, 1)
    page_size = min(
        coerce_positive_int(spec.page_size, settings.default_page_size),
        settings.max_page_size)
    # $skip = (page - 1) * page_size должен влезать в int64 BSON
    return min(page, MAX_SKIP // page_size + 1), page_size


def resolve_sort(
        view: CollectionView,
        spec: PageSpec) -> Tuple[SortField, SortDirection]:
    sort_by = spec.sort_by or view.default_sort
    sort_field = view.sort_fields.get(sort_by)
    if sort_field is None:
        allowed = ", ".join(view.sort_fields)
        raise ValidationError(
            f"Invalid sortBy '{sort_by}', allowed: {allowed}")

    raw_direction = spec.sort_direction or view.default_direction.value
    try:
        direction = SortDirection(raw_direction)
    except ValueError:
        raise ValidationError(
            "sortDirection must be 'asc' or 'desc'") from None
    return sort_field, direction


# ---------- pipeline ----------

def build_match(
        view: CollectionView,
        spec: PageSpec,
        scope: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """AND of scope, filters and the OR-ed text query."""
    clauses: List[Dict[str, Any]] = []
    if scope:
        clauses.append(dict(scope))

    for name, predicate in spec.filters.items():
        store_field = view.filter_fields.get(name)
        if store_field is None:
            raise ValidationError(f"Unknown filter '{name}'")
        clauses.append({store_field: predicate.to_query()})

    text = (spec.query or "").strip()
    if text:
        if not view.search_fields:
            raise ValidationError("Text search is not supported here")
        clauses.append({"$or": [
            {name: Contains(text).to_query()}
            for name in view.search_fields
        ]})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def build_pipeline(
    view: CollectionView,
    match: Dict[str, Any],
    sort_field: SortField,
    direction: SortDirection,
    skip: int,
    limit: int,
    actor: Optional[ObjectId] = None,
) -> List[dict]:
    pipeline: List[dict] = [{"$match": match}]

    sort_key = sort_field.field
    if sort_field.by_size:
        pipeline.append({"$addFields": {SORT_KEY_FIELD: {
            "$size": {"$ifNull": [f"${sort_field.field}", []]}}}})
        sort_key = SORT_KEY_FIELD
    # _id вторым ключом: одинаковые значения не перемешиваются между страницами
    pipeline.append({"$sort": {sort_key: direction.order,
                               "_id": direction.order}})

    items: List[dict] = [{"$skip": skip}, {"$limit": limit}]
    for join in view.joins:
        items.extend(join.stages())
    if view.computed is not None:
        items.append({"$addFields": view.computed(actor)})
    hidden = list(view.hidden_fields)
    if sort_field.by_size:
        hidden.append(SORT_KEY_FIELD)
    if hidden:
        items.append({"$project": {name: 0 for name in hidden}})

    pipeline.append({"$facet": {
        "items": items,
        "total": [{"$count": "count"}],
    }})
    return pipeline


class QueryEngine:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db

    async def query(
        self,
        view: CollectionView,
        spec: PageSpec,
        build: Callable[[dict], T],
        scope: Optional[Mapping[str, Any]] = None,
        actor: Optional[ObjectId] = None,
    ) -> Page[T]:
        """One page of `view` as built by `build`, plus paging totals."""
        page, page_size = resolve_paging(spec)
        sort_field, direction = resolve_sort(view, spec)
        match = build_match(view, spec, scope)
        pipeline = build_pipeline(
            view,
            match,
            sort_field,
            direction,
            skip=(page - 1) * page_size,
            limit=page_size,
            actor=actor,
        )

        cursor = self.db[view.collection].aggregate(pipeline)
        result = await store_call(cursor.to_list(length=None))
        facet = result[0] if result else {}
        docs: Sequence[dict] = facet.get("items", [])
        total_rows = facet.get("total") or [{}]
        total = int(total_rows[0].get("count", 0))

        total_pages = math.ceil(total / page_size) if total else 0
        return Page(
            items=[build(doc) for doc in docs],
            total_items=total,
            total_pages=total_pages,
            current_page=page,
            page_size=page_size,
            has_next=page < total_pages,
            has_prev=page > 1,
        )
