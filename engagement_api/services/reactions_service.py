"""Reaction ledger: one like-or-dislike per (actor, target), toggled.

There is no transaction and no in-process lock. Each toggle reads the
current reaction, picks a transition and applies it with a write that is
conditional on what was read; a lost race is retried a few times and then
reported as ConflictError. The unique (actor, target) index is what makes
two concurrent inserts impossible.

The like/dislike sets on videos are derived from the ledger after the
ledger write succeeded. They may lag behind and are corrected on the next
toggle of the same actor on the same video.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from engagement_api.core.config import settings
from engagement_api.core.errors import ConflictError
from engagement_api.models.reactions import (ReactionKind, ReactionState,
                                             TargetKind, TargetRef,
                                             ToggleAction, ToggleResult)
from engagement_api.services.guard import store_errors
from engagement_api.services.repositories.reactions_repo import ReactionsRepo
from engagement_api.services.repositories.videos_repo import VideosRepo
from engagement_api.services.target_resolver import TargetResolver

log = logging.getLogger(__name__)


class Transition(NamedTuple):
    action: ToggleAction
    # вид реакции, который остался в ledger после перехода (None = нет)
    final: Optional[ReactionKind]
    from_kind: Optional[ReactionKind] = None


class ReactionsService:
    def __init__(
            self,
            db: AsyncIOMotorDatabase,
            max_attempts: Optional[int] = None) -> None:
        self.repo = ReactionsRepo(db)
        self.videos = VideosRepo(db)
        self.resolver = TargetResolver(db)
        self.max_attempts = max_attempts or settings.toggle_max_attempts

    # ---------- public ----------

    async def toggle_reaction(
        self,
        actor: ObjectId,
        target_kind: TargetKind,
        target_id: str,
        kind: ReactionKind,
        video_id: Optional[str] = None,
    ) -> ToggleResult:
        """Resolve the target, then toggle.

        Comment reactions are addressed under their video; `video_id`
        must be the video the comment was posted under.
        """
        with store_errors("reaction_resolve"):
            if target_kind is TargetKind.comment and video_id is not None:
                target = await self.resolver.resolve_comment_under_video(
                    video_id, target_id)
            else:
                target = await self.resolver.resolve(target_kind, target_id)
        return await self.toggle(actor, target, kind)

    async def toggle(
        self,
        actor: ObjectId,
        target: TargetRef,
        kind: ReactionKind,
    ) -> ToggleResult:
        with store_errors("reaction_toggle"):
            for attempt in range(1, self.max_attempts + 1):
                transition = await self._attempt(actor, target, kind)
                if transition is not None:
                    break
                log.info(
                    "reaction_toggle_retry",
                    extra={
                        "actor": str(actor),
                        "target_kind": target.kind.value,
                        "target_id": str(target.id),
                        "attempt": attempt,
                    },
                )
            else:
                raise ConflictError(
                    "Reaction changed concurrently, try again")

            if await self.repo.count_for_target(actor, target) > 1:
                raise ConflictError(
                    "More than one reaction for the same target")

            result = ToggleResult(
                action=transition.action,
                kind=kind,
                from_kind=transition.from_kind,
                to_kind=(
                    kind if transition.action is ToggleAction.switched
                    else None),
                target_kind=target.kind,
                target_id=target.id,
            )
            if target.kind is TargetKind.video:
                await self._sync_video_counters(
                    actor, target.id, transition.final, result)

        log.info(
            "reaction_toggled",
            extra={
                "actor": str(actor),
                "target_kind": target.kind.value,
                "target_id": str(target.id),
                "action": transition.action.value,
                "kind": kind.value,
                "attempt": attempt,
            },
        )
        return result

    async def get_state(
        self,
        actor: ObjectId,
        target_kind: TargetKind,
        target_id: str,
    ) -> ReactionState:
        """Which reaction, if any, `actor` currently holds on the target."""
        with store_errors("reaction_get"):
            target = await self.resolver.resolve(target_kind, target_id)
            doc = await self.repo.find_for_target(actor, target)
        return ReactionState(
            target_kind=target.kind,
            target_id=target.id,
            kind=ReactionKind(doc['kind']) if doc else None,
        )

    # ---------- helpers ----------

    async def _attempt(
        self,
        actor: ObjectId,
        target: TargetRef,
        kind: ReactionKind,
    ) -> Optional[Transition]:
        """One read + conditional write; None if another request got there first."""
        existing = await self.repo.find_for_target(actor, target)

        if existing is None:
            try:
                await self.repo.insert(actor, target, kind)
            except DuplicateKeyError:
                current = await self.repo.find_for_target(actor, target)
                if current is not None and current['kind'] == kind.value:
                    # такой же запрос успел раньше: результат тот же
                    return Transition(ToggleAction.added, kind)
                return None
            return Transition(ToggleAction.added, kind)

        current_kind = ReactionKind(existing['kind'])
        if current_kind is kind:
            if await self.repo.delete_if_kind(existing['_id'], kind):
                return Transition(ToggleAction.removed, None)
            if await self.repo.find_for_target(actor, target) is None:
                return Transition(ToggleAction.removed, None)
            return None

        switched = await self.repo.switch_kind(
            existing['_id'], current_kind, kind)
        if switched is None:
            return None
        return Transition(ToggleAction.switched, kind, from_kind=current_kind)

    async def _sync_video_counters(
        self,
        actor: ObjectId,
        video_id: ObjectId,
        final: Optional[ReactionKind],
        result: ToggleResult,
    ) -> None:
        counters = await self.videos.sync_reaction(video_id, actor, final)
        if counters is None:
            # видео удалили между записью в ledger и обновлением счётчиков
            log.warning(
                "video_counter_drift",
                extra={"video_id": str(video_id), "actor": str(actor)},
            )
            return
        result.likes_count = len(counters.get('likes') or [])
        result.dislikes_count = len(counters.get('dislikes') or [])
