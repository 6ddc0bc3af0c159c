"""Optimistic create, update and delete with exact rollback.

Every mutation follows the same protocol:

    1. cancel in-flight fetches for each touched key
    2. snapshot the current value of each touched key
    3. apply the optimistic transformation
    4. await the remote call (the only suspension point)
    5. commit server data, or restore every snapshot on failure
    6. optionally invalidate the touched keys

Steps 1-3 never await, so for a given key the next mutation always
snapshots the result of the previous mutation's optimistic write.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Generic, TypeVar

from subject_sync.application.services.query_cache import QueryCache
from subject_sync.domain.entities import (
    MutationKind,
    MutationRecord,
    MutationStatus,
    QueryKey,
)
from subject_sync.domain.exceptions import get_error_message
from subject_sync.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("MutationCoordinator")

P = TypeVar("P")
R = TypeVar("R")

OptimisticApply = Callable[[Any, Any], Any]
CommitApply = Callable[[Any, Any, Any], Any]


class OptimisticMutation(Generic[P, R]):
    """One mutation kind bound to a cache, a remote call and its transforms.

    Args:
        cache: The store holding the touched collections.
        mutation_fn: Async remote call receiving the payload.
        kind: Mutation kind, recorded on each MutationRecord.
        query_keys: Cache keys this mutation touches.
        apply_optimistic: ``(previous_value, payload) -> next_value``.
        apply_result: ``(current_value, payload, server_result) -> next_value``.
        target_id: Extracts the target entity id from a payload.
        invalidate_on_settle: Refetch touched keys once the call settles.
        on_success: ``(result, payload)`` hook after commit.
        on_error: ``(message, payload)`` hook after rollback.
        on_settled: ``(record)`` hook after either outcome.
    """

    def __init__(
        self,
        cache: QueryCache,
        mutation_fn: Callable[[P], Awaitable[R]],
        *,
        kind: MutationKind,
        query_keys: Sequence[QueryKey] = (),
        apply_optimistic: OptimisticApply | None = None,
        apply_result: CommitApply | None = None,
        target_id: Callable[[P], str | None] | None = None,
        invalidate_on_settle: bool = False,
        on_success: Callable[[R, P], None] | None = None,
        on_error: Callable[[str, P], None] | None = None,
        on_settled: Callable[[MutationRecord], None] | None = None,
    ) -> None:
        self._cache = cache
        self._mutation_fn = mutation_fn
        self._kind = kind
        self._query_keys = tuple(query_keys)
        self._apply_optimistic = apply_optimistic
        self._apply_result = apply_result
        self._target_id = target_id
        self._invalidate_on_settle = invalidate_on_settle
        self._on_success = on_success
        self._on_error = on_error
        self._on_settled = on_settled

        self._pending = 0
        self._status = "idle"
        self._error: str | None = None
        self._data: R | None = None

    # ── State exposed to dialogs/forms ───────────────────────────────

    @property
    def kind(self) -> MutationKind:
        return self._kind

    @property
    def is_pending(self) -> bool:
        return self._pending > 0

    @property
    def pending_count(self) -> int:
        return self._pending

    @property
    def status(self) -> str:
        """``idle``, ``pending``, ``success`` or ``error`` (latest call wins)."""
        return self._status

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def data(self) -> R | None:
        return self._data

    def reset(self) -> None:
        self._status = "pending" if self._pending else "idle"
        self._error = None
        self._data = None

    # ── Protocol ─────────────────────────────────────────────────────

    async def mutate(self, payload: P) -> MutationRecord:
        """Run one mutation to completion and return its settled record.

        Remote failures never raise: they roll the cache back and are
        reported through the record (``error``/``exception``) and the
        ``on_error`` hook. Task cancellation rolls back and propagates.
        """
        record = MutationRecord(
            kind=self._kind,
            payload=payload,
            target_id=self._target_id(payload) if self._target_id else None,
        )
        self._pending += 1
        self._status = "pending"
        self._error = None

        for key in self._query_keys:
            self._cache.cancel_in_flight(key)

        for key in self._query_keys:
            record.previous_snapshots[key] = self._cache.get(key)
        slog.step(SyncStage.SNAPSHOT, self._kind.value, keys=len(self._query_keys))

        if self._apply_optimistic is not None:
            apply = self._apply_optimistic
            for key in self._query_keys:
                self._cache.set(key, lambda previous: apply(previous, payload))
            slog.step(SyncStage.OPTIMISTIC, self._kind.value, target=record.target_id)

        try:
            with slog.timed_step(SyncStage.REMOTE, self._kind.value, target=record.target_id):
                result = await self._mutation_fn(payload)
        except asyncio.CancelledError:
            self._rollback(record)
            record.status = MutationStatus.ROLLED_BACK
            record.error = "Mutation cancelled"
            self._status = "pending" if self._pending > 1 else "idle"
            raise
        except Exception as exc:
            self._rollback(record)
            record.status = MutationStatus.ROLLED_BACK
            record.error = get_error_message(exc)
            record.exception = exc
            self._status = "error"
            self._error = record.error
            slog.step_error(SyncStage.ROLLBACK, f"{self._kind.value} rolled back", error=exc)
            if self._on_error is not None:
                self._on_error(record.error, payload)
        else:
            if self._apply_result is not None:
                commit = self._apply_result
                for key in self._query_keys:
                    self._cache.set(key, lambda current: commit(current, payload, result))
                    # The list was never loaded: the committed value is not the whole collection
                    if record.previous_snapshots.get(key) is None:
                        self._cache.invalidate(key)
            record.status = MutationStatus.COMMITTED
            record.result = result
            self._status = "success"
            self._data = result
            slog.step_info(SyncStage.COMMIT, f"{self._kind.value} committed", target=record.target_id)
            if self._on_success is not None:
                self._on_success(result, payload)
        finally:
            self._pending -= 1
            if self._invalidate_on_settle:
                for key in self._query_keys:
                    self._cache.invalidate(key)
            slog.step(SyncStage.SETTLE, self._kind.value, status=record.status.value)
            if self._on_settled is not None:
                self._on_settled(record)

        return record

    def _rollback(self, record: MutationRecord) -> None:
        for key, snapshot in record.previous_snapshots.items():
            self._cache.set(key, snapshot)
