"""Business logic for expired entry garbage collection.

There is no dedicated scheduler: ordinary requests trigger a bounded
sweep, gated by a process-local debounce guard. Each process keeps its
own guard, so several instances may sweep concurrently; a clustered
deployment should run ``cleanup_expired`` from a scheduled job instead.

Only committed entries are swept. Abandoned multipart upload sessions
are never reaped here.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Final

from django.conf import settings
from django.utils import timezone

from server.apps.entries.logic.entry_operations import (
    delete_entry,
    expired_entry_ids,
)

logger = logging.getLogger(__name__)

_MIN_SWEEP_LIMIT: Final = 1
_MAX_SWEEP_LIMIT: Final = 1000


@dataclass(frozen=True, slots=True)
class SweepResult:
    """Outcome of one sweep.

    Entries in ``failed_ids`` were left in place and are retried by a
    later sweep.
    """

    deleted_ids: list[str] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        """Number of entries deleted."""
        return len(self.deleted_ids)


class SweepGuard:
    """Minimum-interval gate for piggybacked sweeps.

    The first caller after the interval wins and runs the sweep; callers
    inside the interval skip. Not a cross-process lock.
    """

    def __init__(self) -> None:
        """Initialize an unarmed guard; the first acquire always wins."""
        self._lock = Lock()
        self._last_run: float | None = None

    def try_acquire(self, interval_seconds: float) -> bool:
        """Claim the right to run a sweep now.

        Args:
            interval_seconds: Minimum time between two sweeps.

        Returns:
            True if the caller should sweep, False to skip.
        """
        now = time.monotonic()
        with self._lock:
            if (
                self._last_run is not None
                and now - self._last_run < interval_seconds
            ):
                return False
            self._last_run = now
            return True

    def reset(self) -> None:
        """Re-arm the guard so the next request sweeps immediately."""
        with self._lock:
            self._last_run = None


# Process-wide, never torn down
sweep_guard = SweepGuard()


def get_sweep_interval() -> int:
    """Get minimum seconds between piggybacked sweeps.

    Returns:
        Interval from settings or default of 60 seconds.
    """
    return getattr(settings, 'SHARING_SWEEP_INTERVAL_SECONDS', 60)


def get_sweep_limit() -> int:
    """Get maximum entries deleted by one sweep.

    Returns:
        Limit from settings or default of 100.
    """
    return getattr(settings, 'SHARING_SWEEP_LIMIT', 100)


def clamp_sweep_limit(limit: int) -> int:
    """Bound a sweep limit to [1, 1000].

    Args:
        limit: Requested limit.

    Returns:
        Clamped limit.
    """
    return max(_MIN_SWEEP_LIMIT, min(_MAX_SWEEP_LIMIT, limit))


def sweep_expired_entries(
    now: datetime | None = None,
    limit: int | None = None,
) -> SweepResult:
    """Delete entries whose expiration time has passed.

    Each entry loses its blob, its download events and its record, in
    that order. A blob that is already missing counts as deleted. A
    failure on one entry is logged and does not stop the sweep.

    Args:
        now: Reference time, defaults to the current time.
        limit: Maximum entries to delete, clamped to [1, 1000].

    Returns:
        Ids deleted and ids that failed.
    """
    now = now or timezone.now()
    limit = clamp_sweep_limit(get_sweep_limit() if limit is None else limit)

    result = SweepResult()
    for entry_id in expired_entry_ids(now, limit):
        try:
            delete_entry(entry_id)
        except Exception:
            logger.exception('Failed to delete expired entry: %s', entry_id)
            result.failed_ids.append(entry_id)
        else:
            result.deleted_ids.append(entry_id)

    if result.deleted_ids or result.failed_ids:
        logger.info(
            'Expired entry sweep: %d deleted, %d failed',
            result.deleted_count,
            len(result.failed_ids),
        )
    return result


def maybe_sweep_expired_entries(
    guard: SweepGuard = sweep_guard,
) -> SweepResult | None:
    """Run a sweep unless one ran within the debounce interval.

    A sweep that raises or leaves failed entries re-arms the guard so
    the next request retries instead of waiting a full interval. Errors
    never propagate to the request being served.

    Args:
        guard: Debounce guard, the process-wide one by default.

    Returns:
        Sweep result, or None if skipped or failed.
    """
    if not guard.try_acquire(get_sweep_interval()):
        return None

    try:
        result = sweep_expired_entries()
    except Exception:
        logger.exception('Expired entry sweep failed, retrying next request')
        guard.reset()
        return None

    if result.failed_ids:
        guard.reset()
    return result
