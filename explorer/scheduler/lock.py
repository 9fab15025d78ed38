"""Refresh concurrency lock using threading.Lock.

Keeps two stored-post refreshes (scheduled or manual) from running at once.
Acquisition is non-blocking: a caller that loses the race gets False and
skips its run.
"""

from __future__ import annotations

import threading
from uuid import UUID

_refresh_lock = threading.Lock()
_current_run_id: UUID | None = None


def acquire_refresh_lock(run_id: UUID) -> bool:
    """Try to take the lock for *run_id*; False if another run holds it."""
    global _current_run_id
    if _refresh_lock.acquire(blocking=False):
        _current_run_id = run_id
        return True
    return False


def release_refresh_lock() -> None:
    """Release the lock; a no-op when it is not held."""
    global _current_run_id
    _current_run_id = None
    if _refresh_lock.locked():
        _refresh_lock.release()


def get_current_run_id() -> UUID | None:
    return _current_run_id


def is_refresh_running() -> bool:
    return _current_run_id is not None
