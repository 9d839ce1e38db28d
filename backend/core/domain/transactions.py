"""
core.domain.transactions — Helpers for safe state transitions.

Wraps ``select_for_update`` and conditional ``UPDATE`` statements into
reusable patterns so that every lifecycle write follows the same
concurrency-safe approach:

1. Inside ``atomic_write()``, re-read the row with a lock
   (``lock_for_update``).  On PostgreSQL this blocks competing writers;
   SQLite ignores row locks, so the project opens its SQLite
   transactions in ``IMMEDIATE`` mode and writers queue on the database
   lock instead.
2. Write with ``compare_and_set``, which only touches the row when the
   fields read in step 1 still hold.  A zero-row update means another
   request won the race.

Usage::

    from core.domain.transactions import atomic_write, compare_and_set, lock_for_update

    with atomic_write():
        case = lock_for_update(Case, case_id="FRD-123456-ABCD")
        ...
        if not compare_and_set(
            Case,
            pk=case.pk,
            expected={"current_step": 1, "version": case.version},
            values={"current_step": 2, "version": F("version") + 1},
        ):
            raise ConcurrentTransition()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from django.db import OperationalError, models, transaction

from core.domain.exceptions import ConcurrentTransition, NotFound

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=models.Model)

# Driver messages for lock contention (SQLite busy timeout, PostgreSQL
# lock_timeout and deadlock detection).
_LOCK_ERROR_MARKERS: tuple[str, ...] = (
    "database is locked",
    "database table is locked",
    "could not obtain lock",
    "deadlock detected",
)


def is_lock_error(exc: OperationalError) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _LOCK_ERROR_MARKERS)


@contextmanager
def atomic_write() -> Iterator[None]:
    """
    ``transaction.atomic()`` for lifecycle writes.

    A writer that gives up waiting for a competing transaction's lock
    gets ``ConcurrentTransition`` instead of the driver's
    ``OperationalError``.  Other database errors propagate unchanged.
    """
    try:
        with transaction.atomic():
            yield
    except OperationalError as exc:
        if not is_lock_error(exc):
            raise
        logger.warning("Lifecycle write lost a lock wait: %s", exc)
        raise ConcurrentTransition() from exc


def lock_for_update(model_class: type[M], **lookup: Any) -> M:
    """
    Acquire a row-level lock on the instance matching ``lookup``.

    Must be called inside an ``atomic()`` block.

    Raises:
        NotFound: If no row matches.
    """
    try:
        return model_class.objects.select_for_update().get(**lookup)
    except model_class.DoesNotExist:
        details = ", ".join(f"{key}={value!r}" for key, value in lookup.items())
        raise NotFound(f"{model_class.__name__} with {details} does not exist.")


def compare_and_set(
    model_class: type[models.Model],
    *,
    pk: Any,
    expected: dict[str, Any],
    values: dict[str, Any],
) -> bool:
    """
    Update the row ``pk`` with ``values`` only if every field in
    ``expected`` still has the given value.

    ``values`` may contain ``F()`` expressions.  ``auto_now`` fields are
    not touched by ``QuerySet.update``; callers pass ``updated_at``
    explicitly.

    Returns:
        ``True`` when exactly one row was updated.
    """
    updated = model_class.objects.filter(pk=pk, **expected).update(**values)
    return updated == 1
