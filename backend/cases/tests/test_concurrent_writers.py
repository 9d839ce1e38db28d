"""
Two real database connections advancing the same case at once.

These tests commit for real (``transaction=True``) so each thread sees
the other's writes through its own connection.
"""

from __future__ import annotations

import threading

import pytest
from django.db import connection

from cases.models import Case, TimelineEntry
from cases.workflow import CaseFlowEngine
from core.domain.access import Actor
from core.domain.exceptions import DomainError

pytestmark = pytest.mark.django_db(transaction=True)


def _run_together(*calls):
    """Start every call at the same moment and collect one outcome each."""
    barrier = threading.Barrier(len(calls))
    outcomes: list[str] = []
    lock = threading.Lock()

    def _worker(call):
        try:
            barrier.wait(timeout=10)
            call()
            outcome = "ok"
        except DomainError as exc:
            outcome = exc.code
        except Exception as exc:  # recorded so the assertion shows it
            outcome = f"{type(exc).__module__}.{type(exc).__name__}: {exc}"
        finally:
            connection.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=_worker, args=(call,)) for call in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return outcomes


def test_simultaneous_advances_let_exactly_one_through(submitted_case, create_user):
    case = submitted_case()
    admin = Actor.from_user(create_user(role="admin"))

    outcomes = _run_together(
        lambda: CaseFlowEngine.advance(case.case_id, 2, admin),
        lambda: CaseFlowEngine.advance(case.case_id, 2, admin),
    )

    assert len(outcomes) == 2, outcomes
    assert outcomes.count("ok") == 1, outcomes
    loser = next(outcome for outcome in outcomes if outcome != "ok")
    assert loser in {"invalid_transition", "concurrent_transition"}, outcomes

    case = Case.objects.get(pk=case.pk)
    assert case.current_step == 2
    assert case.version == 2
    assert list(
        TimelineEntry.objects.filter(case=case)
        .order_by("created_at", "id")
        .values_list("stage", flat=True)
    ) == ["submitted", "verified"]


def test_advance_racing_a_repair_never_errors(submitted_case, create_user):
    from cases.timeline import TimelineLedger

    case = submitted_case()
    admin = Actor.from_user(create_user(role="admin"))

    outcomes = _run_together(
        lambda: CaseFlowEngine.advance(case.case_id, 2, admin),
        lambda: TimelineLedger.repair(case.case_id, actor=admin),
    )

    assert len(outcomes) == 2, outcomes
    assert set(outcomes) <= {"ok", "concurrent_transition"}, outcomes
    assert Case.objects.get(pk=case.pk).current_step in (1, 2)
