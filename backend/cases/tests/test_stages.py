"""Unit tests for the stage table in ``cases.stages``."""

from __future__ import annotations

import pytest

from cases.stages import (
    FIRST_STEP,
    STAGES,
    TERMINAL_STEP,
    describe_step,
    get_stage,
    is_valid_step,
    label_for_step,
    status_for_step,
    step_for_status,
)


def test_table_covers_steps_one_to_nine_in_order():
    assert [int(stage.step) for stage in STAGES] == list(range(1, 10))
    assert FIRST_STEP == 1
    assert TERMINAL_STEP == 9


def test_step_and_status_are_a_bijection():
    slugs = [stage.slug for stage in STAGES]
    assert len(set(slugs)) == len(slugs)
    for step in range(1, 10):
        assert step_for_status(status_for_step(step)) == step


@pytest.mark.parametrize(
    "step, slug, label",
    [
        (1, "submitted", "Report Submitted"),
        (3, "crpc_generated", "91CRPC Generated"),
        (4, "emails_sent", "Email Sent"),
        (6, "assigned_to_police", "Assigned to Police"),
        (9, "closed", "Case Closed"),
    ],
)
def test_known_stages(step, slug, label):
    assert status_for_step(step) == slug
    assert label_for_step(step) == label


def test_police_stages_require_assignment():
    police = [int(stage.step) for stage in STAGES if stage.requires_assignment]
    assert police == [7, 8]
    assert all(stage.roles == ("police",) for stage in STAGES if stage.requires_assignment)


@pytest.mark.parametrize("bad", [0, 10, -1, "abc", None])
def test_unknown_step_raises(bad):
    assert not is_valid_step(bad)
    with pytest.raises(ValueError):
        get_stage(bad)


def test_unknown_status_raises():
    with pytest.raises(ValueError):
        step_for_status("investigating")


def test_describe_step_falls_back_for_unknown_steps():
    assert describe_step(2) == "verified"
    assert describe_step(12) == "step 12"
