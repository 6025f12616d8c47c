"""Tests for the operation state machine."""

import pytest

from server.apps.files.logic.operation_state import (
    InvalidTransitionError,
    OperationState,
    OperationTracker,
)


def test_starts_validating():
    """Test a new tracker sits in VALIDATING."""
    tracker = OperationTracker('upload', 'notes.txt')

    assert tracker.state is OperationState.VALIDATING
    assert not tracker.is_finished


def test_happy_path():
    """Test the full successful sequence is accepted."""
    tracker = OperationTracker('upload', 'notes.txt')

    tracker.advance(OperationState.WRITING_PRIMARY)
    tracker.advance(OperationState.WRITING_SECONDARY)
    tracker.advance(OperationState.DONE)

    assert tracker.history == [
        OperationState.VALIDATING,
        OperationState.WRITING_PRIMARY,
        OperationState.WRITING_SECONDARY,
        OperationState.DONE,
    ]
    assert tracker.is_finished


def test_compensation_path():
    """Test a failed second write goes through COMPENSATING."""
    tracker = OperationTracker('upload', 'notes.txt')

    tracker.advance(OperationState.WRITING_PRIMARY)
    tracker.advance(OperationState.WRITING_SECONDARY)
    tracker.advance(OperationState.COMPENSATING)
    tracker.advance(OperationState.FAILED)

    assert tracker.state is OperationState.FAILED
    assert tracker.is_finished


@pytest.mark.parametrize('steps', [
    (),
    (OperationState.WRITING_PRIMARY,),
    (OperationState.WRITING_PRIMARY, OperationState.WRITING_SECONDARY),
])
def test_fail_from_any_running_state(steps):
    """Test FAILED is reachable before DONE."""
    tracker = OperationTracker('delete', '1')
    for step in steps:
        tracker.advance(step)

    tracker.advance(OperationState.FAILED)

    assert tracker.state is OperationState.FAILED


@pytest.mark.parametrize(('steps', 'illegal'), [
    ((), OperationState.WRITING_SECONDARY),
    ((), OperationState.DONE),
    ((OperationState.WRITING_PRIMARY,), OperationState.COMPENSATING),
    (
        (
            OperationState.WRITING_PRIMARY,
            OperationState.WRITING_SECONDARY,
            OperationState.COMPENSATING,
        ),
        OperationState.DONE,
    ),
    ((OperationState.FAILED,), OperationState.WRITING_PRIMARY),
])
def test_illegal_transitions(steps, illegal):
    """Test skipped or reversed steps are refused."""
    tracker = OperationTracker('upload', 'notes.txt')
    for step in steps:
        tracker.advance(step)

    with pytest.raises(InvalidTransitionError):
        tracker.advance(illegal)

    assert tracker.state is not illegal


def test_done_is_terminal():
    """Test nothing follows DONE."""
    tracker = OperationTracker('upload', 'notes.txt')
    tracker.advance(OperationState.WRITING_PRIMARY)
    tracker.advance(OperationState.WRITING_SECONDARY)
    tracker.advance(OperationState.DONE)

    with pytest.raises(InvalidTransitionError):
        tracker.advance(OperationState.FAILED)
