"""Tests for the vibedoc exception hierarchy."""

import pytest

from vibedoc.exceptions import (
    ClusterNotFoundError,
    ContentNotLoadedError,
    DialogueNotFoundError,
    InvalidTransitionError,
    NotFoundError,
    PatchError,
    TaskNotFoundError,
    VibedocError,
)


@pytest.mark.parametrize(
    "error",
    [
        TaskNotFoundError(task_id="t1"),
        ClusterNotFoundError(cluster_id="c1"),
        DialogueNotFoundError(cluster_id="c1", dialogue_id=2),
        ContentNotLoadedError(),
    ],
)
def test_lookup_errors_share_a_base(error):
    assert isinstance(error, NotFoundError)
    assert isinstance(error, VibedocError)
    assert not error.retryable


def test_message_includes_context():
    error = DialogueNotFoundError(cluster_id="c1", dialogue_id=2)
    assert str(error) == "Dialogue not found (cluster_id='c1', dialogue_id=2)"


def test_transition_context():
    error = InvalidTransitionError(
        "Cannot move task", task_id="t1", current="completed", requested="running"
    )
    assert error.context == {"task_id": "t1", "current": "completed", "requested": "running"}


def test_patch_error_sorts_fields():
    assert PatchError(fields={"zeta", "alpha"}).context["fields"] == ["alpha", "zeta"]


def test_plain_message_without_context():
    assert str(ContentNotLoadedError()) == "No podcast script loaded"
