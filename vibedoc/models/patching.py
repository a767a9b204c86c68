"""Typed partial-update helper shared by tasks and dialogues."""

from __future__ import annotations

import dataclasses
from collections.abc import Collection, Mapping
from typing import Any, TypeVar

from ..exceptions import PatchError

T = TypeVar("T")


def check_patch(updates: Mapping[str, Any], editable: Collection[str], *, target: str) -> None:
    """Reject updates naming fields outside ``editable``.

    Raises:
        PatchError: if any key is unknown or read-only
    """
    unknown = set(updates) - set(editable)
    if unknown:
        raise PatchError(f"Cannot update {target} fields", fields=unknown)


def apply_patch(record: T, updates: Mapping[str, Any], editable: Collection[str], *, target: str) -> T:
    """Return a copy of a frozen dataclass with ``updates`` merged in.

    Fields omitted from ``updates`` are carried over untouched. An empty
    patch returns ``record`` itself so callers can detect a no-op by
    identity.
    """
    check_patch(updates, editable, target=target)
    if not updates:
        return record
    return dataclasses.replace(record, **updates)  # type: ignore[type-var]
