"""Edit-mode decision and the version state machine.

``decide`` is a pure function of the version status and the optional mode
hint from the edit request. ``ensure_transition`` is the only place that knows
which status changes are legal.
"""
from __future__ import annotations

import enum

from api.errors import IllegalTransition

from .models import TermVersion

Status = TermVersion.Status

CREATE_FROM_SOURCE_HINT = "createFromSource"


class EditMode(str, enum.Enum):
    EDIT_EXISTING = "editExisting"
    CREATE_FROM_SOURCE = "createFromSource"
    NOT_EDITABLE = "notEditable"


ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    Status.DRAFT: frozenset({Status.PUBLISHED}),
    Status.PUBLISHED: frozenset({Status.ARCHIVED}),
    # Restore re-publishes an archived version.
    Status.ARCHIVED: frozenset({Status.PUBLISHED}),
}


def _as_status(status: str) -> Status:
    try:
        return Status(status)
    except ValueError:
        raise IllegalTransition(f"Unknown version status: {status!r}") from None


def decide(status: str, mode_hint: str | None = None) -> EditMode:
    s = _as_status(status)
    if s == Status.DRAFT:
        # Mode hint is ignored once the version is already a draft.
        return EditMode.EDIT_EXISTING
    if s in (Status.PUBLISHED, Status.ARCHIVED):
        if (mode_hint or "").strip() == CREATE_FROM_SOURCE_HINT:
            return EditMode.CREATE_FROM_SOURCE
        return EditMode.NOT_EDITABLE
    raise IllegalTransition(f"Unhandled version status: {s!r}")


def can_transition(current: str, target: str) -> bool:
    return _as_status(target) in ALLOWED_TRANSITIONS.get(_as_status(current), frozenset())


def ensure_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise IllegalTransition(f"Cannot move version from {current} to {target}")


def ensure_draft(version: TermVersion, action: str = "edit") -> None:
    if version.status != Status.DRAFT:
        raise IllegalTransition(f"Cannot {action}: only DRAFT versions can be changed (version is {version.status})")
