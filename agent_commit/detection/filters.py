"""Edits that are always attributed to a human, regardless of typing speed."""

from typing import Optional

from agent_commit.models import EditEvent

# Inserts longer than this with nothing replaced are treated as a paste.
PASTE_THRESHOLD = 50
MICRO_EDIT_LENGTH = 2


def human_action_reason(event: EditEvent) -> Optional[str]:
    """Return why ``event`` is an unconditional human signal, or None.

    Rules are checked in order and the first match wins.
    """
    inserted = len(event.inserted_text)
    deleted = event.deleted_length

    if event.inserted_text == "" and deleted > 0:
        return "deletion"
    if inserted == 0 and deleted == 1:
        return "backspace"
    if inserted <= MICRO_EDIT_LENGTH and deleted <= MICRO_EDIT_LENGTH:
        return "micro-edit"
    if inserted > PASTE_THRESHOLD and deleted == 0:
        return "paste"
    if event.is_undo:
        return "undo"
    return None


def is_human_action(event: EditEvent) -> bool:
    return human_action_reason(event) is not None
