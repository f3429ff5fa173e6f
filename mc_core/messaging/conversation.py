# mc_core/messaging/conversation.py
from __future__ import annotations

from mc_core.common.exceptions import InputValidationError


def derive_conversation_id(a, b) -> str:
    """
    Stable id for the conversation between two participants.
    Order-independent: both ids are compared as strings and joined with "_".
    """
    left, right = str(a), str(b)
    if not left or not right:
        raise InputValidationError("Both participants are required.", details={"field": "participants"})
    if left == right:
        raise InputValidationError("A conversation needs two different participants.", details={"field": "participants"})
    return "_".join(sorted([left, right]))


def participants_of(conversation_id: str) -> tuple[str, str]:
    parts = (conversation_id or "").split("_")
    if len(parts) != 2 or not all(parts):
        raise InputValidationError("Malformed conversation id.", details={"conversation_id": conversation_id})
    return parts[0], parts[1]


def is_participant(conversation_id: str, user_id) -> bool:
    return str(user_id) in participants_of(conversation_id)
