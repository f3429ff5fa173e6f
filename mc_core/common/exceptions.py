# mc_core/common/exceptions.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class DomainError(Exception):
    """
    Base for business-rule failures raised by services.
    The API layer maps each subclass to an error envelope code.
    """
    code = "domain_error"
    default_message = "Operation failed."

    def __init__(self, message: str | None = None, *, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InvalidTransition(DomainError):
    """
    Requested status change is not in the entity's transition table.
    Raised before any write; retrying fails identically.
    """
    code = "invalid_transition"

    def __init__(self, *, entity: str, from_status: str, to_status: str, actor_role: str | None = None):
        self.entity = entity
        self.from_status = from_status
        self.to_status = to_status
        self.actor_role = actor_role
        message = f"Cannot move {entity} from '{from_status}' to '{to_status}'"
        if actor_role:
            message += f" as {actor_role}"
        super().__init__(
            message + ".",
            details={
                "entity": entity,
                "from_status": from_status,
                "to_status": to_status,
                "actor_role": actor_role,
            },
        )


class ConflictingTransition(DomainError):
    """
    The record's status changed between the precondition read and the conditional write.
    """
    code = "conflicting_transition"

    def __init__(self, *, entity: str, expected_status: str, actual_status: str | None):
        self.entity = entity
        self.expected_status = expected_status
        self.actual_status = actual_status
        super().__init__(
            f"{entity.capitalize()} status changed concurrently (expected '{expected_status}', "
            f"found '{actual_status}').",
            details={"entity": entity, "expected_status": expected_status, "actual_status": actual_status},
        )


class RoleNotPermitted(DomainError):
    code = "permission_denied"
    default_message = "Your account is not allowed to perform this action."


class RecordNotFound(DomainError):
    code = "not_found"
    default_message = "Record not found."


class InputValidationError(DomainError):
    """
    Malformed input caught locally, before any storage call. Never retried.
    """
    code = "validation_error"
    default_message = "Invalid input."


class TransientStorageError(DomainError):
    """
    Storage/network failure eligible for bounded retry (uploads only).
    """
    code = "storage_unavailable"
    default_message = "Storage is temporarily unavailable. Please try again."


@dataclass(frozen=True)
class InventoryWarning:
    """
    Best-effort reconciliation problem reported alongside a committed order transition.
    """
    medicine_id: str | None
    medicine_name: str
    message: str
    meta: dict = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {
            "medicine_id": self.medicine_id,
            "medicine_name": self.medicine_name,
            "message": self.message,
        }
