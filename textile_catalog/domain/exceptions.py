"""Domain exceptions.

All catalog errors derive from ``DomainError`` so the API layer can map
them to responses in one place. None of them is fatal: every failure
path leaves state as it was and reports a message.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """A required field is missing or malformed.

    Raised before any network call is made.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Message suitable for showing inline next to the form.
            field: Name of the offending field, if any.
        """
        super().__init__(message, details={"field": field} if field else {})
        self.field = field


class NotFoundError(DomainError):
    """A referenced document does not exist."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Product").
            entity_id: ID that was looked up.
        """
        super().__init__(
            f"{entity_type} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class TransportError(DomainError):
    """The document store, blob store or identity provider failed."""

    def __init__(self, operation: str, cause: BaseException | str) -> None:
        """Initialize transport error.

        Args:
            operation: Operation that failed (e.g., "get products/abc").
            cause: Underlying exception or message.
        """
        reason = str(cause) or cause.__class__.__name__
        super().__init__(reason, details={"operation": operation})
        self.operation = operation


class ShareUnavailableError(DomainError):
    """Native share is absent or the share was rejected.

    Callers fall back to the messaging deep link.
    """

    pass


class PermissionDeniedError(DomainError):
    """The signed-in user lacks the role required for an operation."""

    def __init__(self, uid: str, required_role: str) -> None:
        """Initialize permission denied error.

        Args:
            uid: User that attempted the operation.
            required_role: Role the operation requires.
        """
        super().__init__(
            f"Role '{required_role}' required",
            details={"uid": uid, "required_role": required_role},
        )


class InvalidStateTransitionError(DomainError):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        entity_type: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of state machine (e.g., "HierarchySelector").
            current_state: Current state.
            target_state: Attempted target state.
            allowed_transitions: Allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type} "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )
