"""
Domain exceptions for the Arcade engine.

Purpose
-------
Define the structured, domain-specific exception hierarchy for leaderboard,
progression and shop logic. Services raise these for business rule
violations; callers translate them into player-facing messages.

Design Notes
------------
- All domain exceptions inherit from `ArcadeDomainException`.
- Each exception carries `message`, `details`, `severity`, `is_retryable`
  and a stable `error_code`.
- Purchase outcomes (`ItemNotAvailableError`, `AlreadyOwnedError`,
  `InsufficientFundsError`, `NotFoundError`) are terminal: never retried.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from arcade.core.exceptions import ErrorSeverity


class ArcadeDomainException(Exception):
    """
    Base exception for all domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise ArcadeDomainException("Purchase failed", {"reason": "closed"})
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class InsufficientResourcesError(ArcadeDomainException):
    """
    Raised when a player lacks required resources for an action.

    Args:
        resource: Name of the resource type (e.g., "coins")
        required: Amount required for the action
        current: Amount player currently has
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, resource: str, required: int, current: int) -> None:
        self.resource = resource
        self.required = required
        self.current = current
        super().__init__(
            f"Insufficient {resource}: need {required:,}, have {current:,}",
            details={
                "resource": resource,
                "required": required,
                "current": current,
                "deficit": required - current,
            },
            error_code=f"INSUFFICIENT_{resource.upper()}",
        )


class InsufficientFundsError(InsufficientResourcesError):
    """Raised when a coin balance cannot cover a price."""

    def __init__(self, required: int, current: int) -> None:
        super().__init__("coins", required, current)
        self.error_code = "INSUFFICIENT_FUNDS"


class NotFoundError(ArcadeDomainException):
    """
    Raised when a requested entity cannot be found.

    Args:
        resource_type: Type of resource (e.g., "Player", "Game", "Avatar")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class ItemNotAvailableError(ArcadeDomainException):
    """Raised when an avatar has no active shop listing."""

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, avatar_id: str) -> None:
        self.avatar_id = avatar_id
        super().__init__(
            f"Avatar is not available in the shop: {avatar_id}",
            details={"avatar_id": avatar_id},
            error_code="ITEM_NOT_AVAILABLE",
        )


class AlreadyOwnedError(ArcadeDomainException):
    """Raised when a player already owns the avatar they try to acquire."""

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, player_id: str, avatar_id: str) -> None:
        self.player_id = player_id
        self.avatar_id = avatar_id
        super().__init__(
            f"Avatar already owned: {avatar_id}",
            details={"player_id": player_id, "avatar_id": avatar_id},
            error_code="ALREADY_OWNED",
        )


class ValidationError(ArcadeDomainException):
    """
    Raised when input fails domain validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={"field": field, "validation_message": message},
            error_code=f"VALIDATION_{field.upper()}",
        )


class InvalidOperationError(ArcadeDomainException):
    """
    Raised when an action violates a game rule.

    Example:
        >>> raise InvalidOperationError("equip_avatar", "Avatar is not owned")
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Invalid operation '{action}': {reason}",
            details={"action": action, "reason": reason},
            error_code=f"INVALID_{action.upper()}",
        )


class AlreadyClaimedError(ArcadeDomainException):
    """Raised when a reward has already been taken."""

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, player_id: str, reward: str) -> None:
        self.player_id = player_id
        self.reward = reward
        super().__init__(
            f"Reward already claimed: {reward}",
            details={"player_id": player_id, "reward": reward},
            error_code="ALREADY_CLAIMED",
        )
