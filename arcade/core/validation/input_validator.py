"""
Input Validation Layer

Purpose
-------
Centralized validation for caller-supplied values entering the Arcade
services: opaque identifiers, score values, limits and free-text fields.
Every check either returns the normalized value or raises
``ValidationError``.

Non-Responsibilities
--------------------
- Business rule validation (service layer concern)
- Database constraints (storage concern)

Observability
-------------
Every validation failure is logged at debug level with field_name,
raw_value (repr) and reason.
"""

from __future__ import annotations

import math
import re
from typing import Any, NoReturn, Optional

from arcade.core.logging.logger import get_logger
from arcade.modules.shared.exceptions import ValidationError

logger = get_logger(__name__)

MAX_ID_LENGTH = 64
ID_ALLOWED_CHARS = r"A-Za-z0-9_.:\-"


def _raise_validation_error(field_name: str, value: Any, message: str) -> NoReturn:
    """Log and raise a ValidationError."""
    logger.debug(
        "Input validation failed",
        extra={
            "field_name": field_name,
            "raw_value": repr(value),
            "reason": message,
        },
    )
    raise ValidationError(field_name, message)


class InputValidator:
    """
    Stateless input validation helpers.

    All methods return the validated value on success and raise
    ValidationError on failure.
    """

    # =========================================================================
    # INTEGER VALIDATION
    # =========================================================================

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
    ) -> int:
        """
        Validate and convert value to integer with optional bounds checking.

        Booleans are rejected even though they are ``int`` subclasses.
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        if isinstance(value, bool):
            _raise_validation_error(field_name, value, "Must be a whole number")

        try:
            int_value = int(value)
        except (ValueError, TypeError):
            _raise_validation_error(
                field_name,
                value,
                f"Must be a whole number, got '{value}'",
            )

        if min_value is not None and int_value < min_value:
            _raise_validation_error(
                field_name,
                int_value,
                f"Must be at least {min_value}, got {int_value}",
            )

        if max_value is not None and int_value > max_value:
            _raise_validation_error(
                field_name,
                int_value,
                f"Cannot exceed {max_value}, got {int_value}",
            )

        return int_value

    @staticmethod
    def validate_positive_integer(
        value: Any,
        field_name: str,
        max_value: Optional[int] = None,
    ) -> int:
        return InputValidator.validate_integer(
            value, field_name, min_value=1, max_value=max_value
        )

    @staticmethod
    def validate_non_negative_integer(
        value: Any,
        field_name: str,
        max_value: Optional[int] = None,
    ) -> int:
        return InputValidator.validate_integer(
            value, field_name, min_value=0, max_value=max_value
        )

    # =========================================================================
    # SCORE VALIDATION
    # =========================================================================

    @staticmethod
    def validate_score_value(value: Any, field_name: str = "value") -> float:
        """
        Validate a submitted score as a finite number.

        Raises:
            ValidationError: If value is missing, non-numeric, NaN or infinite
        """
        if value is None or isinstance(value, bool):
            _raise_validation_error(field_name, value, "Score must be a number")

        try:
            number = float(value)
        except (ValueError, TypeError):
            _raise_validation_error(
                field_name, value, f"Score must be a number, got '{value}'"
            )

        if not math.isfinite(number):
            _raise_validation_error(field_name, value, "Score must be finite")

        return number

    # =========================================================================
    # ID VALIDATION
    # =========================================================================

    @staticmethod
    def validate_entity_id(value: Any, field_name: str) -> str:
        """
        Validate an opaque string identifier.

        Identifiers are 1 to 64 characters of letters, digits, ``_ . : -``.
        """
        if value is None or not isinstance(value, str):
            _raise_validation_error(field_name, value, "Identifier must be a string")

        return InputValidator.validate_string(
            value,
            field_name,
            min_length=1,
            max_length=MAX_ID_LENGTH,
            allowed_chars=ID_ALLOWED_CHARS,
        )

    @staticmethod
    def validate_player_id(value: Any, field_name: str = "player_id") -> str:
        return InputValidator.validate_entity_id(value, field_name)

    @staticmethod
    def validate_game_id(value: Any, field_name: str = "game_id") -> str:
        return InputValidator.validate_entity_id(value, field_name)

    @staticmethod
    def validate_avatar_id(value: Any, field_name: str = "avatar_id") -> str:
        return InputValidator.validate_entity_id(value, field_name)

    # =========================================================================
    # STRING VALIDATION
    # =========================================================================

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        allowed_chars: Optional[str] = None,
    ) -> str:
        """
        Validate string input with optional length and character constraints.

        Args:
            value: String value to validate (converted via str())
            field_name: Name of field for error messages
            min_length: Minimum string length
            max_length: Maximum string length
            allowed_chars: Regex character class for allowed characters
                           (e.g., 'a-zA-Z0-9 ')

        Returns:
            Validated, stripped string
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        str_value = str(value).strip()

        if min_length is not None and len(str_value) < min_length:
            _raise_validation_error(
                field_name,
                str_value,
                f"Must be at least {min_length} characters",
            )

        if max_length is not None and len(str_value) > max_length:
            _raise_validation_error(
                field_name,
                str_value,
                f"Cannot exceed {max_length} characters",
            )

        if allowed_chars is not None:
            pattern = f"^[{allowed_chars}]+$"
            if not re.match(pattern, str_value):
                _raise_validation_error(
                    field_name,
                    str_value,
                    "Contains invalid characters",
                )

        return str_value
