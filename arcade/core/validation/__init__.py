"""
Validation package.

Exposes ``InputValidator`` for caller-supplied values (identifiers, scores,
limits). Business rules stay in the services.
"""

from arcade.core.validation.input_validator import InputValidator

__all__ = ["InputValidator"]
