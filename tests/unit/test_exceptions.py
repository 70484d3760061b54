"""
Unit tests for domain and infrastructure exception contracts.
"""

import pytest

from arcade.core.exceptions import (
    ConfigurationError,
    ErrorSeverity,
    TransientStorageError,
)
from arcade.modules.shared.exceptions import (
    AlreadyClaimedError,
    AlreadyOwnedError,
    ArcadeDomainException,
    InsufficientFundsError,
    InsufficientResourcesError,
    InvalidOperationError,
    ItemNotAvailableError,
    NotFoundError,
    ValidationError,
)

pytestmark = pytest.mark.unit


class TestDomainErrorCodes:
    @pytest.mark.parametrize(
        "exc, code",
        [
            (InsufficientFundsError(required=500, current=499), "INSUFFICIENT_FUNDS"),
            (ItemNotAvailableError("neon_fox"), "ITEM_NOT_AVAILABLE"),
            (AlreadyOwnedError("p1", "neon_fox"), "ALREADY_OWNED"),
            (AlreadyClaimedError("p1", "tap_500"), "ALREADY_CLAIMED"),
            (InvalidOperationError("claim_reward", "not complete"), "INVALID_CLAIM_REWARD"),
            (NotFoundError("Player", "p1"), "PLAYER_NOT_FOUND"),
            (ValidationError("limit", "too big"), "VALIDATION_LIMIT"),
        ],
    )
    def test_stable_codes(self, exc, code):
        assert exc.error_code == code
        assert isinstance(exc, ArcadeDomainException)
        assert exc.is_retryable is False

    def test_insufficient_funds_details(self):
        exc = InsufficientFundsError(required=500, current=499)

        assert isinstance(exc, InsufficientResourcesError)
        assert exc.details["deficit"] == 1
        assert exc.to_dict()["error_code"] == "INSUFFICIENT_FUNDS"
        assert "[INSUFFICIENT_FUNDS]" in str(exc)

    def test_not_found_without_identifier(self):
        assert NotFoundError("Game").message == "Game not found"


class TestInfrastructureErrors:
    def test_transient_storage_error_is_retryable(self):
        original = OSError("connection refused")
        exc = TransientStorageError("read", original)

        assert exc.is_retryable is True
        assert exc.severity is ErrorSeverity.ERROR
        assert exc.details["error_type"] == "OSError"
        assert exc.error_code == "TRANSIENT_STORAGE_ERROR"

    def test_configuration_error_is_critical(self):
        exc = ConfigurationError("profile.top_games_limit", "must be an integer")

        assert exc.severity is ErrorSeverity.CRITICAL
        assert exc.is_retryable is False

    def test_domain_errors_log_at_info(self):
        exc = AlreadyOwnedError("p1", "a1")

        assert exc.severity is ErrorSeverity.INFO
        assert exc.is_retryable is False
