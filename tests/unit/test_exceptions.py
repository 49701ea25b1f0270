"""Unit tests for the infrastructure and domain exception hierarchies."""

import logging

import pytest

from siegestats.core.exceptions import (
    BackendError,
    CacheError,
    ConfigurationError,
    DatabaseError,
    ErrorSeverity,
    RedisConnectionError,
    StructuredError,
)
from siegestats.modules.shared.exceptions import (
    NotFoundError,
    PlayerNotFoundError,
    ProviderError,
    SiegeStatsDomainException,
    ValidationError,
)


class TestInfrastructureExceptions:
    def test_database_error_metadata(self):
        error = DatabaseError("insert level", ValueError("constraint"))

        assert isinstance(error, BackendError)
        assert error.error_code == "DATABASE_ERROR"
        assert error.is_retryable is True
        assert error.details["error_type"] == "ValueError"
        assert error.message == "Database error during insert level: constraint"
        assert str(error).startswith("[DATABASE_ERROR]")

    def test_configuration_error_is_critical(self):
        error = ConfigurationError("expiration_ms", "must be non-negative")

        assert error.severity is ErrorSeverity.CRITICAL
        assert error.is_retryable is False

    def test_cache_error_carries_key(self):
        error = CacheError("get_id", "stats:identity:psn/ghost")

        assert error.cache_key == "stats:identity:psn/ghost"
        assert error.details["cache_key"] == "stats:identity:psn/ghost"
        assert error.details["error_type"] is None
        assert error.severity is ErrorSeverity.WARNING

    def test_to_dict(self):
        payload = RedisConnectionError("initialize", OSError("refused")).to_dict()

        assert payload["error_type"] == "RedisConnectionError"
        assert payload["error_code"] == "REDIS_ERROR"
        assert payload["severity"] == "error"


class TestDomainExceptions:
    def test_player_not_found(self):
        error = PlayerNotFoundError("psn", "ghost")

        assert isinstance(error, NotFoundError)
        assert error.error_code == "PLAYER_NOT_FOUND"
        assert error.details["identifier"] == "psn/ghost"
        assert error.severity is ErrorSeverity.INFO

    def test_provider_error_is_retryable_warning(self):
        error = ProviderError("get_rank", TimeoutError("slow"), platform="xbl")

        assert error.is_retryable is True
        assert error.severity is ErrorSeverity.WARNING
        assert error.details["platform"] == "xbl"

    def test_validation_error_code(self):
        assert ValidationError("username", "empty").error_code == "VALIDATION_USERNAME"

    def test_shares_structured_base_with_infrastructure(self):
        assert issubclass(SiegeStatsDomainException, StructuredError)
        assert not issubclass(SiegeStatsDomainException, BackendError)


@pytest.mark.parametrize(
    "severity, level",
    [
        (ErrorSeverity.DEBUG, logging.DEBUG),
        (ErrorSeverity.INFO, logging.INFO),
        (ErrorSeverity.WARNING, logging.WARNING),
        (ErrorSeverity.ERROR, logging.ERROR),
        (ErrorSeverity.CRITICAL, logging.CRITICAL),
    ],
)
def test_severity_maps_to_log_level(severity, level):
    assert severity.log_level == level
