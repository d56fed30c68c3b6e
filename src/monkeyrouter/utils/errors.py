"""
Custom exceptions for monkeyrouter.

Provides a hierarchy of exceptions for different error types,
enabling precise error handling throughout the router.
"""

from __future__ import annotations

from typing import Any


class MonkeyRouterError(Exception):
    """
    Base exception for all monkeyrouter errors.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for CLI and log output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(MonkeyRouterError):
    """
    Invalid configuration.

    Raised when configuration is invalid or missing required values.
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.config_key = config_key


class MissingTierError(ConfigurationError):
    """
    A model tier cannot be resolved from the catalog.

    Raised at router construction. There is no fallback model: a router
    built against the wrong model would produce decisions that look valid.
    """

    def __init__(self, tier: str, model_id: str | None = None):
        if model_id is None:
            message = f"No model configured for tier '{tier}'"
        else:
            message = f"Model '{model_id}' for tier '{tier}' is not in the catalog"
        super().__init__(
            message,
            config_key=f"tiers.{tier}",
            details={"tier": tier, "model_id": model_id},
        )
        self.tier = tier
        self.model_id = model_id


class DuplicateTierModelError(ConfigurationError):
    """Two or more tiers resolve to the same catalog entry."""

    def __init__(self, model_id: str, tiers: list[str]):
        super().__init__(
            f"Model '{model_id}' is assigned to multiple tiers: {', '.join(tiers)}",
            config_key="tiers",
            details={"model_id": model_id, "tiers": tiers},
        )
        self.model_id = model_id
        self.tiers = tiers


# =============================================================================
# Catalog Errors
# =============================================================================


class CatalogError(MonkeyRouterError):
    """
    Malformed model catalog.

    Raised when a catalog file or mapping cannot be turned into
    model descriptors (schema violations, duplicate ids).
    """

    def __init__(
        self,
        message: str = "Invalid model catalog.",
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, details, cause)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(MonkeyRouterError):
    """
    Input validation error.

    Raised when caller input is invalid and cannot be recovered locally.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.field = field


class EmptySampleSetError(ValidationError):
    """Calibration was given no sample queries."""

    def __init__(self, field: str = "samples"):
        super().__init__(f"{field} cannot be empty.", field=field)


# =============================================================================
# Calibration Errors
# =============================================================================


class CalibrationError(MonkeyRouterError):
    """Threshold calibration could not run."""

    def __init__(
        self,
        message: str = "Failed to calibrate router threshold.",
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, details, cause)
