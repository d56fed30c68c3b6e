"""Utility modules for monkeyrouter."""

from monkeyrouter.utils.errors import (
    CalibrationError,
    CatalogError,
    ConfigurationError,
    DuplicateTierModelError,
    EmptySampleSetError,
    MissingTierError,
    MonkeyRouterError,
    ValidationError,
)
from monkeyrouter.utils.logging import get_logger, setup_logging
from monkeyrouter.utils.tokens import (
    TokenCounter,
    TokenEstimator,
    estimate_cost,
    estimate_tokens,
)

__all__ = [
    # Tokens
    "TokenEstimator",
    "TokenCounter",
    "estimate_tokens",
    "estimate_cost",
    # Errors
    "MonkeyRouterError",
    "ConfigurationError",
    "MissingTierError",
    "DuplicateTierModelError",
    "CatalogError",
    "ValidationError",
    "EmptySampleSetError",
    "CalibrationError",
    # Logging
    "get_logger",
    "setup_logging",
]
