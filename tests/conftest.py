"""
Pytest configuration and fixtures for monkeyrouter tests.
"""

from pathlib import Path

import pytest

from monkeyrouter.core.catalog import ModelCatalog, ModelDescriptor
from monkeyrouter.core.config import set_config
from monkeyrouter.core.router import AdvancedRouter
from monkeyrouter.core.types import ModelTier
from monkeyrouter.utils.logging import setup_logging

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch: pytest.MonkeyPatch):
    """Start every test from an environment-derived configuration."""
    for key in (
        "MONKEYROUTER_THRESHOLD",
        "MONKEYROUTER_TIER_LOW",
        "MONKEYROUTER_TIER_MID",
        "MONKEYROUTER_TIER_HIGH",
        "MONKEYROUTER_TIER_SUPERIOR",
        "MONKEYROUTER_CATALOG_PATH",
        "LOG_LEVEL",
        "LOG_JSON",
        "LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    set_config(None)
    yield
    set_config(None)
    setup_logging(level="WARNING")


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the YAML fixture files."""
    return FIXTURES_DIR


@pytest.fixture
def default_catalog() -> ModelCatalog:
    """Provide the built-in model catalog."""
    return ModelCatalog.default()


@pytest.fixture
def tier_models() -> dict[ModelTier, ModelDescriptor]:
    """Provide one small descriptor per tier."""
    return {
        ModelTier.LOW: ModelDescriptor(
            id="test-low",
            name="Test Low",
            provider="test",
            context_window=4_096,
            max_output_tokens=1_024,
            cost_per_token=0.000001,
        ),
        ModelTier.MID: ModelDescriptor(
            id="test-mid",
            name="Test Mid",
            provider="test",
            context_window=8_192,
            max_output_tokens=2_048,
            cost_per_token=0.000005,
        ),
        ModelTier.HIGH: ModelDescriptor(
            id="test-high",
            name="Test High",
            provider="test",
            context_window=32_768,
            max_output_tokens=4_096,
            cost_per_token=0.00001,
        ),
        ModelTier.SUPERIOR: ModelDescriptor(
            id="test-superior",
            name="Test Superior",
            provider="test",
            context_window=131_072,
            max_output_tokens=16_384,
            cost_per_token=0.00005,
        ),
    }


@pytest.fixture
def test_catalog(tier_models: dict[ModelTier, ModelDescriptor]) -> ModelCatalog:
    """Provide a catalog built from the test tier models."""
    return ModelCatalog.from_tier_mapping(tier_models)


@pytest.fixture
def router() -> AdvancedRouter:
    """Provide a router over the built-in catalog."""
    return AdvancedRouter()


@pytest.fixture
def rapid_history() -> list[dict[str, str]]:
    """Ten short alternating messages."""
    return [
        {"role": "user" if i % 2 == 0 else "assistant", "content": "test message"}
        for i in range(10)
    ]


@pytest.fixture
def explanation_history() -> list[dict[str, str]]:
    """History whose latest user turn asks for an explanation."""
    return [
        {"role": "user", "content": "What is a closure in JavaScript?"},
        {
            "role": "assistant",
            "content": "A closure is a function bundled with the variables it captures "
            "from its surrounding scope.",
        },
        {"role": "user", "content": "Please explain how closures capture variables"},
    ]


@pytest.fixture
def long_history() -> list[dict[str, str]]:
    """Single message with more than 8000 characters of content."""
    return [{"role": "user", "content": "a" * 8000}]
