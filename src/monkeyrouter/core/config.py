"""
monkeyrouter Configuration System.

Supports loading from environment variables, YAML files, and programmatic configuration.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from monkeyrouter.core.catalog import ModelCatalog
from monkeyrouter.core.router import DEFAULT_THRESHOLD, AdvancedRouter
from monkeyrouter.core.types import ConversationMessage, ModelTier, normalize_history
from monkeyrouter.utils.errors import ConfigurationError, ValidationError


@dataclass
class RoutingConfig:
    """Configuration for tier selection."""

    threshold: float = DEFAULT_THRESHOLD


@dataclass
class TierConfig:
    """
    Tier assignment overrides.

    A tier left as None keeps the catalog's own assignment (for the
    built-in catalog: DEFAULT_TIERS).
    """

    low: str | None = None
    mid: str | None = None
    high: str | None = None
    superior: str | None = None

    def overrides(self) -> dict[ModelTier, str]:
        """Tiers that are explicitly assigned."""
        assigned = {
            ModelTier.LOW: self.low,
            ModelTier.MID: self.mid,
            ModelTier.HIGH: self.high,
            ModelTier.SUPERIOR: self.superior,
        }
        return {tier: model_id for tier, model_id in assigned.items() if model_id}


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "WARNING"
    json_format: bool = False
    log_file: str | None = None


@dataclass
class MonkeyRouterConfig:
    """
    Master configuration for monkeyrouter.

    Can be created from:
    - Environment variables (load with from_env())
    - YAML file (load with from_file())
    - Programmatically (direct instantiation)

    Example:
        # From environment
        config = MonkeyRouterConfig.from_env()

        # From file
        config = MonkeyRouterConfig.from_file("monkeyrouter.yaml")

        # Programmatic
        config = MonkeyRouterConfig(
            routing=RoutingConfig(threshold=0.4),
            tiers=TierConfig(high="gpt-4o"),
        )
        router = config.build_router()
    """

    routing: RoutingConfig = field(default_factory=RoutingConfig)
    tiers: TierConfig = field(default_factory=TierConfig)
    catalog_path: str | None = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> MonkeyRouterConfig:
        """
        Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file

        Returns:
            MonkeyRouterConfig instance
        """
        if dotenv_path:
            load_dotenv(dotenv_path)
        else:
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            return os.getenv(key) or default

        def get_env_float(key: str, default: float) -> float:
            val = os.getenv(key)
            if not val:
                return default
            try:
                return float(val)
            except ValueError as e:
                raise ConfigurationError(
                    f"{key} must be a number, got {val!r}", config_key=key
                ) from e

        def get_env_bool(key: str, default: bool) -> bool:
            val = os.getenv(key, "").lower()
            if val in ("true", "1", "yes"):
                return True
            if val in ("false", "0", "no"):
                return False
            return default

        return cls(
            routing=RoutingConfig(
                threshold=get_env_float("MONKEYROUTER_THRESHOLD", DEFAULT_THRESHOLD),
            ),
            tiers=TierConfig(
                low=get_env("MONKEYROUTER_TIER_LOW"),
                mid=get_env("MONKEYROUTER_TIER_MID"),
                high=get_env("MONKEYROUTER_TIER_HIGH"),
                superior=get_env("MONKEYROUTER_TIER_SUPERIOR"),
            ),
            catalog_path=get_env("MONKEYROUTER_CATALOG_PATH"),
            logging=LoggingConfig(
                level=get_env("LOG_LEVEL", "WARNING"),
                json_format=get_env_bool("LOG_JSON", False),
                log_file=get_env("LOG_FILE"),
            ),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> MonkeyRouterConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            MonkeyRouterConfig instance
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        config = cls._from_dict(data or {})
        # Relative catalog paths are relative to the config file
        if config.catalog_path and not Path(config.catalog_path).is_absolute():
            config.catalog_path = str(path.parent / config.catalog_path)
        return config

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> MonkeyRouterConfig:
        """Create config from dictionary."""
        routing_data = data.get("routing", {})
        tiers_data = data.get("tiers", {})
        logging_data = data.get("logging", {})

        try:
            return cls(
                routing=RoutingConfig(**routing_data) if routing_data else RoutingConfig(),
                tiers=TierConfig(**tiers_data) if tiers_data else TierConfig(),
                catalog_path=data.get("catalog_path"),
                logging=LoggingConfig(**logging_data) if logging_data else LoggingConfig(),
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "routing": {
                "threshold": self.routing.threshold,
            },
            "tiers": {
                "low": self.tiers.low,
                "mid": self.tiers.mid,
                "high": self.tiers.high,
                "superior": self.tiers.superior,
            },
            "catalog_path": self.catalog_path,
            "logging": {
                "level": self.logging.level,
                "json_format": self.logging.json_format,
                "log_file": self.logging.log_file,
            },
        }

    def build_catalog(self) -> ModelCatalog:
        """Catalog described by this configuration, with its tier assignment applied."""
        if self.catalog_path:
            catalog = ModelCatalog.from_file(self.catalog_path)
        else:
            catalog = ModelCatalog.default()
        return catalog.with_tiers(self.tiers.overrides())

    def build_router(self) -> AdvancedRouter:
        """Router for this configuration."""
        return AdvancedRouter(self.build_catalog(), threshold=self.routing.threshold)


# Global config instance (can be overridden)
_global_config: MonkeyRouterConfig | None = None


def get_config() -> MonkeyRouterConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = MonkeyRouterConfig.from_env()
    return _global_config


def set_config(config: MonkeyRouterConfig | None) -> None:
    """Set the global configuration instance (None resets to environment)."""
    global _global_config
    _global_config = config


# =============================================================================
# History Files
# =============================================================================


def load_history_file(path: str | Path) -> list[ConversationMessage]:
    """
    Load a conversation history from a JSON or YAML file.

    The file holds a list of {role, content} messages, or a mapping
    with a "messages" or "history" list.

    Raises:
        ValidationError: If the file cannot be parsed or has the wrong shape
    """
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"History file not found: {path}", field="history")

    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValidationError(f"Could not parse history file: {path}", field="history") from e

    if isinstance(data, dict):
        data = data.get("messages", data.get("history"))
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValidationError(
            "History file must contain a list of messages",
            field="history",
            details={"path": str(path)},
        )
    return normalize_history(data)
