"""
Model catalog - descriptors of the models the router can pick from.

The catalog is a plain lookup of model id -> ModelDescriptor plus the
tier assignment (low/mid/high/superior -> model id). The router only
ever asks it to resolve the four tiers once, at construction time.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from monkeyrouter.core.types import ModelTier
from monkeyrouter.utils.errors import (
    CatalogError,
    DuplicateTierModelError,
    MissingTierError,
)
from monkeyrouter.utils.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Model Descriptor
# =============================================================================


class ModelDescriptor(BaseModel):
    """Immutable description of one model."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Unique model identifier")
    name: str = Field(min_length=1, description="Display name")
    provider: str = Field(description="Provider tag (groq, openai, anthropic, ...)")
    context_window: int = Field(gt=0, description="Context window in tokens")
    max_output_tokens: int = Field(gt=0, description="Maximum output tokens")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Default temperature")
    top_p: float = Field(default=1.0, ge=0.0, le=1.0, description="Default nucleus sampling")
    cost_per_token: float = Field(default=0.0, ge=0.0, description="USD per token")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump()


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    # Tier models
    ModelDescriptor(
        id="llama3-groq-8b",
        name="Llama 3 Groq 8B",
        provider="groq",
        context_window=8_192,
        max_output_tokens=8_192,
        cost_per_token=0.000001,
    ),
    ModelDescriptor(
        id="llama-3.2-3b",
        name="Llama 3.2 3B",
        provider="local",
        context_window=128_000,
        max_output_tokens=8_192,
        cost_per_token=0.0,
    ),
    ModelDescriptor(
        id="llama-3.3-70b",
        name="Llama 3.3 70B",
        provider="groq",
        context_window=128_000,
        max_output_tokens=32_768,
        cost_per_token=0.00002,
    ),
    ModelDescriptor(
        id="grok-2",
        name="Grok 2",
        provider="xai",
        context_window=131_072,
        max_output_tokens=32_768,
        cost_per_token=0.00004,
    ),
    # Alternatives assignable through configuration
    ModelDescriptor(
        id="gpt-4o",
        name="GPT-4o",
        provider="openai",
        context_window=128_000,
        max_output_tokens=16_384,
        cost_per_token=0.00003,
    ),
    ModelDescriptor(
        id="gpt-4o-mini",
        name="GPT-4o mini",
        provider="openai",
        context_window=128_000,
        max_output_tokens=16_384,
        cost_per_token=0.00002,
    ),
    ModelDescriptor(
        id="o1-mini",
        name="o1 mini",
        provider="openai",
        context_window=128_000,
        max_output_tokens=65_536,
        cost_per_token=0.00003,
    ),
    ModelDescriptor(
        id="claude-3.5-sonnet-20250214",
        name="Claude 3.5 Sonnet",
        provider="anthropic",
        context_window=200_000,
        max_output_tokens=100_000,
        cost_per_token=0.00003,
    ),
    ModelDescriptor(
        id="claude-3.5-haiku-20250523",
        name="Claude 3.5 Haiku",
        provider="anthropic",
        context_window=200_000,
        max_output_tokens=100_000,
        cost_per_token=0.00002,
    ),
)

DEFAULT_TIERS: dict[ModelTier, str] = {
    ModelTier.LOW: "llama3-groq-8b",
    ModelTier.MID: "llama-3.2-3b",
    ModelTier.HIGH: "llama-3.3-70b",
    ModelTier.SUPERIOR: "grok-2",
}


# =============================================================================
# Model Catalog
# =============================================================================


class ModelCatalog:
    """
    Lookup of model descriptors with a tier assignment.

    Usage:
        catalog = ModelCatalog.default()
        tiers = catalog.resolve_tiers()
        print(tiers[ModelTier.HIGH].name)

        # From a YAML or JSON file
        catalog = ModelCatalog.from_file("models.yaml")
    """

    def __init__(
        self,
        models: Mapping[str, ModelDescriptor] | list[ModelDescriptor] | tuple[ModelDescriptor, ...],
        tiers: Mapping[ModelTier | str, str] | None = None,
    ) -> None:
        """
        Initialize ModelCatalog.

        Args:
            models: Descriptors, either keyed by id or as a sequence
            tiers: Tier -> model id assignment (defaults to DEFAULT_TIERS)

        Raises:
            CatalogError: If model ids are duplicated or a tier name is unknown
        """
        self._models: dict[str, ModelDescriptor] = {}

        if isinstance(models, Mapping):
            for key, descriptor in models.items():
                if key != descriptor.id:
                    raise CatalogError(
                        f"Catalog key '{key}' does not match model id '{descriptor.id}'",
                        details={"key": key, "model_id": descriptor.id},
                    )
                self._models[key] = descriptor
        else:
            for descriptor in models:
                if descriptor.id in self._models:
                    raise CatalogError(
                        f"Duplicate model id in catalog: {descriptor.id}",
                        details={"model_id": descriptor.id},
                    )
                self._models[descriptor.id] = descriptor

        self._tiers = self._parse_tiers(tiers if tiers is not None else DEFAULT_TIERS)

    @staticmethod
    def _parse_tiers(tiers: Mapping[ModelTier | str, str]) -> dict[ModelTier, str]:
        parsed: dict[ModelTier, str] = {}
        for key, model_id in tiers.items():
            try:
                tier = ModelTier(key)
            except ValueError as e:
                raise CatalogError(
                    f"Unknown tier name: {key}",
                    details={"tier": str(key), "valid": [t.value for t in ModelTier]},
                    cause=e,
                ) from e
            if model_id:
                parsed[tier] = str(model_id)
        return parsed

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, model_id: str) -> ModelDescriptor | None:
        """Get a descriptor by id, or None."""
        return self._models.get(model_id)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(self._models.values())

    def __len__(self) -> int:
        return len(self._models)

    @property
    def tiers(self) -> dict[ModelTier, str]:
        """Tier -> model id assignment (copy)."""
        return dict(self._tiers)

    def resolve_tier(self, tier: ModelTier | str) -> ModelDescriptor:
        """
        Resolve a single tier to its descriptor.

        Raises:
            MissingTierError: If the tier is unassigned or its model is absent
        """
        tier = ModelTier(tier)
        model_id = self._tiers.get(tier)
        if model_id is None:
            raise MissingTierError(tier.value)
        descriptor = self._models.get(model_id)
        if descriptor is None:
            raise MissingTierError(tier.value, model_id)
        return descriptor

    def resolve_tiers(self) -> dict[ModelTier, ModelDescriptor]:
        """
        Resolve all four tiers.

        Returns:
            Mapping of every ModelTier to a distinct descriptor

        Raises:
            MissingTierError: If any tier cannot be resolved
            DuplicateTierModelError: If two tiers share a model
        """
        resolved = {tier: self.resolve_tier(tier) for tier in ModelTier}

        owners: dict[str, list[str]] = {}
        for tier, descriptor in resolved.items():
            owners.setdefault(descriptor.id, []).append(tier.value)
        for model_id, tier_names in owners.items():
            if len(tier_names) > 1:
                raise DuplicateTierModelError(model_id, tier_names)

        return resolved

    def with_tiers(self, tiers: Mapping[ModelTier | str, str]) -> ModelCatalog:
        """Return a copy of this catalog with some tier assignments replaced."""
        merged: dict[ModelTier | str, str] = dict(self._tiers)
        merged.update(self._parse_tiers(tiers))
        return ModelCatalog(dict(self._models), merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the catalog file format."""
        return {
            "models": [descriptor.to_dict() for descriptor in self._models.values()],
            "tiers": {tier.value: model_id for tier, model_id in self._tiers.items()},
        }

    def __repr__(self) -> str:
        tiers = ", ".join(f"{t.value}={m}" for t, m in self._tiers.items())
        return f"ModelCatalog(models={len(self._models)}, tiers=[{tiers}])"

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def default(cls) -> ModelCatalog:
        """Create a fresh catalog from the built-in model table."""
        return cls(DEFAULT_MODELS, DEFAULT_TIERS)

    @classmethod
    def from_tier_mapping(
        cls,
        mapping: Mapping[ModelTier | str, ModelDescriptor],
    ) -> ModelCatalog:
        """Build a catalog directly from tier -> descriptor pairs."""
        models: dict[str, ModelDescriptor] = {}
        tiers: dict[ModelTier | str, str] = {}
        for tier, descriptor in mapping.items():
            models[descriptor.id] = descriptor
            tiers[tier] = descriptor.id
        return cls(models, tiers)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ModelCatalog:
        """
        Create a catalog from parsed file content.

        Args:
            data: {"models": [...], "tiers": {...}}; tiers are optional

        Raises:
            CatalogError: If the data does not describe valid models
        """
        if not isinstance(data, Mapping):
            raise CatalogError("Catalog data must be a mapping")

        raw_models = data.get("models")
        if not isinstance(raw_models, list) or not raw_models:
            raise CatalogError("Catalog must define a non-empty 'models' list")

        descriptors: list[ModelDescriptor] = []
        for index, raw in enumerate(raw_models):
            try:
                descriptors.append(ModelDescriptor.model_validate(raw))
            except PydanticValidationError as e:
                raise CatalogError(
                    f"Invalid model entry at index {index}",
                    details={"errors": e.errors(include_url=False)},
                    cause=e,
                ) from e

        tiers = data.get("tiers")
        if tiers is not None and not isinstance(tiers, Mapping):
            raise CatalogError("Catalog 'tiers' must be a mapping")

        return cls(descriptors, tiers)

    @classmethod
    def from_file(cls, path: str | Path) -> ModelCatalog:
        """
        Load a catalog from a YAML or JSON file.

        Args:
            path: Path to the catalog file

        Returns:
            ModelCatalog instance
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Catalog file not found: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except (UnicodeDecodeError, yaml.YAMLError) as e:
                raise CatalogError(
                    f"Could not parse catalog file: {path}",
                    details={"path": str(path)},
                    cause=e,
                ) from e

        catalog = cls.from_dict(data or {})
        logger.info("Model catalog loaded", path=str(path), models=len(catalog))
        return catalog
