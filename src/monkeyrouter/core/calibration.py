"""
Router Calibration - pick a complexity threshold from labelled samples.

Raising the threshold widens the high-tier gate (complexity < 1.5 *
threshold), so the share of queries routed to the strong tiers (high and
superior) grows with the threshold. Calibration bisects the threshold
range until that share is within tolerance of a target.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from monkeyrouter.core.catalog import ModelCatalog
from monkeyrouter.core.router import AdvancedRouter
from monkeyrouter.core.types import ConversationMessage, ModelTier
from monkeyrouter.utils.errors import CalibrationError, EmptySampleSetError, ValidationError
from monkeyrouter.utils.logging import get_logger

logger = get_logger(__name__)

STRONG_TIERS = (ModelTier.HIGH, ModelTier.SUPERIOR)


# =============================================================================
# Models
# =============================================================================


class SampleQuery(BaseModel):
    """A labelled query for calibration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: str = Field(description="Query text")
    expected_tier: ModelTier = Field(
        validation_alias=AliasChoices("expected_tier", "expectedTier"),
        description="Tier the query should route to",
    )
    history: tuple[ConversationMessage, ...] = Field(
        default=(), description="Prior turns, oldest first"
    )

    @field_validator("history", mode="before")
    @classmethod
    def _coerce_history(cls, value: Any) -> tuple[ConversationMessage, ...]:
        if value is None:
            return ()
        return tuple(ConversationMessage.coerce(item) for item in value)


class ThresholdEvaluation(BaseModel):
    """Routing outcome of every sample at one threshold."""

    threshold: float
    accuracy: float = Field(ge=0.0, le=1.0)
    distribution: dict[str, int]
    strong_percentage: float = Field(ge=0.0, le=1.0)


class CalibrationResult(BaseModel):
    """Outcome of calibrate_threshold()."""

    target_strong_percentage: float
    optimal_threshold: float
    accuracy: float
    strong_percentage: float
    model_distribution: dict[str, int]
    iterations: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump()


# =============================================================================
# Calibrator
# =============================================================================


class RouterCalibrator:
    """
    Threshold calibration against labelled sample queries.

    Usage:
        calibrator = RouterCalibrator.from_file("sample_queries.yaml")
        result = calibrator.calibrate_threshold(target_strong_pct=0.5)
        calibrator.save_results(result, "calibration.json")
    """

    def __init__(
        self,
        samples: Iterable[SampleQuery | Mapping[str, Any]],
        catalog: ModelCatalog | None = None,
    ) -> None:
        """
        Initialize RouterCalibrator.

        Args:
            samples: Labelled queries (SampleQuery or mappings)
            catalog: Model catalog for the probe routers (built-in if None)

        Raises:
            EmptySampleSetError: If no samples are given
            ValidationError: If a sample is malformed
        """
        self._samples = self._parse_samples(samples)
        if not self._samples:
            raise EmptySampleSetError()
        self._catalog = catalog or ModelCatalog.default()

    @staticmethod
    def _parse_samples(samples: Iterable[SampleQuery | Mapping[str, Any]]) -> list[SampleQuery]:
        parsed: list[SampleQuery] = []
        for index, sample in enumerate(samples or []):
            if isinstance(sample, SampleQuery):
                parsed.append(sample)
                continue
            try:
                parsed.append(SampleQuery.model_validate(sample))
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid sample query at index {index}",
                    field="samples",
                    details={"errors": e.errors(include_url=False)},
                ) from e
        return parsed

    @classmethod
    def from_file(cls, path: str | Path, catalog: ModelCatalog | None = None) -> RouterCalibrator:
        """
        Load samples from a YAML or JSON file.

        The file holds either a list of samples or {"samples": [...]}.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Samples file not found: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except (UnicodeDecodeError, yaml.YAMLError) as e:
                raise ValidationError(
                    f"Could not parse samples file: {path}", field="samples"
                ) from e

        if isinstance(data, Mapping):
            data = data.get("samples")
        if data is None:
            data = []
        if not isinstance(data, list):
            raise ValidationError("Samples file must contain a list of samples", field="samples")

        logger.info("Calibration samples loaded", path=str(path), samples=len(data))
        return cls(data, catalog=catalog)

    @property
    def samples(self) -> list[SampleQuery]:
        return list(self._samples)

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate_threshold(self, threshold: float) -> ThresholdEvaluation:
        """Route every sample with a router at the given threshold."""
        router = AdvancedRouter(self._catalog, threshold=threshold)
        distribution = {tier.value: 0 for tier in ModelTier}
        correct = 0

        for sample in self._samples:
            decision = router.route(sample.content, sample.history)
            distribution[decision.tier.value] += 1
            if decision.tier == sample.expected_tier:
                correct += 1

        total = len(self._samples)
        strong = sum(distribution[tier.value] for tier in STRONG_TIERS)
        return ThresholdEvaluation(
            threshold=threshold,
            accuracy=correct / total,
            distribution=distribution,
            strong_percentage=strong / total,
        )

    def calibrate_threshold(
        self,
        target_strong_pct: float = 0.5,
        tolerance: float = 0.05,
        step: float = 0.05,
        lower: float = 0.1,
        upper: float = 0.9,
    ) -> CalibrationResult:
        """
        Bisect for the threshold whose strong-tier share matches a target.

        Args:
            target_strong_pct: Desired fraction routed to high or superior
            tolerance: Accepted distance from the target
            step: Amount the bracket moves past each probe
            lower: Lowest threshold probed
            upper: Highest threshold probed

        Returns:
            CalibrationResult for the first probe within tolerance, or the
            closest probe if none is

        Raises:
            CalibrationError: If the search parameters are invalid
        """
        if not 0.0 <= target_strong_pct <= 1.0:
            raise CalibrationError(
                f"target_strong_pct must be within [0, 1], got {target_strong_pct}",
                details={"target_strong_pct": target_strong_pct},
            )
        if tolerance <= 0 or step <= 0:
            raise CalibrationError(
                "tolerance and step must be positive",
                details={"tolerance": tolerance, "step": step},
            )
        if lower < 0 or lower > upper:
            raise CalibrationError(
                f"Invalid threshold range [{lower}, {upper}]",
                details={"lower": lower, "upper": upper},
            )

        left, right = lower, upper
        threshold = round((left + right) / 2, 6)
        evaluation = best = self.evaluate_threshold(threshold)
        iterations = 1

        while True:
            gap = abs(evaluation.strong_percentage - target_strong_pct)
            logger.debug(
                "Calibration probe",
                iteration=iterations,
                threshold=threshold,
                strong_percentage=round(evaluation.strong_percentage, 4),
                accuracy=round(evaluation.accuracy, 4),
            )

            if gap < abs(best.strong_percentage - target_strong_pct) or (
                gap == abs(best.strong_percentage - target_strong_pct)
                and evaluation.accuracy > best.accuracy
            ):
                best = evaluation

            if gap < tolerance:
                best = evaluation
                break
            if evaluation.strong_percentage < target_strong_pct:
                left = threshold + step
            else:
                right = threshold - step
            if left > right:
                break

            threshold = round((left + right) / 2, 6)
            evaluation = self.evaluate_threshold(threshold)
            iterations += 1

        result = CalibrationResult(
            target_strong_percentage=target_strong_pct,
            optimal_threshold=best.threshold,
            accuracy=best.accuracy,
            strong_percentage=best.strong_percentage,
            model_distribution=best.distribution,
            iterations=iterations,
        )
        logger.info(
            "Calibration complete",
            optimal_threshold=result.optimal_threshold,
            accuracy=round(result.accuracy, 4),
            strong_percentage=round(result.strong_percentage, 4),
            iterations=iterations,
        )
        return result

    @staticmethod
    def save_results(result: CalibrationResult, path: str | Path) -> Path:
        """Write a calibration result as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)
        logger.info("Calibration results saved", path=str(path))
        return path
