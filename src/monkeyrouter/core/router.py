"""
Advanced Router - model tier selection for user queries.

Routes a query and its conversation history to one of four model tiers
and picks a token budget, temperature and response strategy.

Decision order (first match wins):
Condition                                               | Tier
task_type == casual                                     | low (fixed casual config)
code_complexity > 0.8 or (>= 3 tech tags and cx > 0.7)  | superior
cx < 1.5 * threshold or context < 8000 or ts/react      | high
cx < threshold and context < 4000                       | mid
otherwise                                               | low

Tier baselines (max_tokens / temperature):
low       256  / 0.7 casual, else 0.5
mid       512 (768 analysis, creative) / 0.7
high      1024 / 0.7 coding, analysis, else 0.9
superior  4096 / 0.5 coding, analysis, else 0.7
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from monkeyrouter.core.analyzer import QueryAnalysis, analyze_query
from monkeyrouter.core.catalog import ModelCatalog, ModelDescriptor
from monkeyrouter.core.types import (
    ConversationMessage,
    ModelTier,
    ResponseStrategy,
    RouterConfig,
    TaskType,
    TechStack,
    normalize_history,
)
from monkeyrouter.strategies.response import ResponseStrategySelector
from monkeyrouter.utils.errors import ConfigurationError, MonkeyRouterError, ValidationError
from monkeyrouter.utils.logging import RoutingLogger, get_logger, log_error
from monkeyrouter.utils.tokens import TokenEstimator

logger = get_logger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_THRESHOLD = 0.5

CASUAL_MAX_TOKENS = 50
CASUAL_TEMPERATURE = 0.7
CASUAL_EXPLANATION = "Simple greeting detected, using efficient model for quick response."

SUPERIOR_CODE_COMPLEXITY = 0.8
SUPERIOR_TECH_STACK_SIZE = 3
SUPERIOR_COMPLEXITY = 0.7
HIGH_THRESHOLD_FACTOR = 1.5
HIGH_CONTEXT_CHARS = 8000
MID_CONTEXT_CHARS = 4000

# History adjustment
LONG_HISTORY_MESSAGES = 5
TEMPERATURE_BOOST = 1.1
MAX_TEMPERATURE = 1.0
EXPLANATION_BOOST = 1.2
MAX_TOKENS_CAP = 4096
RAPID_EXCHANGE_FACTOR = 0.8
MIN_TOKENS_FLOOR = 128

_PRECISE_TASKS = (TaskType.CODING, TaskType.ANALYSIS)
_LONG_FORM_TASKS = (TaskType.ANALYSIS, TaskType.CREATIVE)


def _to_fixed(value: float, places: str = "0.01") -> str:
    """Format like a fixed-point display of the float's exact binary value."""
    return str(Decimal(value).quantize(Decimal(places), rounding=ROUND_HALF_UP))


# =============================================================================
# Advanced Router
# =============================================================================


class AdvancedRouter:
    """
    Rule-based model router.

    The tier mapping is resolved from the catalog once, at construction,
    and never changes afterwards. route() is a pure function of its
    arguments and that mapping, so one router can serve concurrent callers.

    Usage:
        router = AdvancedRouter()
        decision = router.route("How do I use React hooks?", history=[])
        print(decision.model.id, decision.max_tokens, decision.temperature)

        # Custom catalog and threshold
        router = AdvancedRouter(ModelCatalog.from_file("models.yaml"), threshold=0.4)
    """

    def __init__(
        self,
        catalog: ModelCatalog | Mapping[ModelTier | str, ModelDescriptor] | None = None,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        """
        Initialize AdvancedRouter.

        Args:
            catalog: Model catalog, or a tier -> descriptor mapping
                (built-in catalog if None)
            threshold: Complexity threshold for tier selection

        Raises:
            ConfigurationError: If the threshold is invalid
            MissingTierError: If a tier cannot be resolved
            DuplicateTierModelError: If two tiers share a model
        """
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ConfigurationError(
                f"threshold must be a number, got {type(threshold).__name__}",
                config_key="routing.threshold",
            )
        if not math.isfinite(threshold) or threshold < 0:
            raise ConfigurationError(
                f"threshold must be a finite non-negative number, got {threshold}",
                config_key="routing.threshold",
            )

        if catalog is None:
            catalog = ModelCatalog.default()
        elif not isinstance(catalog, ModelCatalog):
            catalog = ModelCatalog.from_tier_mapping(catalog)

        try:
            tiers = catalog.resolve_tiers()
        except MonkeyRouterError as e:
            log_error(logger, "resolve model tiers", e, catalog=repr(catalog))
            raise

        self._catalog = catalog
        self._tiers: dict[ModelTier, ModelDescriptor] = tiers
        self._threshold = float(threshold)
        self._routing_logger = RoutingLogger("advanced")

        logger.info(
            "AdvancedRouter initialized",
            threshold=self._threshold,
            tiers={tier.value: model.id for tier, model in tiers.items()},
        )

    @property
    def threshold(self) -> float:
        """Complexity threshold."""
        return self._threshold

    @property
    def tiers(self) -> dict[ModelTier, ModelDescriptor]:
        """Resolved tier mapping (copy)."""
        return dict(self._tiers)

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    # =========================================================================
    # Routing
    # =========================================================================

    def route(
        self,
        query: str,
        history: Iterable[ConversationMessage | dict[str, Any]] | None = None,
    ) -> RouterConfig:
        """
        Route a query to a model tier.

        Args:
            query: Latest user utterance, not yet appended to history
            history: Prior turns, oldest first

        Returns:
            RouterConfig with the selected model and generation parameters
        """
        messages = normalize_history(history)
        analysis = analyze_query(query, messages)

        if analysis.task_type == TaskType.CASUAL:
            logger.debug("Casual query detected, using fixed casual config")
            decision = self._casual_config()
            self._routing_logger.log_decision(
                decision.tier.value,
                decision.model.id,
                decision.max_tokens,
                decision.temperature,
                task_type=TaskType.CASUAL.value,
                strategy=decision.response_strategy.value,
                shortcut=True,
            )
            return decision

        tier = self._select_tier(analysis)
        max_tokens, temperature = self._tier_baseline(tier, analysis.task_type)
        model = self._tiers[tier]

        strategy = ResponseStrategySelector.select_strategy(
            analysis.question_type, analysis.task_type
        )
        strategy = ResponseStrategySelector.adjust_strategy(
            strategy, analysis.context_length, analysis.rapid_exchange
        )

        explanation = self._build_explanation(model, analysis)
        max_tokens, temperature = self._adjust_for_history(
            max_tokens, temperature, analysis
        )

        decision = RouterConfig(
            model=model,
            tier=tier,
            max_tokens=max_tokens,
            temperature=temperature,
            response_strategy=ResponseStrategy(strategy),
            routing_explanation=explanation,
            question_type=analysis.question_type,
            task_type=analysis.task_type,
        )

        self._routing_logger.log_decision(
            tier.value,
            model.id,
            max_tokens,
            temperature,
            task_type=analysis.task_type.value,
            question_type=analysis.question_type.value,
            strategy=decision.response_strategy.value,
        )
        return decision

    def _casual_config(self) -> RouterConfig:
        return RouterConfig(
            model=self._tiers[ModelTier.LOW],
            tier=ModelTier.LOW,
            max_tokens=CASUAL_MAX_TOKENS,
            temperature=CASUAL_TEMPERATURE,
            response_strategy=ResponseStrategy.CASUAL_CONVERSATION,
            routing_explanation=CASUAL_EXPLANATION,
            question_type=None,
            task_type=TaskType.CASUAL,
        )

    def _select_tier(self, analysis: QueryAnalysis) -> ModelTier:
        complexity = analysis.complexity
        context_length = analysis.context_length
        tech_stack = analysis.tech_stack

        if analysis.code_complexity > SUPERIOR_CODE_COMPLEXITY or (
            len(tech_stack) >= SUPERIOR_TECH_STACK_SIZE and complexity > SUPERIOR_COMPLEXITY
        ):
            return ModelTier.SUPERIOR

        if (
            complexity < self._threshold * HIGH_THRESHOLD_FACTOR
            or context_length < HIGH_CONTEXT_CHARS
            or TechStack.TYPESCRIPT in tech_stack
            or TechStack.REACT in tech_stack
        ):
            return ModelTier.HIGH

        # Never taken: reaching here requires context_length >= 8000.
        if complexity < self._threshold and context_length < MID_CONTEXT_CHARS:
            return ModelTier.MID

        return ModelTier.LOW

    @staticmethod
    def _tier_baseline(tier: ModelTier, task_type: TaskType) -> tuple[int, float]:
        """Baseline (max_tokens, temperature) of a tier for a task type."""
        if tier == ModelTier.SUPERIOR:
            return 4096, 0.5 if task_type in _PRECISE_TASKS else 0.7
        if tier == ModelTier.HIGH:
            return 1024, 0.7 if task_type in _PRECISE_TASKS else 0.9
        if tier == ModelTier.MID:
            return (768 if task_type in _LONG_FORM_TASKS else 512), 0.7
        return 256, 0.7 if task_type == TaskType.CASUAL else 0.5

    @staticmethod
    def _build_explanation(model: ModelDescriptor, analysis: QueryAnalysis) -> str:
        tech = ", ".join(t.value for t in analysis.ordered_tech_stack) or "none"
        return (
            f"Selected {model.name} based on:\n"
            f"- Complexity: {_to_fixed(analysis.complexity)}\n"
            f"- Context length: {analysis.context_length} chars\n"
            f"- Task type: {analysis.task_type.value}\n"
            f"- Tech stack: {tech}\n"
            f"- Code complexity: {_to_fixed(analysis.code_complexity)}"
        )

    def _adjust_for_history(
        self,
        max_tokens: int,
        temperature: float,
        analysis: QueryAnalysis,
    ) -> tuple[int, float]:
        """Apply long-history, explanation-request and rapid-exchange adjustments."""
        if analysis.history_length > LONG_HISTORY_MESSAGES:
            adjusted = min(temperature * TEMPERATURE_BOOST, MAX_TEMPERATURE)
            self._routing_logger.log_adjustment(
                "long_history", temperature_before=temperature, temperature_after=adjusted
            )
            temperature = adjusted

        if analysis.explanation_requested:
            adjusted_tokens = min(math.floor(max_tokens * EXPLANATION_BOOST), MAX_TOKENS_CAP)
            self._routing_logger.log_adjustment(
                "explanation_request", max_tokens_before=max_tokens, max_tokens_after=adjusted_tokens
            )
            max_tokens = adjusted_tokens

        if analysis.rapid_exchange:
            adjusted_tokens = max(MIN_TOKENS_FLOOR, math.floor(max_tokens * RAPID_EXCHANGE_FACTOR))
            self._routing_logger.log_adjustment(
                "rapid_exchange", max_tokens_before=max_tokens, max_tokens_after=adjusted_tokens
            )
            max_tokens = adjusted_tokens

        return max_tokens, temperature

    # =========================================================================
    # Cost
    # =========================================================================

    def estimate_cost(
        self,
        query: str,
        history: Iterable[ConversationMessage | dict[str, Any]] | None = None,
        model: ModelDescriptor | str | None = None,
    ) -> float:
        """
        Estimate the USD cost of answering a query.

        The conversation (history plus the query as a user message) is
        estimated with the task type and strategy the router picks for the
        query, and priced at the model's cost_per_token.

        Args:
            query: Latest user utterance
            history: Prior turns
            model: Descriptor, model id or tier name to price against
                (defaults to the model the query routes to)

        Raises:
            ValidationError: If model names neither a catalog model nor a tier
        """
        messages = normalize_history(history)
        decision = self.route(query, messages)
        descriptor = self._resolve_pricing_model(model) if model is not None else decision.model

        conversation = [*messages, ConversationMessage(role="user", content=query)]
        estimate = TokenEstimator.estimate_conversation_tokens(
            conversation, decision.task_type, decision.response_strategy
        )
        cost = TokenEstimator.estimate_cost(estimate, descriptor.cost_per_token)

        logger.debug(
            "Cost estimated",
            model=descriptor.id,
            total_tokens=estimate.total_tokens,
            cost=cost,
        )
        return cost

    def _resolve_pricing_model(self, model: ModelDescriptor | str) -> ModelDescriptor:
        if isinstance(model, ModelDescriptor):
            return model
        if model in {tier.value for tier in ModelTier}:
            return self._tiers[ModelTier(model)]
        descriptor = self._catalog.get(model)
        if descriptor is None:
            raise ValidationError(f"Unknown model: {model}", field="model")
        return descriptor

    def __repr__(self) -> str:
        tiers = ", ".join(f"{t.value}={m.id}" for t, m in self._tiers.items())
        return f"AdvancedRouter(threshold={self._threshold}, tiers=[{tiers}])"


# =============================================================================
# Convenience Functions
# =============================================================================


def route_query(
    query: str,
    history: Iterable[ConversationMessage | dict[str, Any]] | None = None,
    threshold: float = DEFAULT_THRESHOLD,
    catalog: ModelCatalog | None = None,
) -> RouterConfig:
    """
    Route a single query with a freshly built router.

    Args:
        query: Latest user utterance
        history: Prior turns, oldest first
        threshold: Complexity threshold
        catalog: Model catalog (built-in if None)

    Returns:
        RouterConfig
    """
    return AdvancedRouter(catalog, threshold=threshold).route(query, history)
