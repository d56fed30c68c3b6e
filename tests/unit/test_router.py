"""
Unit tests for AdvancedRouter.

Tests tier selection, tier baselines, history adjustments, construction
checks and cost estimation.
"""

import math

import pytest

from monkeyrouter.core.catalog import DEFAULT_MODELS, ModelCatalog, ModelDescriptor
from monkeyrouter.core.router import AdvancedRouter, route_query
from monkeyrouter.core.types import (
    ConversationMessage,
    ModelTier,
    QuestionType,
    ResponseStrategy,
    TaskType,
)
from monkeyrouter.utils.errors import (
    ConfigurationError,
    DuplicateTierModelError,
    MissingTierError,
    ValidationError,
)
from monkeyrouter.utils.tokens import TokenEstimator

ALL_INDICATORS_QUERY = (
    "Optimize the async queue architecture with a singleton for memory security"
)
THREE_TECH_QUERY = "typescript react postgres " + "lorem " * 150


# =============================================================================
# Construction Tests
# =============================================================================


class TestRouterInit:
    """Tests for router construction."""

    def test_defaults(self, router: AdvancedRouter) -> None:
        """Test default threshold and tier mapping."""
        assert router.threshold == 0.5
        assert {tier: model.id for tier, model in router.tiers.items()} == {
            ModelTier.LOW: "llama3-groq-8b",
            ModelTier.MID: "llama-3.2-3b",
            ModelTier.HIGH: "llama-3.3-70b",
            ModelTier.SUPERIOR: "grok-2",
        }

    def test_tier_mapping(self, tier_models: dict[ModelTier, ModelDescriptor]) -> None:
        """Test construction from a tier -> descriptor mapping."""
        router = AdvancedRouter(tier_models)
        assert router.tiers == tier_models
        assert len(router.catalog) == 4

    def test_tiers_is_a_copy(self, router: AdvancedRouter) -> None:
        """Test mutating the returned mapping leaves the router intact."""
        tiers = router.tiers
        tiers.pop(ModelTier.LOW)
        assert ModelTier.LOW in router.tiers

    def test_zero_threshold_is_valid(self) -> None:
        """Test zero is an accepted threshold."""
        assert AdvancedRouter(threshold=0).threshold == 0.0

    @pytest.mark.parametrize("threshold", [-0.1, float("nan"), float("inf"), "0.5", True])
    def test_invalid_threshold(self, threshold: object) -> None:
        """Test invalid thresholds are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            AdvancedRouter(threshold=threshold)  # type: ignore[arg-type]
        assert exc_info.value.config_key == "routing.threshold"

    def test_missing_tier(self) -> None:
        """Test an unassigned tier fails construction."""
        catalog = ModelCatalog(
            DEFAULT_MODELS,
            {"low": "llama3-groq-8b", "mid": "llama-3.2-3b", "high": "llama-3.3-70b"},
        )
        with pytest.raises(MissingTierError) as exc_info:
            AdvancedRouter(catalog)
        assert exc_info.value.tier == "superior"
        assert exc_info.value.config_key == "tiers.superior"

    def test_tier_model_absent_from_catalog(self) -> None:
        """Test a tier naming an unknown model fails construction."""
        catalog = ModelCatalog.default().with_tiers({"high": "no-such-model"})
        with pytest.raises(MissingTierError) as exc_info:
            AdvancedRouter(catalog)
        assert exc_info.value.model_id == "no-such-model"

    def test_duplicate_tier_model(self) -> None:
        """Test two tiers sharing a model fails construction."""
        catalog = ModelCatalog.default().with_tiers({"high": "grok-2"})
        with pytest.raises(DuplicateTierModelError) as exc_info:
            AdvancedRouter(catalog)
        assert exc_info.value.model_id == "grok-2"
        assert sorted(exc_info.value.tiers) == ["high", "superior"]

    def test_repr(self, router: AdvancedRouter) -> None:
        """Test repr shows threshold and tiers."""
        text = repr(router)
        assert "threshold=0.5" in text
        assert "high=llama-3.3-70b" in text


# =============================================================================
# Tier Selection Tests
# =============================================================================


class TestTierSelection:
    """Tests for the tier decision order."""

    def test_casual_shortcut(self, router: AdvancedRouter) -> None:
        """Test greetings get the fixed casual config."""
        decision = router.route("Hello, how are you?", [])

        assert decision.tier == ModelTier.LOW
        assert decision.model.id == "llama3-groq-8b"
        assert decision.max_tokens == 50
        assert decision.temperature == 0.7
        assert decision.response_strategy == ResponseStrategy.CASUAL_CONVERSATION
        assert decision.question_type is None
        assert decision.task_type == TaskType.CASUAL
        assert decision.routing_explanation == (
            "Simple greeting detected, using efficient model for quick response."
        )

    def test_casual_shortcut_ignores_history(
        self, router: AdvancedRouter, rapid_history: list[dict[str, str]]
    ) -> None:
        """Test history adjustments do not apply to the casual config."""
        decision = router.route("hey", rapid_history)
        assert decision.max_tokens == 50
        assert decision.temperature == 0.7

    def test_superior_by_code_complexity(self, router: AdvancedRouter) -> None:
        """Test nearly every code indicator selects superior."""
        decision = router.route(ALL_INDICATORS_QUERY)

        assert decision.tier == ModelTier.SUPERIOR
        assert decision.model.id == "grok-2"
        assert decision.max_tokens == 4096
        assert decision.temperature == 0.7
        assert decision.response_strategy == ResponseStrategy.OPEN_DISCUSSION
        assert decision.routing_explanation.endswith("- Code complexity: 1.00")

    def test_superior_coding_temperature(self, router: AdvancedRouter) -> None:
        """Test coding tasks lower the superior temperature."""
        decision = router.route("Debug the code: " + ALL_INDICATORS_QUERY)

        assert decision.tier == ModelTier.SUPERIOR
        assert decision.task_type == TaskType.CODING
        assert decision.temperature == 0.5
        assert decision.response_strategy == ResponseStrategy.DEBUG_EXPLANATION

    def test_superior_by_tech_stack(self, router: AdvancedRouter) -> None:
        """Test three tech tags with high complexity select superior."""
        decision = router.route(THREE_TECH_QUERY)

        assert decision.tier == ModelTier.SUPERIOR
        assert "- Tech stack: typescript, react, database" in decision.routing_explanation

    def test_high_for_typescript_react(self, router: AdvancedRouter) -> None:
        """Test the React + TypeScript query."""
        decision = router.route("How do I use React hooks with TypeScript?", [])

        assert decision.tier == ModelTier.HIGH
        assert decision.model.id == "llama-3.3-70b"
        assert decision.max_tokens == 1024
        assert decision.temperature == 0.9
        assert decision.task_type == TaskType.GENERAL
        assert decision.question_type == QuestionType.PROBLEM_SOLVING
        assert decision.response_strategy == ResponseStrategy.CHAIN_OF_THOUGHT
        assert decision.routing_explanation == (
            "Selected Llama 3.3 70B based on:\n"
            "- Complexity: 0.22\n"
            "- Context length: 0 chars\n"
            "- Task type: general\n"
            "- Tech stack: typescript, react\n"
            "- Code complexity: 0.00"
        )

    def test_high_for_short_context(self, router: AdvancedRouter) -> None:
        """Test any query with little context routes high."""
        decision = router.route(
            "Design a distributed system for handling millions of concurrent "
            "websocket connections"
        )
        assert decision.tier == ModelTier.HIGH
        assert "- Complexity: 0.28" in decision.routing_explanation
        assert "- Tech stack: none" in decision.routing_explanation

    def test_high_for_low_complexity_with_long_context(
        self, router: AdvancedRouter, long_history: list[dict[str, str]]
    ) -> None:
        """Test complexity below 1.5x the threshold routes high."""
        assert router.route("Tell me about rivers", long_history).tier == ModelTier.HIGH

    def test_low_fallback(self, long_history: list[dict[str, str]]) -> None:
        """Test long context with complexity above the gate routes low."""
        decision = AdvancedRouter(threshold=0.1).route("Tell me about rivers", long_history)

        assert decision.tier == ModelTier.LOW
        assert decision.model.id == "llama3-groq-8b"
        assert decision.max_tokens == 256
        assert decision.temperature == 0.5
        assert decision.response_strategy == ResponseStrategy.OPEN_DISCUSSION
        assert "- Context length: 8000 chars" in decision.routing_explanation

    def test_typescript_forces_high(self, long_history: list[dict[str, str]]) -> None:
        """Test TypeScript or React keeps long-context queries on high."""
        decision = AdvancedRouter(threshold=0.1).route(
            "How do I use React hooks with TypeScript?", long_history
        )

        assert decision.tier == ModelTier.HIGH
        # chain_of_thought is downgraded over more than 4000 chars of context
        assert decision.response_strategy == ResponseStrategy.DIRECT_ANSWER

    @pytest.mark.parametrize("threshold", [0.0, 0.1, 0.5, 1.0, 5.0])
    @pytest.mark.parametrize(
        "query",
        ["Tell me about rivers", "What is Rust?", "x", "lorem " * 200],
    )
    def test_mid_tier_is_unreachable(
        self, threshold: float, query: str, long_history: list[dict[str, str]]
    ) -> None:
        """Test the mid tier is never selected."""
        router = AdvancedRouter(threshold=threshold)
        for history in ([], long_history, [{"content": "short"}]):
            assert router.route(query, history).tier != ModelTier.MID


# =============================================================================
# History Adjustment Tests
# =============================================================================


class TestHistoryAdjustments:
    """Tests for long-history, explanation and rapid-exchange adjustments."""

    def test_rapid_exchange_and_long_history(
        self, router: AdvancedRouter, rapid_history: list[dict[str, str]]
    ) -> None:
        """Test ten short messages."""
        decision = router.route("Next message", rapid_history)

        assert decision.tier == ModelTier.HIGH
        assert decision.temperature == pytest.approx(0.99)
        assert decision.max_tokens == 819
        assert decision.response_strategy == ResponseStrategy.DIRECT_ANSWER

    def test_five_messages_is_not_long(self, router: AdvancedRouter) -> None:
        """Test the temperature boost needs more than five messages."""
        history = [{"role": "user", "content": "short"}] * 5
        assert router.route("Next message", history).temperature == 0.9

    def test_explanation_request(
        self, router: AdvancedRouter, explanation_history: list[dict[str, str]]
    ) -> None:
        """Test explanation requests raise the token budget."""
        decision = router.route("Go on", explanation_history)

        assert decision.tier == ModelTier.HIGH
        assert decision.max_tokens == math.floor(1024 * 1.2)
        assert decision.temperature == 0.9

    def test_explanation_request_cap(
        self, router: AdvancedRouter, explanation_history: list[dict[str, str]]
    ) -> None:
        """Test the boosted budget is capped at 4096."""
        decision = router.route(ALL_INDICATORS_QUERY, explanation_history)

        assert decision.tier == ModelTier.SUPERIOR
        assert decision.max_tokens == 4096

    def test_rapid_exchange_on_low_tier(self) -> None:
        """Test the rapid-exchange reduction on the smallest budget."""
        history = [{"role": "user", "content": "a" * 8000}] * 4
        decision = AdvancedRouter(threshold=0.1).route("Tell me about rivers", history)

        assert decision.tier == ModelTier.LOW
        assert decision.max_tokens == math.floor(256 * 0.8)
        assert decision.response_strategy == ResponseStrategy.DIRECT_ANSWER


# =============================================================================
# Input Handling Tests
# =============================================================================


class TestRouteInputs:
    """Tests for history normalization and determinism."""

    def test_accepts_message_objects(self, router: AdvancedRouter) -> None:
        """Test ConversationMessage history."""
        history = [ConversationMessage(role="user", content="Please explain decorators")]
        assert router.route("Go on", history).max_tokens == 1228

    def test_tolerates_malformed_history(self, router: AdvancedRouter) -> None:
        """Test entries without content are treated as empty."""
        decision = router.route("What is Rust?", [{"role": "user"}, {"content": None}, {}])
        assert decision.tier == ModelTier.HIGH
        assert "- Context length: 0 chars" in decision.routing_explanation

    def test_none_history(self, router: AdvancedRouter) -> None:
        """Test a missing history."""
        assert router.route("What is Rust?", None).tier == ModelTier.HIGH

    def test_deterministic(
        self, router: AdvancedRouter, rapid_history: list[dict[str, str]]
    ) -> None:
        """Test identical inputs give identical decisions."""
        first = router.route("How do I sort a tree?", rapid_history)
        second = router.route("How do I sort a tree?", rapid_history)
        assert first == second

    def test_route_query(self, test_catalog: ModelCatalog) -> None:
        """Test the convenience function."""
        decision = route_query("What is Rust?", catalog=test_catalog)
        assert decision.model.id == "test-high"

    def test_to_dict(self, router: AdvancedRouter) -> None:
        """Test decision serialization."""
        data = router.route("Hello there").to_dict()

        assert data["tier"] == "low"
        assert data["model"]["id"] == "llama3-groq-8b"
        assert data["question_type"] is None
        assert data["task_type"] == "casual"


# =============================================================================
# Cost Estimation Tests
# =============================================================================


class TestEstimateCost:
    """Tests for AdvancedRouter.estimate_cost."""

    QUERY = "How do I use React hooks with TypeScript?"

    def _expected_tokens(self) -> int:
        estimate = TokenEstimator.estimate_conversation_tokens(
            [{"role": "user", "content": self.QUERY}],
            TaskType.GENERAL,
            ResponseStrategy.CHAIN_OF_THOUGHT,
        )
        return estimate.total_tokens

    def test_routed_model(self, router: AdvancedRouter) -> None:
        """Test pricing with the model the query routes to."""
        cost = router.estimate_cost(self.QUERY)
        assert cost == pytest.approx(self._expected_tokens() * 0.00002)

    def test_model_id(self, router: AdvancedRouter) -> None:
        """Test pricing against a catalog model id."""
        cost = router.estimate_cost(self.QUERY, model="grok-2")
        assert cost == pytest.approx(self._expected_tokens() * 0.00004)

    def test_tier_name(self, router: AdvancedRouter) -> None:
        """Test pricing against a tier name."""
        cost = router.estimate_cost(self.QUERY, model="low")
        assert cost == pytest.approx(self._expected_tokens() * 0.000001)

    def test_descriptor(
        self, router: AdvancedRouter, tier_models: dict[ModelTier, ModelDescriptor]
    ) -> None:
        """Test pricing against an explicit descriptor."""
        cost = router.estimate_cost(self.QUERY, model=tier_models[ModelTier.SUPERIOR])
        assert cost == pytest.approx(self._expected_tokens() * 0.00005)

    def test_free_model(self, router: AdvancedRouter) -> None:
        """Test a zero-cost model."""
        assert router.estimate_cost(self.QUERY, model="llama-3.2-3b") == 0.0

    def test_unknown_model(self, router: AdvancedRouter) -> None:
        """Test unknown model names are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            router.estimate_cost(self.QUERY, model="no-such-model")
        assert exc_info.value.field == "model"
