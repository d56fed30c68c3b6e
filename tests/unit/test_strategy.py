"""
Unit tests for ResponseStrategySelector.
"""

import pytest

from monkeyrouter.core.types import QuestionType, ResponseStrategy, TaskType
from monkeyrouter.strategies import STRATEGY_MAP, TOKEN_MULTIPLIERS, ResponseStrategySelector

# =============================================================================
# Selection Tests
# =============================================================================


class TestSelectStrategy:
    """Tests for strategy selection."""

    @pytest.mark.parametrize(
        "question_type,task_type,expected",
        [
            (QuestionType.PROBLEM_SOLVING, TaskType.CODING, ResponseStrategy.CODE_GENERATION),
            (QuestionType.FACTUAL, TaskType.CODING, ResponseStrategy.DEBUG_EXPLANATION),
            (QuestionType.OPEN_ENDED, TaskType.CODING, ResponseStrategy.DEBUG_EXPLANATION),
            (QuestionType.PROBLEM_SOLVING, TaskType.CASUAL, ResponseStrategy.CASUAL_CONVERSATION),
            (QuestionType.CASUAL, TaskType.CODING, ResponseStrategy.CASUAL_CONVERSATION),
            (QuestionType.PROBLEM_SOLVING, TaskType.GENERAL, ResponseStrategy.CHAIN_OF_THOUGHT),
            (QuestionType.YES_NO, TaskType.GENERAL, ResponseStrategy.BOOLEAN_WITH_EXPLANATION),
            (QuestionType.ANALYSIS, TaskType.ANALYSIS, ResponseStrategy.COMPARATIVE_ANALYSIS),
            (QuestionType.FACTUAL, TaskType.CREATIVE, ResponseStrategy.DIRECT_ANSWER),
            (QuestionType.OPEN_ENDED, TaskType.GENERAL, ResponseStrategy.OPEN_DISCUSSION),
        ],
    )
    def test_select_strategy(
        self,
        question_type: QuestionType,
        task_type: TaskType,
        expected: ResponseStrategy,
    ) -> None:
        """Test the strategy matrix with overrides."""
        assert ResponseStrategySelector.select_strategy(question_type, task_type) == expected

    def test_accepts_strings(self) -> None:
        """Test string arguments are parsed."""
        strategy = ResponseStrategySelector.select_strategy("problem_solving", "coding")
        assert strategy == ResponseStrategy.CODE_GENERATION

    def test_unknown_values_fall_back(self) -> None:
        """Test unknown question and task types."""
        strategy = ResponseStrategySelector.select_strategy("nonsense", "nonsense")
        assert strategy == ResponseStrategy.OPEN_DISCUSSION

    def test_strategy_map_covers_every_question_type(self) -> None:
        """Test the base map is total."""
        assert set(STRATEGY_MAP) == set(QuestionType)


# =============================================================================
# Multiplier Tests
# =============================================================================


class TestTokenMultiplier:
    """Tests for token multipliers."""

    @pytest.mark.parametrize(
        "strategy,expected",
        [
            (ResponseStrategy.CASUAL_CONVERSATION, 1.0),
            (ResponseStrategy.DIRECT_ANSWER, 1.2),
            (ResponseStrategy.CHAIN_OF_THOUGHT, 2.0),
            (ResponseStrategy.BOOLEAN_WITH_EXPLANATION, 1.5),
            (ResponseStrategy.COMPARATIVE_ANALYSIS, 2.5),
            (ResponseStrategy.OPEN_DISCUSSION, 1.8),
            (ResponseStrategy.CODE_GENERATION, 3.0),
            (ResponseStrategy.DEBUG_EXPLANATION, 2.5),
        ],
    )
    def test_known_multipliers(self, strategy: ResponseStrategy, expected: float) -> None:
        """Test multiplier table values."""
        assert ResponseStrategySelector.get_token_multiplier(strategy) == expected
        assert ResponseStrategySelector.get_token_multiplier(strategy.value) == expected

    def test_unknown_strategy(self) -> None:
        """Test unknown strategies use 1.0."""
        assert ResponseStrategySelector.get_token_multiplier("default") == 1.0
        assert ResponseStrategySelector.get_token_multiplier(None) == 1.0

    def test_table_is_total(self) -> None:
        """Test every strategy has a multiplier."""
        assert set(TOKEN_MULTIPLIERS) == set(ResponseStrategy)


# =============================================================================
# Adjustment Tests
# =============================================================================


class TestAdjustStrategy:
    """Tests for conversation-shape adjustments."""

    def test_rapid_exchange_forces_direct_answer(self) -> None:
        """Test rapid exchanges downgrade non-casual strategies."""
        adjusted = ResponseStrategySelector.adjust_strategy(
            ResponseStrategy.CODE_GENERATION, 0, True
        )
        assert adjusted == ResponseStrategy.DIRECT_ANSWER

    def test_rapid_exchange_keeps_casual(self) -> None:
        """Test casual conversation is not downgraded."""
        adjusted = ResponseStrategySelector.adjust_strategy(
            ResponseStrategy.CASUAL_CONVERSATION, 0, True
        )
        assert adjusted == ResponseStrategy.CASUAL_CONVERSATION

    def test_long_context_downgrades_chain_of_thought(self) -> None:
        """Test chain_of_thought over long context."""
        adjusted = ResponseStrategySelector.adjust_strategy(
            ResponseStrategy.CHAIN_OF_THOUGHT, 4001, False
        )
        assert adjusted == ResponseStrategy.DIRECT_ANSWER

    def test_boundary_context_keeps_chain_of_thought(self) -> None:
        """Test exactly 4000 characters is not long."""
        adjusted = ResponseStrategySelector.adjust_strategy(
            ResponseStrategy.CHAIN_OF_THOUGHT, 4000, False
        )
        assert adjusted == ResponseStrategy.CHAIN_OF_THOUGHT

    def test_long_context_keeps_other_strategies(self) -> None:
        """Test only chain_of_thought is affected by context length."""
        adjusted = ResponseStrategySelector.adjust_strategy(
            ResponseStrategy.CODE_GENERATION, 10_000, False
        )
        assert adjusted == ResponseStrategy.CODE_GENERATION

    def test_unknown_strategy_passes_through(self) -> None:
        """Test unknown strings are returned unchanged."""
        assert ResponseStrategySelector.adjust_strategy("custom", 10_000, False) == "custom"
        assert (
            ResponseStrategySelector.adjust_strategy("custom", 0, True)
            == ResponseStrategy.DIRECT_ANSWER
        )
