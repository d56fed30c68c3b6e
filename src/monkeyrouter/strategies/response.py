"""
Response strategy selection.

Maps a (question type, task type) pair to a ResponseStrategy and exposes
the token multiplier each strategy implies for response-length estimates.

Strategy Matrix (after overrides):
    casual task or casual question   -> casual_conversation
    coding + problem_solving         -> code_generation
    coding + anything else           -> debug_explanation
    otherwise                        -> STRATEGY_MAP[question_type]
"""

from __future__ import annotations

from monkeyrouter.core.types import QuestionType, ResponseStrategy, TaskType
from monkeyrouter.utils.logging import get_logger

logger = get_logger(__name__)


STRATEGY_MAP: dict[QuestionType, ResponseStrategy] = {
    QuestionType.PROBLEM_SOLVING: ResponseStrategy.CHAIN_OF_THOUGHT,
    QuestionType.FACTUAL: ResponseStrategy.DIRECT_ANSWER,
    QuestionType.YES_NO: ResponseStrategy.BOOLEAN_WITH_EXPLANATION,
    QuestionType.ANALYSIS: ResponseStrategy.COMPARATIVE_ANALYSIS,
    QuestionType.CASUAL: ResponseStrategy.CASUAL_CONVERSATION,
    QuestionType.OPEN_ENDED: ResponseStrategy.OPEN_DISCUSSION,
}

TOKEN_MULTIPLIERS: dict[ResponseStrategy, float] = {
    ResponseStrategy.CASUAL_CONVERSATION: 1.0,
    ResponseStrategy.DIRECT_ANSWER: 1.2,
    ResponseStrategy.CHAIN_OF_THOUGHT: 2.0,
    ResponseStrategy.BOOLEAN_WITH_EXPLANATION: 1.5,
    ResponseStrategy.COMPARATIVE_ANALYSIS: 2.5,
    ResponseStrategy.OPEN_DISCUSSION: 1.8,
    ResponseStrategy.CODE_GENERATION: 3.0,
    ResponseStrategy.DEBUG_EXPLANATION: 2.5,
}

DEFAULT_TOKEN_MULTIPLIER = 1.0

# Context length (chars) above which chain_of_thought is downgraded
LONG_CONTEXT_CHARS = 4000


class ResponseStrategySelector:
    """
    Selects and post-processes response strategies.

    Usage:
        strategy = ResponseStrategySelector.select_strategy(
            QuestionType.PROBLEM_SOLVING, TaskType.CODING
        )
        # ResponseStrategy.CODE_GENERATION
        multiplier = ResponseStrategySelector.get_token_multiplier(strategy)
        # 3.0
    """

    @staticmethod
    def select_strategy(
        question_type: QuestionType | str,
        task_type: TaskType | str,
    ) -> ResponseStrategy:
        """
        Pick the strategy for a classified query.

        Unknown question types are treated as open_ended, unknown task
        types as general.
        """
        question_type = QuestionType.parse(question_type)
        task_type = TaskType.parse(task_type)

        if task_type == TaskType.CASUAL or question_type == QuestionType.CASUAL:
            return ResponseStrategy.CASUAL_CONVERSATION

        if task_type == TaskType.CODING:
            if question_type == QuestionType.PROBLEM_SOLVING:
                return ResponseStrategy.CODE_GENERATION
            return ResponseStrategy.DEBUG_EXPLANATION

        return STRATEGY_MAP[question_type]

    @staticmethod
    def get_token_multiplier(strategy: ResponseStrategy | str | None) -> float:
        """Response-length multiplier for a strategy; 1.0 when unknown."""
        parsed = ResponseStrategy.parse(strategy)
        if parsed is None:
            logger.debug("Unknown response strategy, using default multiplier", strategy=strategy)
            return DEFAULT_TOKEN_MULTIPLIER
        return TOKEN_MULTIPLIERS[parsed]

    @staticmethod
    def adjust_strategy(
        strategy: ResponseStrategy | str,
        context_length: int,
        is_rapid_exchange: bool,
    ) -> ResponseStrategy | str:
        """
        Downgrade a strategy for the conversation's shape.

        Rapid exchanges get direct answers unless already casual; a
        chain_of_thought over more than 4000 characters of context
        becomes a direct answer. Unknown strategy strings pass through
        unchanged unless the rapid-exchange rule applies.
        """
        parsed = ResponseStrategy.parse(strategy)

        if is_rapid_exchange and parsed != ResponseStrategy.CASUAL_CONVERSATION:
            return ResponseStrategy.DIRECT_ANSWER

        if context_length > LONG_CONTEXT_CHARS and parsed == ResponseStrategy.CHAIN_OF_THOUGHT:
            return ResponseStrategy.DIRECT_ANSWER

        return parsed if parsed is not None else strategy
