"""
Token counting and cost estimation utilities.

Two estimators are provided:

- TokenEstimator: fast character-ratio heuristics (no dependencies on
  tokenizer data), used by the router for context-limit checks and cost.
- TokenCounter: exact counts through tiktoken, falling back to the
  heuristic when an encoding cannot be loaded.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Iterable
from typing import Any

import tiktoken

from monkeyrouter.core.types import (
    ContentType,
    ResponseStrategy,
    TaskType,
    TokenEstimate,
    normalize_history,
)
from monkeyrouter.strategies.response import ResponseStrategySelector
from monkeyrouter.utils.errors import ValidationError
from monkeyrouter.utils.logging import get_logger

logger = get_logger(__name__)

# =============================================================================
# Ratios and Multipliers
# =============================================================================

# Average tokens per character
TOKENS_PER_CHAR: dict[ContentType, float] = {
    ContentType.EN: 0.25,
    ContentType.CODE: 0.35,
    ContentType.JSON: 0.40,
}

TASK_MULTIPLIERS: dict[TaskType, float] = {
    TaskType.CODING: 2.0,
    TaskType.ANALYSIS: 1.8,
    TaskType.CREATIVE: 1.5,
    TaskType.CASUAL: 0.8,
    TaskType.GENERAL: 1.0,
}

# Fraction of the model limit usable before a conversation is "near the limit"
CONTEXT_LIMIT_RATIO = 0.8

CODE_BLOCK_PATTERN = re.compile(r"```.*?```", re.DOTALL)


def _role_overhead_payload(role: str) -> str:
    return json.dumps({"role": role}, separators=(",", ":"), ensure_ascii=False)


def _check_model_limit(model_limit: int) -> None:
    if model_limit <= 0:
        raise ValidationError(
            f"model_limit must be positive, got {model_limit}",
            field="model_limit",
        )


# =============================================================================
# Heuristic Estimator
# =============================================================================


class TokenEstimator:
    """
    Character-ratio token estimation.

    Example:
        estimate = TokenEstimator.estimate_conversation_tokens(
            history, TaskType.CODING, ResponseStrategy.CODE_GENERATION
        )
        if TokenEstimator.is_approaching_context_limit(estimate, 8192):
            chunk = TokenEstimator.suggest_chunk_size(estimate.total_tokens, 8192)
    """

    @staticmethod
    def estimate_tokens(text: str, content_type: ContentType | str = ContentType.EN) -> int:
        """Round up len(text) times the ratio for its content type."""
        ratio = TOKENS_PER_CHAR[ContentType(content_type)]
        return math.ceil(len(text) * ratio)

    @classmethod
    def estimate_code_tokens(cls, text: str) -> int:
        """
        Estimate text that may contain fenced code blocks.

        Each ``` block is estimated at the code ratio; whatever is left
        after removing the blocks is estimated as English.
        """
        total = 0
        for block in CODE_BLOCK_PATTERN.findall(text):
            total += cls.estimate_tokens(block, ContentType.CODE)
        remaining = CODE_BLOCK_PATTERN.sub("", text)
        return total + cls.estimate_tokens(remaining, ContentType.EN)

    @classmethod
    def estimate_message_overhead(cls, role: str) -> int:
        """Metadata overhead of one message, estimated from its JSON role."""
        return cls.estimate_tokens(_role_overhead_payload(role), ContentType.JSON)

    @staticmethod
    def get_task_multiplier(task_type: TaskType | str | None) -> float:
        return TASK_MULTIPLIERS[TaskType.parse(task_type)]

    @classmethod
    def estimate_response_length(
        cls,
        prompt_tokens: int,
        task_type: TaskType | str | None,
        response_strategy: ResponseStrategy | str | None,
    ) -> int:
        strategy_multiplier = ResponseStrategySelector.get_token_multiplier(response_strategy)
        task_multiplier = cls.get_task_multiplier(task_type)
        return math.ceil(prompt_tokens * strategy_multiplier * task_multiplier)

    @classmethod
    def estimate_conversation_tokens(
        cls,
        messages: Iterable[Any],
        task_type: TaskType | str | None,
        response_strategy: ResponseStrategy | str | None,
    ) -> TokenEstimate:
        """
        Estimate prompt and expected response tokens for a conversation.

        Args:
            messages: Conversation messages (role/content)
            task_type: Task type of the pending query
            response_strategy: Strategy the response will follow

        Returns:
            TokenEstimate whose total is prompt + expected response
        """
        prompt_tokens = 0
        for message in normalize_history(messages):
            prompt_tokens += cls.estimate_code_tokens(message.content)
            prompt_tokens += cls.estimate_message_overhead(message.role)

        expected = cls.estimate_response_length(prompt_tokens, task_type, response_strategy)
        return TokenEstimate.from_parts(prompt_tokens, expected)

    @staticmethod
    def is_approaching_context_limit(estimate: TokenEstimate, model_limit: int) -> bool:
        _check_model_limit(model_limit)
        return estimate.total_tokens > model_limit * CONTEXT_LIMIT_RATIO

    @staticmethod
    def suggest_chunk_size(total_tokens: int, model_limit: int) -> int:
        """
        Largest chunk that keeps a 20% safety margin below the model limit.

        total_tokens does not influence the result.
        """
        _check_model_limit(model_limit)
        return math.floor(model_limit * CONTEXT_LIMIT_RATIO)

    @staticmethod
    def estimate_cost(estimate: TokenEstimate, price_per_token: float) -> float:
        """Cost in USD of the estimate's total tokens."""
        if price_per_token < 0:
            raise ValidationError(
                f"price_per_token cannot be negative, got {price_per_token}",
                field="price_per_token",
            )
        return estimate.total_tokens * price_per_token


# =============================================================================
# Exact Counter
# =============================================================================


class TokenCounter:
    """
    Exact token counting with tiktoken.

    Falls back to TokenEstimator's English ratio if the encoder cannot be
    loaded (e.g. offline without cached encoding files).

    Example:
        counter = TokenCounter()
        count = counter.count_tokens("Hello, world!", model="gpt-4o")
    """

    # Tiktoken encoding for model families tiktoken does not know by name
    ENCODING_MAP: dict[str, str] = {
        "gpt-4o": "o200k_base",
        "o1": "o200k_base",
        "gpt-4": "cl100k_base",
        "gpt-3.5": "cl100k_base",
        "claude": "cl100k_base",  # Approximation
        "llama": "cl100k_base",  # Approximation
        "grok": "cl100k_base",  # Approximation
    }

    # Per-message formatting overhead (role and content markers)
    MESSAGE_OVERHEAD = 4
    CONVERSATION_OVERHEAD = 2

    def __init__(self, default_encoding: str = "cl100k_base"):
        """
        Initialize token counter.

        Args:
            default_encoding: Default tiktoken encoding to use
        """
        self._encoders: dict[str, tiktoken.Encoding] = {}
        self._default_encoding = default_encoding

    def _get_encoder(self, model: str | None = None) -> tiktoken.Encoding:
        """Get appropriate encoder for model."""
        encoding_name = self._default_encoding

        if model:
            try:
                return tiktoken.encoding_for_model(model)
            except KeyError:
                for family, encoding in self.ENCODING_MAP.items():
                    if family in model.lower():
                        encoding_name = encoding
                        break

        if encoding_name not in self._encoders:
            self._encoders[encoding_name] = tiktoken.get_encoding(encoding_name)

        return self._encoders[encoding_name]

    def count_tokens(self, text: str, model: str | None = None) -> int:
        """
        Count tokens in text.

        Args:
            text: Text to count tokens for
            model: Optional model name for model-specific tokenization

        Returns:
            Number of tokens
        """
        if not text:
            return 0

        try:
            encoder = self._get_encoder(model)
            return len(encoder.encode(text))
        except Exception as e:
            logger.warning(
                "Tokenizer unavailable, using heuristic estimate",
                model=model,
                error=str(e),
            )
            return TokenEstimator.estimate_tokens(text, ContentType.EN)

    def count_messages_tokens(self, messages: Iterable[Any], model: str | None = None) -> int:
        """Count tokens in a conversation, including message formatting overhead."""
        total = 0
        for message in normalize_history(messages):
            total += self.MESSAGE_OVERHEAD
            total += self.count_tokens(message.role, model)
            total += self.count_tokens(message.content, model)
        return total + self.CONVERSATION_OVERHEAD

    def estimate_conversation_tokens(
        self,
        messages: Iterable[Any],
        task_type: TaskType | str | None,
        response_strategy: ResponseStrategy | str | None,
        model: str | None = None,
    ) -> TokenEstimate:
        """Like TokenEstimator.estimate_conversation_tokens with an exact prompt count."""
        prompt_tokens = self.count_messages_tokens(messages, model)
        expected = TokenEstimator.estimate_response_length(
            prompt_tokens, task_type, response_strategy
        )
        return TokenEstimate.from_parts(prompt_tokens, expected)


# =============================================================================
# Convenience Functions
# =============================================================================


def estimate_tokens(text: str, content_type: ContentType | str = ContentType.EN) -> int:
    """
    Quick token estimation.

    Args:
        text: Text to estimate
        content_type: "en", "code" or "json"

    Returns:
        Estimated token count
    """
    return TokenEstimator.estimate_tokens(text, content_type)


def estimate_cost(estimate: TokenEstimate, price_per_token: float) -> float:
    """
    Quick cost estimation.

    Args:
        estimate: Token estimate
        price_per_token: USD per token

    Returns:
        Estimated cost in USD
    """
    return TokenEstimator.estimate_cost(estimate, price_per_token)
