"""
Core type definitions for monkeyrouter.

This module contains the Enums and Dataclasses shared by the analyzers,
the strategy selector, the token estimator and the router.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from monkeyrouter.core.catalog import ModelDescriptor

# =============================================================================
# Enums
# =============================================================================


class ModelTier(str, Enum):
    """Model selection buckets, cheapest first."""

    LOW = "low"
    MID = "mid"
    HIGH = "high"
    SUPERIOR = "superior"


class TaskType(str, Enum):
    """Coarse intent of a query."""

    CODING = "coding"
    ANALYSIS = "analysis"
    CREATIVE = "creative"
    CASUAL = "casual"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: str | TaskType | None) -> TaskType:
        """Parse a task type, falling back to GENERAL for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return cls.GENERAL


class QuestionType(str, Enum):
    """Rhetorical form of a query."""

    PROBLEM_SOLVING = "problem_solving"
    FACTUAL = "factual"
    YES_NO = "yes_no"
    ANALYSIS = "analysis"
    CASUAL = "casual"
    OPEN_ENDED = "open_ended"

    @classmethod
    def parse(cls, value: str | QuestionType | None) -> QuestionType:
        """Parse a question type, falling back to OPEN_ENDED for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return cls.OPEN_ENDED


class ResponseStrategy(str, Enum):
    """Generation-shape hints attached to a routing decision."""

    CASUAL_CONVERSATION = "casual_conversation"
    DIRECT_ANSWER = "direct_answer"
    CHAIN_OF_THOUGHT = "chain_of_thought"
    BOOLEAN_WITH_EXPLANATION = "boolean_with_explanation"
    COMPARATIVE_ANALYSIS = "comparative_analysis"
    OPEN_DISCUSSION = "open_discussion"
    CODE_GENERATION = "code_generation"
    DEBUG_EXPLANATION = "debug_explanation"

    @classmethod
    def parse(cls, value: str | ResponseStrategy | None) -> ResponseStrategy | None:
        """Parse a strategy name. Returns None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


class TechStack(str, Enum):
    """Technology keyword categories detected in a query."""

    TYPESCRIPT = "typescript"
    REACT = "react"
    NODE = "node"
    DATABASE = "database"
    TESTING = "testing"
    DEPLOYMENT = "deployment"
    SECURITY = "security"


class CodeIndicator(str, Enum):
    """Code-complexity signal categories detected in a query."""

    DATA_STRUCTURES = "dataStructures"
    ALGORITHMS = "algorithms"
    PATTERNS = "patterns"
    ARCHITECTURE = "architecture"
    ASYNC = "async"
    PERFORMANCE = "performance"
    SECURITY = "security"


class ContentType(str, Enum):
    """Text kinds with distinct characters-per-token ratios."""

    EN = "en"
    CODE = "code"
    JSON = "json"


# =============================================================================
# Message Types
# =============================================================================


@dataclass(frozen=True)
class ConversationMessage:
    """Single turn of a conversation history."""

    role: str  # "user" | "assistant" | "system"
    content: str

    @classmethod
    def coerce(cls, item: Any) -> ConversationMessage:
        """
        Build a message from whatever the caller supplied.

        Accepts ConversationMessage instances, mappings and objects with
        role/content attributes. Missing or non-string content becomes
        an empty string; a missing role becomes "user".
        """
        if isinstance(item, ConversationMessage):
            return item
        if isinstance(item, Mapping):
            role = item.get("role")
            content = item.get("content")
        else:
            role = getattr(item, "role", None)
            content = getattr(item, "content", None)

        if content is None:
            content = ""
        elif not isinstance(content, str):
            content = str(content)
        if not isinstance(role, str) or not role:
            role = "user"
        return cls(role=role, content=content)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary format."""
        return {"role": self.role, "content": self.content}


def normalize_history(history: Iterable[Any] | None) -> list[ConversationMessage]:
    """Coerce a caller-supplied history into ConversationMessage objects."""
    if not history:
        return []
    return [ConversationMessage.coerce(item) for item in history]


# =============================================================================
# Routing Types
# =============================================================================


@dataclass(frozen=True)
class RouterConfig:
    """
    Routing decision returned by AdvancedRouter.route().

    Attributes:
        model: Descriptor of the selected tier's model
        tier: Tier the model was selected from
        max_tokens: Token budget for the response
        temperature: Sampling temperature
        response_strategy: Generation-shape hint
        routing_explanation: Human-readable reasoning
        question_type: Question classification (unset for the casual shortcut)
        task_type: Task classification
    """

    model: ModelDescriptor
    tier: ModelTier
    max_tokens: int
    temperature: float
    response_strategy: ResponseStrategy
    routing_explanation: str
    question_type: QuestionType | None = None
    task_type: TaskType | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "model": self.model.to_dict(),
            "tier": self.tier.value,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "response_strategy": self.response_strategy.value,
            "routing_explanation": self.routing_explanation,
            "question_type": self.question_type.value if self.question_type else None,
            "task_type": self.task_type.value if self.task_type else None,
        }


# =============================================================================
# Token Types
# =============================================================================


@dataclass(frozen=True)
class TokenEstimate:
    """Estimated prompt and response size of a conversation."""

    prompt_tokens: int
    expected_response_tokens: int
    total_tokens: int

    @classmethod
    def from_parts(cls, prompt_tokens: int, expected_response_tokens: int) -> TokenEstimate:
        """Build an estimate whose total is the exact sum of its parts."""
        return cls(
            prompt_tokens=prompt_tokens,
            expected_response_tokens=expected_response_tokens,
            total_tokens=prompt_tokens + expected_response_tokens,
        )

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary format."""
        return {
            "prompt_tokens": self.prompt_tokens,
            "expected_response_tokens": self.expected_response_tokens,
            "total_tokens": self.total_tokens,
        }

