"""
Query Analyzers - feature extraction for routing decisions.

Three stateless analyzers inspect a query and its conversation history:

    TechStackAnalyzer   technology keyword categories + complexity multiplier
    CodeAnalyzer        code-complexity indicators (unweighted ratio + weights)
    ContextAnalyzer     task type, question type, complexity score,
                        context length, rapid-exchange / explanation flags

All classification is regex based with first-match-wins priority. The
priority order of each table is part of the routing contract: reordering
entries changes classification of queries that match several categories.

Patterns are compiled with re.ASCII so that word boundaries behave like
plain ASCII word boundaries (accented letters are not word characters).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from monkeyrouter.core.types import (
    CodeIndicator,
    ConversationMessage,
    QuestionType,
    TaskType,
    TechStack,
    normalize_history,
)
from monkeyrouter.utils.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Pattern Tables
# =============================================================================

_FLAGS = re.IGNORECASE | re.ASCII

TECH_STACK_PATTERNS: dict[TechStack, re.Pattern[str]] = {
    TechStack.TYPESCRIPT: re.compile(r"\b(typescript|ts|type[\s-]safe)\b", _FLAGS),
    TechStack.REACT: re.compile(r"\b(react|hook|component|jsx|tsx)\b", _FLAGS),
    TechStack.NODE: re.compile(r"\b(node|express|nest)\b", _FLAGS),
    TechStack.DATABASE: re.compile(r"\b(sql|postgres|supabase|prisma)\b", _FLAGS),
    TechStack.TESTING: re.compile(r"\b(test|jest|vitest|cypress)\b", _FLAGS),
    TechStack.DEPLOYMENT: re.compile(r"\b(docker|kubernetes|ci|cd|deploy)\b", _FLAGS),
    TechStack.SECURITY: re.compile(r"\b(auth|oauth|jwt|security)\b", _FLAGS),
}

TECH_STACK_WEIGHTS: dict[TechStack, float] = {
    TechStack.TYPESCRIPT: 1.2,
    TechStack.REACT: 1.15,
    TechStack.NODE: 1.1,
    TechStack.DATABASE: 1.25,
    TechStack.TESTING: 1.1,
    TechStack.DEPLOYMENT: 1.2,
    TechStack.SECURITY: 1.3,
}

CODE_INDICATOR_PATTERNS: dict[CodeIndicator, re.Pattern[str]] = {
    CodeIndicator.DATA_STRUCTURES: re.compile(r"\b(tree|graph|heap|stack|queue)\b", _FLAGS),
    CodeIndicator.ALGORITHMS: re.compile(r"\b(sort|search|traverse|balance|optimize)\b", _FLAGS),
    CodeIndicator.PATTERNS: re.compile(r"\b(design pattern|singleton|factory|observer)\b", _FLAGS),
    CodeIndicator.ARCHITECTURE: re.compile(
        r"\b(architecture|system design|scalable|microservice)\b", _FLAGS
    ),
    CodeIndicator.ASYNC: re.compile(r"\b(async|await|promise|callback|observable)\b", _FLAGS),
    CodeIndicator.PERFORMANCE: re.compile(
        r"\b(performance|optimize|memory|cpu|complexity)\b", _FLAGS
    ),
    CodeIndicator.SECURITY: re.compile(
        r"\b(security|auth|encryption|token|vulnerable)\b", _FLAGS
    ),
}

CODE_INDICATOR_WEIGHTS: dict[CodeIndicator, float] = {
    CodeIndicator.DATA_STRUCTURES: 0.8,
    CodeIndicator.ALGORITHMS: 0.9,
    CodeIndicator.PATTERNS: 0.7,
    CodeIndicator.ARCHITECTURE: 1.0,
    CodeIndicator.ASYNC: 0.6,
    CodeIndicator.PERFORMANCE: 0.8,
    CodeIndicator.SECURITY: 0.9,
}

# Priority order matters (first match wins); applied to the lowercased query
TASK_TYPE_PATTERNS: tuple[tuple[TaskType, re.Pattern[str]], ...] = (
    (TaskType.CODING, re.compile(r"\b(code|program|function|debug)\b", re.ASCII)),
    (TaskType.ANALYSIS, re.compile(r"\b(analyze|compare|evaluate)\b", re.ASCII)),
    (TaskType.CREATIVE, re.compile(r"\b(create|generate|write)\b", re.ASCII)),
    (TaskType.CASUAL, re.compile(r"\b(hi|hello|hey|how are you)\b", re.ASCII)),
)

QUESTION_TYPE_PATTERNS: tuple[tuple[QuestionType, re.Pattern[str]], ...] = (
    (QuestionType.PROBLEM_SOLVING, re.compile(r"\b(how|why|explain)\b", re.ASCII)),
    (QuestionType.FACTUAL, re.compile(r"\b(what|who|where|when)\b", re.ASCII)),
    (QuestionType.YES_NO, re.compile(r"^(is|are|can|do|does)\b", re.ASCII)),
    (QuestionType.ANALYSIS, re.compile(r"\b(compare|contrast|analyze)\b", re.ASCII)),
    (QuestionType.CASUAL, re.compile(r"\b(hi|hello|hey|how are you)\b", re.ASCII)),
)

# Terminal punctuation preceded by a word character
_SENTENCE_END = re.compile(r"(?<=\w)[.!?]", re.ASCII)

EXPLANATION_PREFIX = "please explain"
RAPID_EXCHANGE_WINDOW = 4
RAPID_EXCHANGE_MAX_WORDS = 10
EXPLANATION_WINDOW = 3


# =============================================================================
# Tech Stack Analyzer
# =============================================================================


class TechStackAnalyzer:
    """Detects technology keyword categories in a query."""

    @staticmethod
    def analyze(query: str) -> frozenset[TechStack]:
        """Return every tech-stack tag whose pattern matches the query."""
        return frozenset(
            tag for tag, pattern in TECH_STACK_PATTERNS.items() if pattern.search(query)
        )

    @staticmethod
    def get_complexity_multiplier(tags: Iterable[TechStack | str]) -> float:
        """Multiply 1.0 by the weight of each distinct tag."""
        multiplier = 1.0
        for tag in {TechStack(t) for t in tags}:
            multiplier *= TECH_STACK_WEIGHTS[tag]
        return multiplier

    @staticmethod
    def ordered(tags: Iterable[TechStack]) -> list[TechStack]:
        """Tags in pattern-table order, for stable display."""
        present = set(tags)
        return [tag for tag in TECH_STACK_PATTERNS if tag in present]


# =============================================================================
# Code Analyzer
# =============================================================================


class CodeAnalyzer:
    """Detects code-complexity indicators in a query."""

    @staticmethod
    def analyze_complexity(query: str) -> float:
        """Fraction of the indicator patterns that match, in [0, 1]."""
        matches = sum(1 for pattern in CODE_INDICATOR_PATTERNS.values() if pattern.search(query))
        return min(matches / len(CODE_INDICATOR_PATTERNS), 1.0)

    @staticmethod
    def get_indicators(query: str) -> frozenset[CodeIndicator]:
        """Return the matching indicator tags."""
        return frozenset(
            indicator
            for indicator, pattern in CODE_INDICATOR_PATTERNS.items()
            if pattern.search(query)
        )

    @staticmethod
    def has_indicator(query: str, indicator: CodeIndicator | str) -> bool:
        return CODE_INDICATOR_PATTERNS[CodeIndicator(indicator)].search(query) is not None

    @staticmethod
    def get_indicator_weight(indicator: CodeIndicator | str) -> float:
        return CODE_INDICATOR_WEIGHTS[CodeIndicator(indicator)]

    @classmethod
    def weighted_score(cls, query: str) -> float:
        """
        Weighted variant of analyze_complexity.

        Sum of matched indicator weights over the sum of all weights.
        Informational only: the router gates on the unweighted ratio.
        """
        matched = cls.get_indicators(query)
        total = sum(CODE_INDICATOR_WEIGHTS.values())
        return sum(CODE_INDICATOR_WEIGHTS[i] for i in matched) / total


# =============================================================================
# Context Analyzer
# =============================================================================


class ContextAnalyzer:
    """
    Classifies queries and summarizes conversation history.

    Usage:
        task = ContextAnalyzer.identify_task_type("Debug this function")
        # TaskType.CODING
        score = ContextAnalyzer.assess_complexity("What is a monad?")
    """

    @staticmethod
    def identify_task_type(query: str) -> TaskType:
        lowered = query.lower()
        for task_type, pattern in TASK_TYPE_PATTERNS:
            if pattern.search(lowered):
                return task_type
        return TaskType.GENERAL

    @staticmethod
    def classify_question(query: str) -> QuestionType:
        lowered = query.lower()
        for question_type, pattern in QUESTION_TYPE_PATTERNS:
            if pattern.search(lowered):
                return question_type
        return QuestionType.OPEN_ENDED

    @staticmethod
    def assess_complexity(query: str) -> float:
        """
        Score a query's complexity in [0, 1].

        Blend of word count, sentence count and average word length:
            0.4 * (words / 100) + 0.3 * (sentences / 10) + 0.3 * (avg_len / 10)
        capped at 1.0. A query without terminal punctuation counts as one
        sentence; an empty query has zero words and average length 0.
        """
        words = query.split()
        word_count = len(words)
        sentence_count = len(_SENTENCE_END.findall(query)) + 1
        avg_word_length = (
            sum(len(word) for word in words) / word_count if word_count > 0 else 0.0
        )

        complexity = (
            (word_count / 100) * 0.4
            + (sentence_count / 10) * 0.3
            + (avg_word_length / 10) * 0.3
        )
        return min(complexity, 1.0)

    @staticmethod
    def calculate_context_length(history: Iterable[Any] | None) -> int:
        """Total characters of content across the history."""
        return sum(len(message.content) for message in normalize_history(history))

    @staticmethod
    def has_rapid_exchanges(history: Iterable[Any] | None) -> bool:
        """True if the last four messages are each shorter than ten words."""
        messages = normalize_history(history)
        if len(messages) < RAPID_EXCHANGE_WINDOW:
            return False
        return all(
            len(message.content.split()) < RAPID_EXCHANGE_MAX_WORDS
            for message in messages[-RAPID_EXCHANGE_WINDOW:]
        )

    @staticmethod
    def has_explanation_requests(history: Iterable[Any] | None) -> bool:
        """True if any of the last three messages starts with "please explain"."""
        messages = normalize_history(history)
        return any(
            message.content.lower().startswith(EXPLANATION_PREFIX)
            for message in messages[-EXPLANATION_WINDOW:]
        )


# =============================================================================
# Analysis Bundle
# =============================================================================


@dataclass(frozen=True)
class QueryAnalysis:
    """
    Every feature the router extracts from a query and its history.

    Attributes:
        query: The analyzed query
        complexity: ContextAnalyzer.assess_complexity score
        context_length: Characters of history content
        history_length: Number of history messages
        task_type: Task classification
        question_type: Question classification
        tech_stack: Detected tech-stack tags
        tech_stack_multiplier: Product of tech-stack weights
        code_complexity: Unweighted indicator ratio
        code_indicators: Detected code indicators
        weighted_code_score: Weighted indicator score
        rapid_exchange: Rapid-exchange flag for the history
        explanation_requested: Explanation-request flag for the history
    """

    query: str
    complexity: float
    context_length: int
    history_length: int
    task_type: TaskType
    question_type: QuestionType
    tech_stack: frozenset[TechStack]
    tech_stack_multiplier: float
    code_complexity: float
    code_indicators: frozenset[CodeIndicator]
    weighted_code_score: float
    rapid_exchange: bool
    explanation_requested: bool

    @property
    def ordered_tech_stack(self) -> list[TechStack]:
        return TechStackAnalyzer.ordered(self.tech_stack)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "query": self.query,
            "complexity": round(self.complexity, 4),
            "context_length": self.context_length,
            "history_length": self.history_length,
            "task_type": self.task_type.value,
            "question_type": self.question_type.value,
            "tech_stack": [t.value for t in self.ordered_tech_stack],
            "tech_stack_multiplier": round(self.tech_stack_multiplier, 4),
            "code_complexity": round(self.code_complexity, 4),
            "code_indicators": [
                i.value for i in CODE_INDICATOR_PATTERNS if i in self.code_indicators
            ],
            "weighted_code_score": round(self.weighted_code_score, 4),
            "rapid_exchange": self.rapid_exchange,
            "explanation_requested": self.explanation_requested,
        }


def analyze_query(
    query: str,
    history: Sequence[ConversationMessage | dict[str, Any]] | None = None,
) -> QueryAnalysis:
    """
    Run every analyzer over a query and its history.

    Args:
        query: Latest user utterance (not yet part of history)
        history: Prior turns, oldest first

    Returns:
        QueryAnalysis bundle
    """
    query = query if isinstance(query, str) else str(query or "")
    messages = normalize_history(history)
    tech_stack = TechStackAnalyzer.analyze(query)

    analysis = QueryAnalysis(
        query=query,
        complexity=ContextAnalyzer.assess_complexity(query),
        context_length=ContextAnalyzer.calculate_context_length(messages),
        history_length=len(messages),
        task_type=ContextAnalyzer.identify_task_type(query),
        question_type=ContextAnalyzer.classify_question(query),
        tech_stack=tech_stack,
        tech_stack_multiplier=TechStackAnalyzer.get_complexity_multiplier(tech_stack),
        code_complexity=CodeAnalyzer.analyze_complexity(query),
        code_indicators=CodeAnalyzer.get_indicators(query),
        weighted_code_score=CodeAnalyzer.weighted_score(query),
        rapid_exchange=ContextAnalyzer.has_rapid_exchanges(messages),
        explanation_requested=ContextAnalyzer.has_explanation_requests(messages),
    )

    logger.debug(
        "Query analyzed",
        task_type=analysis.task_type.value,
        question_type=analysis.question_type.value,
        complexity=round(analysis.complexity, 3),
        tech_stack=[t.value for t in analysis.ordered_tech_stack],
        code_complexity=round(analysis.code_complexity, 3),
    )
    return analysis
