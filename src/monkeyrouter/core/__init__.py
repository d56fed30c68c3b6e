"""Core routing module.

This module provides the main entry points and core components for monkeyrouter:
- AdvancedRouter: Tier selection for queries
- TechStackAnalyzer / CodeAnalyzer / ContextAnalyzer: Query feature extraction
- ModelCatalog: Model descriptors and tier assignment
- RouterCalibrator: Threshold calibration against labelled samples
- MonkeyRouterConfig: Environment / YAML / programmatic configuration
"""

from monkeyrouter.core.analyzer import (
    CodeAnalyzer,
    ContextAnalyzer,
    QueryAnalysis,
    TechStackAnalyzer,
    analyze_query,
)
from monkeyrouter.core.calibration import (
    CalibrationResult,
    RouterCalibrator,
    SampleQuery,
    ThresholdEvaluation,
)
from monkeyrouter.core.catalog import (
    DEFAULT_MODELS,
    DEFAULT_TIERS,
    ModelCatalog,
    ModelDescriptor,
)
from monkeyrouter.core.config import (
    LoggingConfig,
    MonkeyRouterConfig,
    RoutingConfig,
    TierConfig,
    get_config,
    load_history_file,
    set_config,
)
from monkeyrouter.core.router import AdvancedRouter, route_query
from monkeyrouter.core.types import (
    CodeIndicator,
    ContentType,
    ConversationMessage,
    ModelTier,
    QuestionType,
    ResponseStrategy,
    RouterConfig,
    TaskType,
    TechStack,
    TokenEstimate,
    normalize_history,
)

__all__ = [
    # Types
    "ModelTier",
    "TaskType",
    "QuestionType",
    "ResponseStrategy",
    "TechStack",
    "CodeIndicator",
    "ContentType",
    "ConversationMessage",
    "RouterConfig",
    "TokenEstimate",
    "normalize_history",
    # Catalog
    "ModelDescriptor",
    "ModelCatalog",
    "DEFAULT_MODELS",
    "DEFAULT_TIERS",
    # Analyzers
    "TechStackAnalyzer",
    "CodeAnalyzer",
    "ContextAnalyzer",
    "QueryAnalysis",
    "analyze_query",
    # Router
    "AdvancedRouter",
    "route_query",
    # Calibration
    "RouterCalibrator",
    "SampleQuery",
    "ThresholdEvaluation",
    "CalibrationResult",
    # Config
    "MonkeyRouterConfig",
    "RoutingConfig",
    "TierConfig",
    "LoggingConfig",
    "get_config",
    "set_config",
    "load_history_file",
]
