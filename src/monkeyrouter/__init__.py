"""
monkeyrouter - Rule-based model tier routing for chat queries

Inspects a user query and its recent conversation history and picks a
model tier (low / mid / high / superior), a token budget, a temperature
and a response strategy.

Basic Usage:
    from monkeyrouter import AdvancedRouter

    router = AdvancedRouter()
    decision = router.route("How do I use React hooks with TypeScript?", history=[])
    print(decision.model.id, decision.max_tokens, decision.temperature)
    print(decision.routing_explanation)
"""

from monkeyrouter.core.catalog import ModelCatalog, ModelDescriptor
from monkeyrouter.core.config import MonkeyRouterConfig
from monkeyrouter.core.router import AdvancedRouter, route_query
from monkeyrouter.core.types import (
    ConversationMessage,
    ModelTier,
    QuestionType,
    ResponseStrategy,
    RouterConfig,
    TaskType,
    TokenEstimate,
)

__version__ = "0.1.0"
__all__ = [
    # Main class
    "AdvancedRouter",
    "route_query",
    # Catalog
    "ModelCatalog",
    "ModelDescriptor",
    # Config
    "MonkeyRouterConfig",
    # Types
    "ModelTier",
    "TaskType",
    "QuestionType",
    "ResponseStrategy",
    "ConversationMessage",
    "RouterConfig",
    "TokenEstimate",
    # Version
    "__version__",
]
