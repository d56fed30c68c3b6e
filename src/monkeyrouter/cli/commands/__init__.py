"""
CLI command implementations for monkeyrouter.

Commands:
    route     - Route a query to a model tier
    analyze   - Show the features extracted from a query
    estimate  - Estimate tokens and cost of a conversation
    calibrate - Calibrate the routing threshold
"""

from __future__ import annotations

from monkeyrouter.cli.commands import analyze, calibrate, estimate, route

__all__ = [
    "analyze",
    "calibrate",
    "estimate",
    "route",
]
