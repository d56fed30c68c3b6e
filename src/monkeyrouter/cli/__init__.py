"""
monkeyrouter Command-Line Interface.

Commands:
    route     - Route a query to a model tier
    analyze   - Show the features extracted from a query
    estimate  - Estimate tokens and cost of a conversation
    calibrate - Calibrate the routing threshold
    tiers     - List the tier -> model mapping
    config    - Show current configuration

Example:
    $ monkeyrouter route "How do I use React hooks with TypeScript?"
    $ monkeyrouter analyze "Compare quicksort and heapsort" --output json
    $ monkeyrouter estimate chat.json --task-type coding
"""

from __future__ import annotations

from monkeyrouter.cli.main import app, cli, main

__all__ = [
    "app",
    "cli",
    "main",
]
