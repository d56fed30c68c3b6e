"""
Integration tests for monkeyrouter.

This package contains end-to-end tests that route realistic queries through
the full analyzer -> router -> adjustment pipeline and drive the CLI.

Test Modules:
    - test_routing_scenarios: Routing decisions for representative conversations
    - test_cli: monkeyrouter command-line interface
"""

__all__ = [
    "test_routing_scenarios",
    "test_cli",
]
