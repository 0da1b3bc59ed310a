"""
Pytest plugin for agentbroker testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["agentbroker.testing.conftest"]
"""

from agentbroker.testing.fixtures import (
    broker_config,
    mock_marketplace,
    sample_candidate,
    sample_crew,
)

__all__ = [
    "broker_config",
    "mock_marketplace",
    "sample_candidate",
    "sample_crew",
]
