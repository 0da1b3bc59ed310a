"""agentbroker testing utilities.

Provides a mock marketplace and fixtures for testing applications that use
agentbroker.
"""

from agentbroker.testing.fixtures import make_candidate, make_raw_agent
from agentbroker.testing.mock import JobScript, MockCall, MockMarketplace

__all__ = [
    # Mock marketplace
    "MockMarketplace",
    "MockCall",
    "JobScript",
    # Helper functions
    "make_candidate",
    "make_raw_agent",
]
