"""agentbroker resource clients."""

from agentbroker.clients.agents import AgentsClient
from agentbroker.clients.jobs import JobsClient

__all__ = [
    "AgentsClient",
    "JobsClient",
]
