"""agentbroker type definitions.

This module exports all data model types used by the broker.
"""

from agentbroker.types.jobs import DispatchOutcome, JobPhase, JobStatus
from agentbroker.types.offerings import AgentMetrics, AgentOffering, Candidate, short_name
from agentbroker.types.orchestration import (
    DEFAULT_MAX_PRICE,
    OrchestrationRequest,
    OrchestrationResponse,
)

__all__ = [
    # Marketplace types
    "AgentOffering",
    "AgentMetrics",
    "Candidate",
    "short_name",
    # Job types
    "JobPhase",
    "JobStatus",
    "DispatchOutcome",
    # Orchestration contract
    "DEFAULT_MAX_PRICE",
    "OrchestrationRequest",
    "OrchestrationResponse",
]
