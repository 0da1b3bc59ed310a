"""agentbroker - brokers work across crews of marketplace agents."""

from agentbroker.aggregator import Aggregate, aggregate
from agentbroker.cache import DiscoveryCache
from agentbroker.config import Attribution, BrokerConfig
from agentbroker.dispatcher import Dispatcher
from agentbroker.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BrokerError,
    ConfigurationError,
    DiscoveryError,
    DispatchError,
    MarketplaceError,
    NoAgentsError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from agentbroker.logging import configure_logging, get_logger
from agentbroker.marketplace import MarketplaceClient
from agentbroker.orchestrator import Orchestrator, validate_request
from agentbroker.pricing import price
from agentbroker.selector import select_crew
from agentbroker.transport import AsyncHTTPTransport, RetryConfig
from agentbroker.types import (
    AgentMetrics,
    AgentOffering,
    Candidate,
    DispatchOutcome,
    JobPhase,
    JobStatus,
    OrchestrationRequest,
    OrchestrationResponse,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Facade
    "Orchestrator",
    "validate_request",
    # Pipeline stages
    "MarketplaceClient",
    "DiscoveryCache",
    "select_crew",
    "Dispatcher",
    "aggregate",
    "Aggregate",
    "price",
    # Configuration
    "BrokerConfig",
    "Attribution",
    # Types
    "AgentOffering",
    "AgentMetrics",
    "Candidate",
    "JobPhase",
    "JobStatus",
    "DispatchOutcome",
    "OrchestrationRequest",
    "OrchestrationResponse",
    # Exceptions
    "BrokerError",
    "ConfigurationError",
    "ValidationError",
    "MarketplaceError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "DiscoveryError",
    "NoAgentsError",
    "DispatchError",
    # Transport
    "AsyncHTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
