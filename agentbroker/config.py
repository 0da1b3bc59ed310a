"""
Broker configuration.

Replaces ambient environment lookups with one explicit struct that is built
once and handed to the marketplace client, dispatcher and orchestrator.
"""

import os
from dataclasses import dataclass, field

from agentbroker.exceptions import ConfigurationError
from agentbroker.transport import RetryConfig


@dataclass
class Attribution:
    """Referral block stamped onto every outbound job request."""

    source: str = "Catalyst - Multi-Agent Intelligence Hub"
    referral: str = "https://app.virtuals.io/agents/5776"
    referral_agent: str = "Catalyst"

    def to_dict(self) -> dict[str, str]:
        return {
            "_source": self.source,
            "_referral": self.referral,
            "_referral_agent": self.referral_agent,
        }


@dataclass
class BrokerConfig:
    """All tunables of a broker instance."""

    DEFAULT_ACP_BASE_URL = "https://claw-api.virtuals.io"
    DEFAULT_SEARCH_BASE_URL = "http://acpx.virtuals.io"

    api_key: str
    acp_base_url: str = DEFAULT_ACP_BASE_URL
    search_base_url: str = DEFAULT_SEARCH_BASE_URL
    request_timeout: float = 30.0
    retry_config: RetryConfig = field(default_factory=RetryConfig)

    # Discovery
    cache_ttl: float = 300.0
    discovery_limit: int = 10

    # Selection
    default_max_price: float = 0.1
    max_crew: int = 4
    min_success_rate: float = 50.0
    max_inactive_minutes: int = 1440

    # Dispatch
    dispatch_timeout: float = 60.0
    max_retries: int = 1
    poll_interval: float = 3.0
    attribution: Attribution = field(default_factory=Attribution)

    # Pricing
    fee_floor: float = 0.03
    markup: float = 1.5
    payable_token: str = "USDC"

    def __post_init__(self) -> None:
        if self.max_crew < 0:
            raise ConfigurationError("max_crew must not be negative")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must not be negative")
        if self.dispatch_timeout <= 0:
            raise ConfigurationError("dispatch_timeout must be positive")
        if self.poll_interval < 0:
            raise ConfigurationError("poll_interval must not be negative")
        if self.cache_ttl < 0:
            raise ConfigurationError("cache_ttl must not be negative")

    @classmethod
    def from_env(cls, **overrides) -> "BrokerConfig":
        """
        Create a configuration from environment variables.

        Environment variables:
            LITE_AGENT_API_KEY: Marketplace API key (required)
            ACP_API_URL: Job lifecycle API base URL (optional)
            SEARCH_URL: Agent search API base URL (optional)

        Args:
            **overrides: Field values that take precedence over the environment

        Returns:
            Configured BrokerConfig

        Raises:
            ConfigurationError: If the API key is missing
        """
        api_key = overrides.pop("api_key", None) or os.environ.get("LITE_AGENT_API_KEY")
        if not api_key:
            raise ConfigurationError("LITE_AGENT_API_KEY environment variable not set")

        overrides.setdefault(
            "acp_base_url", os.environ.get("ACP_API_URL", cls.DEFAULT_ACP_BASE_URL)
        )
        overrides.setdefault(
            "search_base_url", os.environ.get("SEARCH_URL", cls.DEFAULT_SEARCH_BASE_URL)
        )
        return cls(api_key=api_key, **overrides)
