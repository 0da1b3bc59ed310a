"""
Marketplace client.

Wraps the agent search and job lifecycle APIs behind three calls:
discover, create_job and poll_job.
"""

from typing import Any

from agentbroker.cache import DiscoveryCache
from agentbroker.clients import AgentsClient, JobsClient
from agentbroker.config import BrokerConfig
from agentbroker.exceptions import BrokerError, DiscoveryError
from agentbroker.logging import get_logger
from agentbroker.transport import AsyncHTTPTransport
from agentbroker.types.jobs import JobStatus
from agentbroker.types.offerings import Candidate

logger = get_logger()


class MarketplaceClient:
    """
    Async client for the agent marketplace.

    Owns one transport per remote API and an injected discovery cache.

    Example:
        ```python
        config = BrokerConfig.from_env()
        async with MarketplaceClient(config) as marketplace:
            candidates = await marketplace.discover("token safety")
        ```
    """

    def __init__(
        self,
        config: BrokerConfig,
        cache: DiscoveryCache | None = None,
        search_transport: AsyncHTTPTransport | None = None,
        jobs_transport: AsyncHTTPTransport | None = None,
    ) -> None:
        """
        Initialize the marketplace client.

        Args:
            config: Broker configuration (credentials, URLs, TTL)
            cache: Discovery cache (default: a new cache with config.cache_ttl)
            search_transport: Transport for the search API (default: built from config)
            jobs_transport: Transport for the job API (default: built from config)
        """
        self.config = config
        self.cache = cache if cache is not None else DiscoveryCache(ttl=config.cache_ttl)

        self._search_transport = search_transport or AsyncHTTPTransport(
            base_url=config.search_base_url,
            api_key=config.api_key,
            timeout=config.request_timeout,
            retry_config=config.retry_config,
        )
        self._jobs_transport = jobs_transport or AsyncHTTPTransport(
            base_url=config.acp_base_url,
            api_key=config.api_key,
            timeout=config.request_timeout,
            retry_config=config.retry_config,
        )

        self.agents = AgentsClient(self._search_transport)
        self.jobs = JobsClient(self._jobs_transport)

    async def discover(self, category: str, limit: int | None = None) -> list[Candidate]:
        """
        Discover candidates for a task category.

        Cached results younger than the TTL are returned without a network
        call. Each agent is collapsed to its cheapest offering; agents without
        offerings are dropped.

        Args:
            category: Free-text task category
            limit: Maximum number of agents to request (default: config.discovery_limit)

        Returns:
            Candidates in marketplace ranking order

        Raises:
            DiscoveryError: If the search call fails
        """
        if limit is None:
            limit = self.config.discovery_limit
        key = (category, limit)

        cached = await self.cache.get(key)
        if cached is not None:
            logger.info('Using cached agents for "%s"', category)
            return cached

        try:
            raw_agents = await self.agents.search(category, top_k=limit)
        except BrokerError as e:
            raise DiscoveryError(f"Failed to discover agents: {e.message}") from e

        candidates = [
            candidate
            for candidate in (Candidate.from_api(raw) for raw in raw_agents)
            if candidate is not None
        ]

        await self.cache.put(key, candidates)
        return candidates

    async def create_job(self, candidate: Candidate, requirements: dict[str, Any]) -> str:
        """
        Create a job for a candidate's selected offering.

        Returns:
            Job identifier
        """
        return await self.jobs.create(
            provider_wallet_address=candidate.wallet_address,
            job_offering_name=candidate.offering.name,
            service_requirements=requirements,
        )

    async def poll_job(self, job_id: str) -> JobStatus:
        """Fetch the current phase and deliverable of a job."""
        return await self.jobs.get(job_id)

    async def close(self) -> None:
        """Close both transports."""
        await self._search_transport.close()
        await self._jobs_transport.close()

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
