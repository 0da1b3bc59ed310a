"""
Helpers and pytest fixtures for testing code built on agentbroker.
"""

from collections.abc import Generator
from typing import Any

import pytest

from agentbroker.config import BrokerConfig
from agentbroker.testing.mock import MockMarketplace
from agentbroker.types.offerings import AgentMetrics, AgentOffering, Candidate


# ============================================================================
# Helper Functions
# ============================================================================


def make_candidate(
    agent_id: str = "1001",
    price: float = 0.01,
    success_rate: float = 90.0,
    mins_from_last_online: int = 5,
    name: str | None = None,
    requirement: dict[str, Any] | None = None,
    offering_name: str = "analyze",
) -> Candidate:
    """Create a Candidate with sensible defaults."""
    return Candidate(
        agent_id=agent_id,
        name=name or f"agent-{agent_id}",
        wallet_address=f"0xwallet{agent_id}",
        offering=AgentOffering(
            id=f"offering-{agent_id}",
            name=offering_name,
            description="",
            price=price,
            requirement=requirement or {},
        ),
        metrics=AgentMetrics(
            success_rate=success_rate,
            is_online=True,
            mins_from_last_online=mins_from_last_online,
            successful_job_count=10,
        ),
    )


def make_raw_agent(
    agent_id: Any = 1001,
    prices: list[float | None] | None = None,
    success_rate: float = 90.0,
    mins_from_last_online: int = 5,
    name: str | None = None,
) -> dict[str, Any]:
    """Create a raw search-API agent record with one job per price."""
    if prices is None:
        prices = [0.01]
    return {
        "id": agent_id,
        "name": name or f"agent-{agent_id}",
        "walletAddress": f"0xwallet{agent_id}",
        "jobs": [
            {
                "id": index,
                "name": f"offering-{index}",
                "description": f"Offering {index}",
                "price": price,
                "priceV2": {"type": "fixed"},
                "requirement": {"properties": {"query": {"type": "string"}}},
            }
            for index, price in enumerate(prices)
        ],
        "metrics": {
            "successRate": success_rate,
            "isOnline": True,
            "minsFromLastOnlineTime": mins_from_last_online,
            "successfulJobCount": 42,
        },
    }


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def broker_config() -> BrokerConfig:
    """Provide a config that polls without delay and times out quickly."""
    return BrokerConfig(
        api_key="test-api-key",
        poll_interval=0.0,
        dispatch_timeout=1.0,
    )


@pytest.fixture
def mock_marketplace() -> Generator[MockMarketplace, None, None]:
    """
    Provide a MockMarketplace for testing.

    Example:
        ```python
        def test_my_feature(mock_marketplace):
            mock_marketplace.configure_discover([make_candidate("101")])
            ...
            assert mock_marketplace.was_called("discover")
        ```
    """
    marketplace = MockMarketplace()
    yield marketplace
    marketplace.reset()


@pytest.fixture
def sample_candidate() -> Candidate:
    """Provide a reliable, cheap candidate."""
    return make_candidate()


@pytest.fixture
def sample_crew() -> list[Candidate]:
    """Provide three reliable candidates with distinct prices."""
    return [
        make_candidate("101_alpha", price=0.01, success_rate=95),
        make_candidate("202_beta", price=0.02, success_rate=90),
        make_candidate("303_gamma", price=0.015, success_rate=85),
    ]
