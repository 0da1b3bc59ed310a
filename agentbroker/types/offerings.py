"""Marketplace agent, offering and candidate data models."""

from dataclasses import dataclass, field
from typing import Any

# Rank unpriced offerings behind every priced one when picking the cheapest
_UNPRICED_SORT_KEY = 999.0


@dataclass(frozen=True)
class AgentOffering:
    """One purchasable capability of a remote agent."""

    id: Any
    name: str
    description: str
    price: float
    price_type: str = "fixed"
    requirement: dict[str, Any] = field(default_factory=dict)

    @property
    def schema_properties(self) -> dict[str, Any]:
        """Declared requirement fields, keyed by field name."""
        props = self.requirement.get("properties") if isinstance(self.requirement, dict) else None
        return props if isinstance(props, dict) else {}

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "AgentOffering":
        price_v2 = data.get("priceV2") or {}
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            description=data.get("description") or "",
            price=float(data.get("price") or 0),
            price_type=price_v2.get("type") or "fixed",
            requirement=data.get("requirement") or {},
        )


@dataclass(frozen=True)
class AgentMetrics:
    """Reliability and liveness metrics of an agent.

    ``success_rate`` is a percentage on a 0-100 scale, not a 0-1 ratio.
    """

    success_rate: float = 0.0
    is_online: bool = False
    mins_from_last_online: int = 999999
    successful_job_count: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> "AgentMetrics":
        data = data or {}
        mins = data.get("minsFromLastOnlineTime")
        return cls(
            success_rate=float(data.get("successRate") or 0),
            is_online=bool(data.get("isOnline", False)),
            mins_from_last_online=999999 if mins is None else int(mins),
            successful_job_count=int(data.get("successfulJobCount") or 0),
        )


@dataclass(frozen=True)
class Candidate:
    """An agent collapsed to its cheapest offering plus current metrics."""

    agent_id: str
    name: str
    wallet_address: str
    offering: AgentOffering
    metrics: AgentMetrics

    @property
    def price(self) -> float:
        return self.offering.price

    @property
    def short_name(self) -> str:
        return short_name(self.agent_id)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Candidate | None":
        """
        Build a candidate from one raw search result.

        Args:
            data: Raw agent record with ``jobs`` and ``metrics``

        Returns:
            Candidate bound to the cheapest job, or None if the agent has no jobs
        """
        jobs = data.get("jobs") or []
        if not jobs:
            return None

        # sorted() is stable, so equal prices keep marketplace order
        cheapest = sorted(jobs, key=_offering_sort_key)[0]

        return cls(
            agent_id=str(data.get("id")),
            name=data.get("name", ""),
            wallet_address=data.get("walletAddress", ""),
            offering=AgentOffering.from_api(cheapest),
            metrics=AgentMetrics.from_api(data.get("metrics")),
        )


def short_name(agent_id: str) -> str:
    """Return the part of an agent id before the first underscore."""
    return agent_id.split("_", 1)[0]


def _offering_sort_key(job: dict[str, Any]) -> float:
    price = job.get("price")
    return _UNPRICED_SORT_KEY if price is None else float(price)
