"""Orchestration request/response contract."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_MAX_PRICE = 0.1


@dataclass
class OrchestrationRequest:
    """Validated inbound request.

    ``buyer_params`` holds every field of the inbound mapping, including the
    reserved ones, so agent schemas can pick whatever they declare.
    """

    goal: str
    category: str
    max_price: float = DEFAULT_MAX_PRICE
    buyer_params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], default_max_price: float = DEFAULT_MAX_PRICE
    ) -> "OrchestrationRequest":
        """Build a request from an already validated mapping."""
        max_price = data.get("max_price")
        return cls(
            goal=data["goal"],
            category=data["category"],
            max_price=default_max_price if max_price is None else float(max_price),
            buyer_params=dict(data),
        )


@dataclass
class OrchestrationResponse:
    """Deliverable returned to the front end."""

    summary: str
    agents_used: list[str] = field(default_factory=list)
    total_cost: float = 0.0
    results: dict[str, Any] = field(default_factory=dict)
    execution_time_ms: int = 0
    fee: float | None = None
    payable_token: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "summary": self.summary,
            "agents_used": list(self.agents_used),
            "total_cost": self.total_cost,
            "results": self.results,
            "execution_time_ms": self.execution_time_ms,
        }
        if self.fee is not None:
            data["payableDetail"] = {
                "amount": self.fee,
                "tokenAddress": self.payable_token,
            }
        if self.error is not None:
            data["error"] = self.error
        return data
