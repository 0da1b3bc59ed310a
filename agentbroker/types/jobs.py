"""Job lifecycle and dispatch outcome data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class JobPhase(str, Enum):
    """Remote job lifecycle phase as reported by the marketplace."""

    REQUEST = "REQUEST"
    NEGOTIATION = "NEGOTIATION"
    TRANSACTION = "TRANSACTION"
    EVALUATION = "EVALUATION"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "JobPhase":
        try:
            return cls(str(value or "").upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_failure(self) -> bool:
        return self in (JobPhase.REJECTED, JobPhase.EXPIRED)

    @property
    def is_terminal(self) -> bool:
        return self is JobPhase.COMPLETED or self.is_failure


@dataclass
class JobStatus:
    """Status snapshot of a remote job."""

    job_id: str
    phase: JobPhase
    deliverable: Any = None


@dataclass(frozen=True)
class DispatchOutcome:
    """Terminal result of dispatching one candidate."""

    agent_id: str
    result: Any = None
    cost: float = 0.0
    execution_time_ms: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result,
            "cost": self.cost,
            "execution_time_ms": self.execution_time_ms,
            "error": self.error,
        }
