"""
Result aggregation.

Turns per-agent dispatch outcomes into one human-readable summary and the
total spend on successful calls.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from agentbroker.types.jobs import DispatchOutcome
from agentbroker.types.offerings import short_name

NO_SUCCESS_SUMMARY = "No successful agent calls"
SEPARATOR = " | "
ELLIPSIS = "…"

MAX_TEXT_RESULT = 100
MAX_FIELD_VALUE = 40
MAX_FIELDS = 3


@dataclass(frozen=True)
class Aggregate:
    """Summary of a dispatch round."""

    summary: str
    total_cost: float


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ELLIPSIS if len(text) > limit else text


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return _truncate(value, MAX_FIELD_VALUE)
    if value is None or isinstance(value, (list, tuple, Mapping)):
        return "[object]"
    return f"[{type(value).__name__}]"


def summarize_outcome(outcome: DispatchOutcome) -> str:
    """Render one successful outcome as a single summary fragment."""
    name = short_name(outcome.agent_id)
    cost = f"${outcome.cost:.3f}"
    result = outcome.result

    if not result:
        return f"{name}: completed ({cost})"

    if isinstance(result, str):
        return f"{name}: {_truncate(result, MAX_TEXT_RESULT)} ({cost})"

    if isinstance(result, Mapping):
        parts = [f"{key}: {_format_value(value)}" for key, value in list(result.items())[:MAX_FIELDS]]
        return f"{name}: {', '.join(parts)} ({cost})"

    return f"{name}: completed ({cost})"


def aggregate(outcomes: Sequence[DispatchOutcome]) -> Aggregate:
    """
    Merge dispatch outcomes into a summary and total cost.

    Failed outcomes are listed by short name but never counted in the total.
    With no successful outcome the summary is the fixed sentinel alone.

    Args:
        outcomes: One outcome per dispatched candidate

    Returns:
        Aggregate with the summary string and total successful spend
    """
    successful = [o for o in outcomes if o.ok]
    failed = [o for o in outcomes if not o.ok]

    total_cost = sum(o.cost for o in successful)

    if not successful:
        return Aggregate(summary=NO_SUCCESS_SUMMARY, total_cost=0.0)

    fragments = [summarize_outcome(o) for o in successful]
    summary = f"{SEPARATOR.join(fragments)}{SEPARATOR}Total: ${total_cost:.3f}"

    if failed:
        names = ", ".join(short_name(o.agent_id) for o in failed)
        summary += f"{SEPARATOR}{len(failed)} failed: {names}"

    return Aggregate(summary=summary, total_cost=float(total_cost))
