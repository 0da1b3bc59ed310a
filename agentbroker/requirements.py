"""
Request payload construction.

Maps buyer-supplied fields onto an offering's declared requirement schema
using an explicit rule table, then stamps the attribution block.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from agentbroker.config import Attribution
from agentbroker.types.offerings import Candidate


@dataclass(frozen=True)
class FieldRule:
    """How to fill one schema field that buyers may name differently.

    Sources are tried in order; the first truthy buyer value wins. When no
    source matches, ``default`` is used, then the goal text if ``from_goal``.
    ``override`` rules replace a value copied verbatim from the buyer.
    """

    sources: tuple[str, ...] = ()
    default: Any = None
    from_goal: bool = False
    override: bool = False


FIELD_RULES: dict[str, FieldRule] = {
    "tokenAddress": FieldRule(sources=("tokenAddress", "token_address")),
    "token_address": FieldRule(sources=("tokenAddress", "token_address")),
    "token": FieldRule(sources=("symbol", "token")),
    "symbol": FieldRule(sources=("symbol", "token")),
    "chain": FieldRule(sources=("chain",), default="base"),
    "query": FieldRule(from_goal=True),
    "goal": FieldRule(from_goal=True, override=True),
}

FALLBACK_FIELD = "goal"


def _resolve(rule: FieldRule, goal: str, buyer_params: Mapping[str, Any]) -> Any:
    for source in rule.sources:
        value = buyer_params.get(source)
        if value:
            return value
    if rule.default is not None:
        return rule.default
    if rule.from_goal:
        return goal
    return None


def build_requirements(
    schema_properties: Mapping[str, Any],
    goal: str,
    buyer_params: Mapping[str, Any],
    rules: Mapping[str, FieldRule] = FIELD_RULES,
) -> dict[str, Any]:
    """
    Build a payload matching a requirement schema.

    Args:
        schema_properties: Declared schema fields of the offering
        goal: Free-text goal of the orchestration
        buyer_params: Fields supplied by the original caller
        rules: Field rule table

    Returns:
        Payload with every field that could be filled; the raw goal under
        ``goal`` when nothing could be mapped
    """
    reqs: dict[str, Any] = {}

    for name in schema_properties:
        if buyer_params.get(name) is not None:
            reqs[name] = buyer_params[name]

    for name, rule in rules.items():
        if name not in schema_properties:
            continue
        if reqs.get(name) and not rule.override:
            continue
        value = _resolve(rule, goal, buyer_params)
        if value is not None:
            reqs[name] = value

    if not reqs:
        reqs[FALLBACK_FIELD] = goal

    return reqs


def build_service_requirements(
    candidate: Candidate,
    goal: str,
    buyer_params: Mapping[str, Any],
    attribution: Attribution | None = None,
) -> dict[str, Any]:
    """Build the full job payload for a candidate, attribution included."""
    attribution = attribution or Attribution()
    reqs = build_requirements(candidate.offering.schema_properties, goal, buyer_params)
    return {**reqs, **attribution.to_dict()}
