"""
Tests for concurrent dispatch.

Feature: per-agent job lifecycle with settle-all fan-out
"""

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from agentbroker.config import BrokerConfig
from agentbroker.dispatcher import Dispatcher
from agentbroker.exceptions import ServerError
from agentbroker.testing import JobScript, MockMarketplace, make_candidate
from agentbroker.types import Candidate, DispatchOutcome

GOAL = "Is VIRTUAL token safe?"


def make_config(**overrides) -> BrokerConfig:
    values = {"api_key": "test-api-key", "poll_interval": 0.0, "dispatch_timeout": 1.0}
    values.update(overrides)
    return BrokerConfig(**values)


def test_successful_dispatch_captures_deliverable_and_price(
    broker_config: BrokerConfig, mock_marketplace: MockMarketplace
) -> None:
    candidate = make_candidate("101", price=0.02)
    mock_marketplace.configure_job(
        "101", JobScript(phases=["REQUEST", "TRANSACTION", "COMPLETED"], deliverable="safe")
    )
    dispatcher = Dispatcher(mock_marketplace, broker_config)

    outcome = asyncio.run(dispatcher.dispatch(candidate, GOAL, {}))

    assert outcome.ok
    assert outcome.result == "safe"
    assert outcome.cost == 0.02
    assert mock_marketplace.call_count("create_job") == 1
    assert mock_marketplace.call_count("poll_job") == 3


def test_payload_is_stamped_with_attribution(
    broker_config: BrokerConfig, mock_marketplace: MockMarketplace
) -> None:
    candidate = make_candidate("101", requirement={"properties": {"symbol": {}}})
    dispatcher = Dispatcher(mock_marketplace, broker_config)

    asyncio.run(dispatcher.dispatch(candidate, GOAL, {"symbol": "VIRTUAL"}))

    [payload] = mock_marketplace.requirements_for("101")
    assert payload["symbol"] == "VIRTUAL"
    assert payload["_referral_agent"] == "Catalyst"


def test_rejected_job_is_retried_with_fresh_job(
    broker_config: BrokerConfig, mock_marketplace: MockMarketplace
) -> None:
    candidate = make_candidate("101", price=0.01)
    mock_marketplace.configure_job(
        "101",
        JobScript(phases=["REJECTED"]),
        JobScript(phases=["COMPLETED"], deliverable={"score": 9}),
    )
    dispatcher = Dispatcher(mock_marketplace, broker_config)

    outcome = asyncio.run(dispatcher.dispatch(candidate, GOAL, {}, max_retries=1))

    assert outcome.ok
    assert outcome.result == {"score": 9}
    assert mock_marketplace.create_count("101") == 2
    polled = {call.args[0] for call in mock_marketplace.get_calls("poll_job")}
    assert polled == {"job-101-1", "job-101-2"}


def test_failure_after_retries_has_zero_cost_and_last_error(
    broker_config: BrokerConfig, mock_marketplace: MockMarketplace
) -> None:
    candidate = make_candidate("101", price=0.05)
    mock_marketplace.configure_job(
        "101",
        JobScript(phases=["REJECTED"]),
        JobScript(phases=["EXPIRED"]),
    )
    dispatcher = Dispatcher(mock_marketplace, broker_config)

    outcome = asyncio.run(dispatcher.dispatch(candidate, GOAL, {}, max_retries=1))

    assert not outcome.ok
    assert outcome.cost == 0
    assert outcome.result is None
    assert outcome.error == "Job job-101-2 ended with phase: EXPIRED"


def test_create_failure_is_retryable(
    broker_config: BrokerConfig, mock_marketplace: MockMarketplace
) -> None:
    candidate = make_candidate("101")
    mock_marketplace.configure_job(
        "101",
        JobScript(create_error=ServerError("HTTP_500", "upstream down")),
        JobScript(deliverable="ok"),
    )
    dispatcher = Dispatcher(mock_marketplace, broker_config)

    outcome = asyncio.run(dispatcher.dispatch(candidate, GOAL, {}))

    assert outcome.ok
    assert mock_marketplace.create_count("101") == 2


def test_create_failure_message(
    broker_config: BrokerConfig, mock_marketplace: MockMarketplace
) -> None:
    candidate = make_candidate("101")
    mock_marketplace.configure_job(
        "101", JobScript(create_error=ServerError("HTTP_500", "upstream down"))
    )
    dispatcher = Dispatcher(mock_marketplace, broker_config)

    outcome = asyncio.run(dispatcher.dispatch(candidate, GOAL, {}, max_retries=0))

    assert outcome.error == "Job create failed (HTTP_500): upstream down"
    assert mock_marketplace.create_count("101") == 1


def test_transient_poll_errors_do_not_end_the_job(
    broker_config: BrokerConfig, mock_marketplace: MockMarketplace
) -> None:
    candidate = make_candidate("101")
    mock_marketplace.configure_job(
        "101",
        JobScript(
            phases=[ServerError("CONNECTION_ERROR", "reset"), ServerError("HTTP_502", "bad"), "COMPLETED"],
            deliverable="done",
        ),
    )
    dispatcher = Dispatcher(mock_marketplace, broker_config)

    outcome = asyncio.run(dispatcher.dispatch(candidate, GOAL, {}, max_retries=0))

    assert outcome.ok
    assert outcome.result == "done"
    assert mock_marketplace.create_count("101") == 1


def test_timeout_produces_failed_outcome(mock_marketplace: MockMarketplace) -> None:
    config = make_config(dispatch_timeout=0.1)
    candidate = make_candidate("101")
    mock_marketplace.configure_job("101", JobScript(phases=["REQUEST"]))
    dispatcher = Dispatcher(mock_marketplace, config)

    outcome = asyncio.run(dispatcher.dispatch(candidate, GOAL, {}, max_retries=1))

    assert not outcome.ok
    assert outcome.cost == 0
    assert outcome.error == "Job job-101-1 timed out after 100ms"
    # the deadline spans attempts, so no second job is created once it has passed
    assert mock_marketplace.create_count("101") == 1


def test_poll_waits_configured_interval(mock_marketplace: MockMarketplace) -> None:
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    config = make_config(poll_interval=3.0)
    mock_marketplace.configure_job("101", JobScript(phases=["REQUEST", "COMPLETED"]))
    dispatcher = Dispatcher(mock_marketplace, config, sleep=fake_sleep)

    asyncio.run(dispatcher.dispatch(make_candidate("101"), GOAL, {}))

    assert delays == [3.0, 3.0]


@given(
    prices=st.lists(
        st.floats(min_value=0.0, max_value=1.0, allow_nan=False), min_size=1, max_size=6
    )
)
@settings(max_examples=30, deadline=None)
def test_all_succeed_gives_one_success_per_candidate(prices: list[float]) -> None:
    """N successful candidates yield N successful outcomes totalling their prices."""
    crew = [make_candidate(f"{i}_agent", price=price) for i, price in enumerate(prices)]
    marketplace = MockMarketplace()
    for candidate in crew:
        marketplace.configure_job(candidate.agent_id, JobScript(deliverable="ok"))
    dispatcher = Dispatcher(marketplace, make_config())

    outcomes = asyncio.run(dispatcher.dispatch_all(crew, GOAL, {}))

    assert [o.agent_id for o in outcomes] == [c.agent_id for c in crew]
    assert all(o.ok for o in outcomes)
    assert sum(o.cost for o in outcomes) == sum(prices)
    for candidate in crew:
        assert marketplace.create_count(candidate.agent_id) == 1


def test_one_timeout_does_not_block_the_others(mock_marketplace: MockMarketplace) -> None:
    """Settle-all: a slow agent fails on its own while siblings report quick times."""
    config = make_config(dispatch_timeout=0.5)
    slow = make_candidate("slow_agent", price=0.03)
    fast = [make_candidate(f"fast{i}_agent", price=0.01) for i in range(3)]
    mock_marketplace.configure_job("slow_agent", JobScript(phases=["REQUEST"], poll_delay=0.01))
    for candidate in fast:
        mock_marketplace.configure_job(candidate.agent_id, JobScript(deliverable="ok"))
    dispatcher = Dispatcher(mock_marketplace, config)

    outcomes = asyncio.run(dispatcher.dispatch_all([slow, *fast], GOAL, {}, max_retries=0))

    assert len(outcomes) == 4
    slow_outcome, *fast_outcomes = outcomes
    assert not slow_outcome.ok
    assert slow_outcome.cost == 0
    assert "timed out" in slow_outcome.error
    assert all(o.ok for o in fast_outcomes)
    assert all(o.execution_time_ms < slow_outcome.execution_time_ms for o in fast_outcomes)


def test_crashing_dispatch_is_contained() -> None:
    """An unexpected exception in one dispatch becomes that candidate's failure."""

    class ExplodingMarketplace(MockMarketplace):
        async def create_job(self, candidate: Candidate, requirements: dict) -> str:
            if candidate.agent_id == "bad":
                raise RuntimeError("kaboom")
            return await super().create_job(candidate, requirements)

    marketplace = ExplodingMarketplace()
    marketplace.configure_job("good", JobScript(deliverable="ok"))
    dispatcher = Dispatcher(marketplace, make_config())

    outcomes = asyncio.run(
        dispatcher.dispatch_all([make_candidate("bad"), make_candidate("good")], GOAL, {})
    )

    assert outcomes[0] == DispatchOutcome(agent_id="bad", cost=0.0, error="kaboom")
    assert outcomes[1].ok


def test_empty_crew_is_a_no_op(mock_marketplace: MockMarketplace) -> None:
    dispatcher = Dispatcher(mock_marketplace, make_config())

    assert asyncio.run(dispatcher.dispatch_all([], GOAL, {})) == []
    assert not mock_marketplace.was_called("create_job")
