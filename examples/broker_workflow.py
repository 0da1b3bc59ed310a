#!/usr/bin/env python3
"""
agentbroker - Step-by-step brokering example

This example walks through one request by hand:
1. Discover agents for a category
2. Select a crew under a price ceiling
3. Dispatch the goal to every crew member
4. Aggregate the deliverables and price the result

Run with: LITE_AGENT_API_KEY=... python examples/broker_workflow.py
"""

import asyncio
import sys

from agentbroker import BrokerConfig, MarketplaceClient
from agentbroker.aggregator import aggregate
from agentbroker.dispatcher import Dispatcher
from agentbroker.exceptions import BrokerError
from agentbroker.pricing import price
from agentbroker.selector import select_crew

GOAL = "Is VIRTUAL token safe?"
CATEGORY = "token safety scam detection cheap"
MAX_PRICE = 0.05
BUYER_PARAMS = {
    "tokenAddress": "0x0b3e328455c4059EEb9e3f84b5543F74E24e7E1b",
    "chain": "base",
    "symbol": "VIRTUAL",
}


async def run() -> None:
    print("=== agentbroker Workflow Example ===\n")

    config = BrokerConfig.from_env()

    async with MarketplaceClient(config) as marketplace:
        # Step 1: Discover
        print(f"1. Discovering agents for '{CATEGORY}'...")
        candidates = await marketplace.discover(CATEGORY)
        print(f"   Found {len(candidates)} agent(s)")
        for c in candidates:
            print(
                f"   - {c.name} ({c.agent_id}): ${c.price:.3f}, "
                f"{c.metrics.success_rate:.0f}% success"
            )

        # Step 2: Select
        print(f"\n2. Selecting a crew under ${MAX_PRICE}...")
        crew = select_crew(candidates, MAX_PRICE)
        for c in crew:
            print(f"   - {c.name} via '{c.offering.name}'")

        # Step 3: Dispatch
        print("\n3. Dispatching...")
        dispatcher = Dispatcher(marketplace, config)
        outcomes = await dispatcher.dispatch_all(crew, GOAL, {"goal": GOAL, **BUYER_PARAMS})
        for o in outcomes:
            status = "ok" if o.ok else f"failed ({o.error})"
            print(f"   - {o.agent_id}: {status} in {o.execution_time_ms}ms")

        # Step 4: Aggregate and price
        print("\n4. Aggregating...")
        result = aggregate(outcomes)
        fee = price(result.total_cost)
        print(f"   Summary: {result.summary}")
        print(f"   Spent: ${result.total_cost:.4f}  Fee: ${fee:.3f}")

    print("\n=== Workflow Complete ===")


def main() -> None:
    try:
        asyncio.run(run())
    except BrokerError as e:
        print(f"\nError: [{e.code}] {e.message}")
        if e.request_id:
            print(f"Request ID: {e.request_id}")
        sys.exit(1)


if __name__ == "__main__":
    main()
