"""
Orchestration facade.

The single entry point front ends call. Runs
Validating -> Discovering -> Selecting -> Dispatching -> Aggregating -> Priced
and converts every failure into a well-formed response instead of raising.
"""

import math
import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from agentbroker.aggregator import aggregate
from agentbroker.config import BrokerConfig
from agentbroker.dispatcher import Dispatcher
from agentbroker.exceptions import BrokerError, NoAgentsError, ValidationError
from agentbroker.logging import get_logger
from agentbroker.marketplace import MarketplaceClient
from agentbroker.pricing import margin, price
from agentbroker.selector import select_crew
from agentbroker.types.orchestration import OrchestrationRequest, OrchestrationResponse

logger = get_logger()


def validate_request(request: Any) -> None:
    """
    Check the shape of an inbound request.

    Raises:
        ValidationError: If goal or category is missing or not a string, or
            max_price is present but not a finite number
    """
    if not isinstance(request, Mapping):
        raise ValidationError("INVALID_REQUEST", "request must be an object")

    goal = request.get("goal")
    if not goal or not isinstance(goal, str):
        raise ValidationError("INVALID_GOAL", '"goal" is required and must be a string')

    category = request.get("category")
    if not category or not isinstance(category, str):
        raise ValidationError("INVALID_CATEGORY", '"category" is required and must be a string')

    max_price = request.get("max_price")
    if max_price is not None and (
        isinstance(max_price, bool) or not isinstance(max_price, (int, float))
    ):
        raise ValidationError("INVALID_MAX_PRICE", '"max_price" must be a number if provided')
    if max_price is not None and not math.isfinite(max_price):
        raise ValidationError("INVALID_MAX_PRICE", '"max_price" must be a finite number')


class Orchestrator:
    """
    Brokers one request across a crew of marketplace agents.

    Example:
        ```python
        async with Orchestrator.from_env() as broker:
            response = await broker.execute({
                "goal": "Is VIRTUAL token safe?",
                "category": "token safety",
                "max_price": 0.05,
                "symbol": "VIRTUAL",
            })
            print(response.summary)
        ```
    """

    def __init__(
        self,
        config: BrokerConfig,
        marketplace: MarketplaceClient | None = None,
        dispatcher: Dispatcher | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.marketplace = marketplace or MarketplaceClient(config)
        self.dispatcher = dispatcher or Dispatcher(self.marketplace, config)
        self._clock = clock

    @classmethod
    def from_env(cls, **overrides: Any) -> "Orchestrator":
        """Create an orchestrator configured from environment variables."""
        return cls(BrokerConfig.from_env(**overrides))

    async def execute(self, request: Mapping[str, Any]) -> OrchestrationResponse:
        """
        Run one orchestration request end to end.

        Never raises; failures are reported through the response's
        ``summary`` and ``error`` fields.

        Args:
            request: ``{goal, category, max_price?, ...buyer fields}``

        Returns:
            OrchestrationResponse
        """
        start = self._clock()

        try:
            validate_request(request)
        except ValidationError as e:
            logger.warning("Rejected request: %s", e.message)
            return OrchestrationResponse(
                summary=f"Validation failed: {e.message}",
                execution_time_ms=self._elapsed_ms(start),
                error=e.message,
            )

        try:
            return await self._run(
                OrchestrationRequest.from_mapping(request, self.config.default_max_price),
                start,
            )
        except NoAgentsError as e:
            logger.warning("No agents found for category: %s", e.category)
            return OrchestrationResponse(
                summary=f"No agents found for category: {e.category}",
                execution_time_ms=self._elapsed_ms(start),
                error=e.message,
            )
        except BrokerError as e:
            logger.error("Orchestration failed: %s", e)
            return self._failure(e.message, start)
        except Exception as e:
            logger.exception("Orchestration failed")
            return self._failure(str(e) or type(e).__name__, start)

    async def _run(self, request: OrchestrationRequest, start: float) -> OrchestrationResponse:
        logger.info("Orchestrating: %s", request.goal)

        candidates = await self.marketplace.discover(request.category)
        if not candidates:
            raise NoAgentsError(request.category)
        logger.info("Found %d agents", len(candidates))

        crew = select_crew(
            candidates,
            request.max_price,
            max_crew=self.config.max_crew,
            min_success_rate=self.config.min_success_rate,
            max_inactive_minutes=self.config.max_inactive_minutes,
        )
        logger.info("Selected %d agents", len(crew))

        outcomes = await self.dispatcher.dispatch_all(crew, request.goal, request.buyer_params)

        result = aggregate(outcomes)
        fee = price(result.total_cost, self.config.fee_floor, self.config.markup)
        elapsed = self._elapsed_ms(start)

        logger.info("Complete. Time: %dms", elapsed)
        logger.info("Summary: %s", result.summary)
        logger.info(
            "Margin: fee=$%.3f - spent=$%.4f = $%.4f",
            fee,
            result.total_cost,
            margin(result.total_cost, self.config.fee_floor, self.config.markup),
        )

        return OrchestrationResponse(
            summary=result.summary,
            agents_used=[o.agent_id for o in outcomes if o.ok],
            total_cost=result.total_cost,
            results={o.agent_id: o.to_dict() for o in outcomes},
            execution_time_ms=elapsed,
            fee=fee,
            payable_token=self.config.payable_token,
        )

    async def handle_service_message(self, message: Any) -> dict[str, Any] | None:
        """
        Answer a ``service_request`` message from a message-based front end.

        Args:
            message: Decoded ``{"type": "service_request", "job_id", "params"}``

        Returns:
            A ``service_response`` dict, or None for other message types
        """
        if not isinstance(message, Mapping) or message.get("type") != "service_request":
            return None

        job_id = message.get("job_id") or "unknown"
        response = await self.execute(message.get("params") or {})

        if not response.ok:
            return {
                "type": "service_response",
                "job_id": job_id,
                "status": "failed",
                "error": response.error,
            }

        return {
            "type": "service_response",
            "job_id": job_id,
            "status": "completed",
            "result": response.to_dict(),
            "cost": response.total_cost,
            "completed_at": datetime.now(timezone.utc).isoformat(),
        }

    def _failure(self, message: str, start: float) -> OrchestrationResponse:
        return OrchestrationResponse(
            summary=f"Orchestration failed: {message}",
            execution_time_ms=self._elapsed_ms(start),
            error=message,
        )

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)

    async def close(self) -> None:
        """Close the marketplace client."""
        await self.marketplace.close()

    async def __aenter__(self) -> "Orchestrator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
