"""
Concurrent job dispatch.

Each selected candidate gets its own Build -> Create -> Poll sequence with a
bounded number of full restarts. All candidates run together and the
fan-out waits for every one of them to settle.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from agentbroker.config import BrokerConfig
from agentbroker.exceptions import BrokerError, DispatchError, MarketplaceError
from agentbroker.logging import get_logger
from agentbroker.marketplace import MarketplaceClient
from agentbroker.requirements import build_service_requirements
from agentbroker.types.jobs import DispatchOutcome, JobPhase
from agentbroker.types.offerings import Candidate

logger = get_logger("dispatch")


class Dispatcher:
    """Dispatches orchestration work to marketplace agents."""

    def __init__(
        self,
        marketplace: MarketplaceClient,
        config: BrokerConfig,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            marketplace: Client used to create and poll jobs
            config: Broker configuration (timeouts, retries, poll interval)
            sleep: Awaitable delay between polls, injectable for tests
            clock: Monotonic time source, injectable for tests
        """
        self.marketplace = marketplace
        self.config = config
        self._sleep = sleep
        self._clock = clock

    async def dispatch_all(
        self,
        crew: Sequence[Candidate],
        goal: str,
        buyer_params: Mapping[str, Any],
        timeout: float | None = None,
        max_retries: int | None = None,
    ) -> list[DispatchOutcome]:
        """
        Dispatch every crew member concurrently and wait for all to settle.

        One member's failure never cancels or delays the others. An
        unexpected exception escaping a dispatch becomes a failed outcome for
        that member alone.

        Returns:
            One outcome per crew member, in crew order
        """
        if not crew:
            return []

        logger.info("Executing %d agent calls in parallel", len(crew))
        tasks = [
            asyncio.create_task(
                self.dispatch(candidate, goal, buyer_params, timeout, max_retries),
                name=f"dispatch-{candidate.agent_id}",
            )
            for candidate in crew
        ]
        settled = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: list[DispatchOutcome] = []
        for candidate, result in zip(crew, settled):
            if isinstance(result, DispatchOutcome):
                outcomes.append(result)
            else:
                logger.error("Dispatch to %s crashed: %r", candidate.name, result)
                outcomes.append(
                    DispatchOutcome(
                        agent_id=candidate.agent_id,
                        cost=0.0,
                        error=str(result) or type(result).__name__,
                    )
                )
        return outcomes

    async def dispatch(
        self,
        candidate: Candidate,
        goal: str,
        buyer_params: Mapping[str, Any],
        timeout: float | None = None,
        max_retries: int | None = None,
    ) -> DispatchOutcome:
        """
        Run one candidate's job to a terminal state.

        The deadline is measured from the start of this call and spans all
        attempts. Each retry rebuilds the payload and creates a fresh job.

        Args:
            candidate: Candidate to purchase from
            goal: Free-text goal of the orchestration
            buyer_params: Fields supplied by the original caller
            timeout: Seconds until the dispatch gives up (default: config.dispatch_timeout)
            max_retries: Restarts allowed after a failure (default: config.max_retries)

        Returns:
            Success outcome carrying the deliverable and offering price, or a
            failure outcome with cost 0 and the last error
        """
        if timeout is None:
            timeout = self.config.dispatch_timeout
        if max_retries is None:
            max_retries = self.config.max_retries

        start = self._clock()
        deadline = start + timeout
        last_error = "Exhausted retries"

        for attempt in range(max_retries + 1):
            if attempt > 0 and self._clock() >= deadline:
                break
            try:
                deliverable = await self._attempt(candidate, goal, buyer_params, deadline, timeout)
            except BrokerError as e:
                last_error = e.message
                if attempt < max_retries:
                    logger.info(
                        "Retrying %s (attempt %d): %s", candidate.name, attempt + 2, last_error
                    )
                continue

            return DispatchOutcome(
                agent_id=candidate.agent_id,
                result=deliverable,
                cost=candidate.offering.price,
                execution_time_ms=self._elapsed_ms(start),
            )

        logger.warning("%s failed: %s", candidate.name, last_error)
        return DispatchOutcome(
            agent_id=candidate.agent_id,
            result=None,
            cost=0.0,
            execution_time_ms=self._elapsed_ms(start),
            error=last_error,
        )

    async def _attempt(
        self,
        candidate: Candidate,
        goal: str,
        buyer_params: Mapping[str, Any],
        deadline: float,
        timeout: float,
    ) -> Any:
        requirements = build_service_requirements(
            candidate, goal, buyer_params, self.config.attribution
        )
        logger.debug("%s requirements: %s", candidate.name, requirements)

        try:
            job_id = await self.marketplace.create_job(candidate, requirements)
        except MarketplaceError as e:
            raise DispatchError(f"Job create failed ({e.code}): {e.message}") from e

        logger.info("Created job %s for %s (%s)", job_id, candidate.name, candidate.offering.name)

        while self._clock() < deadline:
            await self._sleep(self.config.poll_interval)

            try:
                status = await self.marketplace.poll_job(job_id)
            except (MarketplaceError, ValueError) as e:
                logger.debug("Poll of job %s failed, will retry: %s", job_id, e)
                continue

            if status.phase is JobPhase.COMPLETED:
                return status.deliverable
            if status.phase.is_failure:
                raise DispatchError(
                    f"Job {job_id} ended with phase: {status.phase.value}", job_id=job_id
                )

        raise DispatchError(
            f"Job {job_id} timed out after {int(timeout * 1000)}ms", job_id=job_id
        )

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)
