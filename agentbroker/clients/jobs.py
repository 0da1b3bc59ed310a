"""Job lifecycle resource client."""

from typing import TYPE_CHECKING, Any

from agentbroker.exceptions import MarketplaceError
from agentbroker.types.jobs import JobPhase, JobStatus

if TYPE_CHECKING:
    from agentbroker.transport import AsyncHTTPTransport


class JobsClient:
    """Async client for creating and inspecting marketplace jobs."""

    JOBS_PATH = "/acp/jobs"

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the jobs client.

        Args:
            transport: Async HTTP transport bound to the job API
        """
        self.transport = transport

    async def create(
        self,
        provider_wallet_address: str,
        job_offering_name: str,
        service_requirements: dict[str, Any],
    ) -> str:
        """
        Create a job with a provider agent.

        Args:
            provider_wallet_address: Wallet address identifying the provider
            job_offering_name: Name of the offering being purchased
            service_requirements: Request payload shaped to the offering schema

        Returns:
            Identifier of the created job

        Raises:
            MarketplaceError: If the call fails or no job id is returned
        """
        response = await self.transport.request(
            method="POST",
            path=self.JOBS_PATH,
            body={
                "providerWalletAddress": provider_wallet_address,
                "jobOfferingName": job_offering_name,
                "serviceRequirements": service_requirements,
            },
        )

        if not isinstance(response, dict):
            raise MarketplaceError("NO_JOB_ID", "No jobId returned")

        data = response.get("data")
        job_id = data.get("jobId") if isinstance(data, dict) else None
        if job_id is None:
            job_id = response.get("jobId")
        if job_id is None:
            raise MarketplaceError("NO_JOB_ID", "No jobId returned")
        return str(job_id)

    async def get(self, job_id: str) -> JobStatus:
        """
        Get the current status of a job.

        Args:
            job_id: Job identifier returned by create()

        Returns:
            JobStatus with phase and, once completed, the deliverable. A body
            without a data object reads as an UNKNOWN (still pending) phase.
        """
        response = await self.transport.request(
            method="GET",
            path=f"{self.JOBS_PATH}/{job_id}",
        )

        data = response.get("data") if isinstance(response, dict) else None
        if not isinstance(data, dict):
            data = {}
        return JobStatus(
            job_id=job_id,
            phase=JobPhase.parse(data.get("phase")),
            deliverable=data.get("deliverable"),
        )
