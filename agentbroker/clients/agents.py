"""Agent search resource client."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from agentbroker.transport import AsyncHTTPTransport


class AgentsClient:
    """Async client for the marketplace agent search API."""

    SEARCH_PATH = "/api/agents/v5/search"

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the agents client.

        Args:
            transport: Async HTTP transport bound to the search API
        """
        self.transport = transport

    async def search(
        self,
        query: str,
        top_k: int = 10,
        search_mode: str = "hybrid",
    ) -> list[dict[str, Any]]:
        """
        Search agents matching a free-text query.

        Args:
            query: Category or task description
            top_k: Maximum number of agents to return
            search_mode: Search strategy; the marketplace supports "hybrid"
                keyword/semantic ranking

        Returns:
            Raw agent records, each with ``jobs`` and ``metrics``
        """
        response = await self.transport.request(
            method="GET",
            path=self.SEARCH_PATH,
            params={
                "query": query,
                "topK": str(top_k),
                "searchMode": search_mode,
                "claw": "true",
            },
        )

        data = response.get("data") if isinstance(response, dict) else None
        return data if isinstance(data, list) else []
