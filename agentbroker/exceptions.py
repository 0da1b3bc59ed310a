"""agentbroker exception classes."""


class BrokerError(Exception):
    """Base exception for all agentbroker errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(BrokerError):
    """Raised when broker configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ValidationError(BrokerError):
    """Raised on malformed orchestration requests or rejected API input."""

    pass


class MarketplaceError(BrokerError):
    """Raised when a marketplace call fails at the transport or HTTP level."""

    pass


class AuthenticationError(MarketplaceError):
    """Raised when the API key is rejected."""

    pass


class AuthorizationError(MarketplaceError):
    """Raised when access is denied."""

    pass


class NotFoundError(MarketplaceError):
    """Raised when a job or endpoint is not found."""

    pass


class RateLimitedError(MarketplaceError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ServerError(MarketplaceError):
    """Raised on server errors (5xx) and connection failures."""

    pass


class DiscoveryError(BrokerError):
    """Raised when the agent search call fails."""

    def __init__(self, message: str) -> None:
        super().__init__("DISCOVERY_ERROR", message)


class NoAgentsError(BrokerError):
    """Raised when discovery succeeds but yields no candidates."""

    def __init__(self, category: str) -> None:
        super().__init__("NO_AGENTS", "No agents available")
        self.category = category


class DispatchError(BrokerError):
    """Raised inside a single dispatch; never escapes the dispatcher."""

    def __init__(self, message: str, job_id: str | None = None) -> None:
        super().__init__("DISPATCH_ERROR", message)
        self.job_id = job_id
