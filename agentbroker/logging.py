"""
agentbroker logging utilities.

Provides configurable logging for marketplace HTTP traffic and per-agent
dispatch progress. Ensures the marketplace API key is never logged.
"""

import logging
import re
from typing import Any

# Package loggers
_broker_logger = logging.getLogger("agentbroker")
_http_logger = logging.getLogger("agentbroker.http")
_dispatch_logger = logging.getLogger("agentbroker.dispatch")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # Header form: x-api-key: abc123
    (re.compile(r"(x-api-key)['\"]?\s*[:=]\s*['\"]?[^'\"\s,}]+['\"]?", re.IGNORECASE), r"\1: [REDACTED]"),
    # Secret/token patterns
    (re.compile(r"(secret|token|password|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_DEFAULT_SENSITIVE_KEYS = {"api_key", "api-key", "apikey", "secret", "token", "password"}

# Buyer payloads legitimately carry token metadata
_NON_SENSITIVE_KEYS = {"token", "tokenaddress", "token_address"}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    dispatch_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure agentbroker logging.

    Args:
        level: Default log level for all broker loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        dispatch_level: Log level for per-agent dispatch logging (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from agentbroker.logging import configure_logging

        # Trace every marketplace request
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _broker_logger.setLevel(level)
    _broker_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _dispatch_logger.setLevel(dispatch_level if dispatch_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get an agentbroker logger.

    Args:
        name: Logger name suffix (e.g., "http", "dispatch"). If None, returns the main logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _broker_logger
    return logging.getLogger(f"agentbroker.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask credentials in a free-text string.

    Args:
        text: Text that may contain an API key or other secrets

    Returns:
        Text with sensitive data masked
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def _is_sensitive(key: str, sensitive_keys: set[str]) -> bool:
    key_lower = key.lower()
    if key_lower in _NON_SENSITIVE_KEYS:
        return False
    return key_lower in sensitive_keys or any(sk in key_lower for sk in sensitive_keys)


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Key fragments to mask (default: api_key, secret, token, password)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        if _is_sensitive(key, sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """
    Log an HTTP request at DEBUG level with sensitive data masked.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Request URL or path
        headers: Request headers (optional)
        params: Query parameters (optional)
        body: Request body (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(headers)}")

    if params:
        log_parts.append(f"params={safe_log_dict(params)}")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    body: dict[str, Any] | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """
    Log an HTTP response at DEBUG level with sensitive data masked.

    Args:
        status_code: HTTP status code
        url: Request URL or path
        body: Response body (optional)
        elapsed_ms: Request duration in milliseconds (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
]
