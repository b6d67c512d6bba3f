"""Error hierarchy for the Kapacitor client.

Every error raised by the pool or the client extends KapacitorError and
carries a ``kind`` tag, so callers can branch on ``exc.kind`` instead of
inspecting exception types:

    try:
        await pool.dispatch_json(request)
    except KapacitorError as exc:
        if exc.kind is ErrorKind.REQUEST_REJECTED:
            ...
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Tag identifying the outcome an error represents."""

    CONFIGURATION = "configuration"
    NO_AVAILABLE_HOSTS = "no_available_hosts"
    ALL_HOSTS_FAILED = "all_hosts_failed"
    SERVICE_UNAVAILABLE = "service_unavailable"
    REQUEST_REJECTED = "request_rejected"
    SEMANTIC = "semantic"


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class KapacitorError(Exception):
    """Base error for all client errors."""

    kind: ErrorKind = ErrorKind.CONFIGURATION
    message: str = "Kapacitor client error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(KapacitorError):
    """Malformed pool options, host list or duplicate host."""

    kind = ErrorKind.CONFIGURATION
    message = "Invalid configuration"


class NoAvailableHostsError(KapacitorError):
    """No eligible host exists when a request begins."""

    kind = ErrorKind.NO_AVAILABLE_HOSTS
    message = "No available hosts"


class AllHostsFailedError(KapacitorError):
    """Every attempt failed on transport or with a 5xx status."""

    kind = ErrorKind.ALL_HOSTS_FAILED
    message = "All hosts failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        last_error: BaseException | None = None,
        attempts: int = 0,
        **kwargs: object,
    ) -> None:
        super().__init__(message, attempts=attempts, **kwargs)
        self.last_error = last_error
        self.attempts = attempts


class ServiceUnavailableError(AllHostsFailedError):
    """Retries exhausted and the last host answered with a 5xx status."""

    kind = ErrorKind.SERVICE_UNAVAILABLE
    message = "Service unavailable"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int,
        body: str = "",
        **kwargs: object,
    ) -> None:
        super().__init__(message, status_code=status_code, **kwargs)
        self.status_code = status_code
        self.body = body


class RequestRejectedError(KapacitorError):
    """A host answered with a 3xx or 4xx status. Never retried."""

    kind = ErrorKind.REQUEST_REJECTED
    message = "Request rejected"

    def __init__(self, message: str | None = None, *, status_code: int, **kwargs: object) -> None:
        super().__init__(message, status_code=status_code, **kwargs)
        self.status_code = status_code


class SemanticError(KapacitorError):
    """The transport succeeded but the response carries an ``error`` field."""

    kind = ErrorKind.SEMANTIC
    message = "Kapacitor reported an error"

    def __str__(self) -> str:
        return f"Error from Kapacitor: {self.message}"


def assert_no_errors(document: object) -> object:
    """Raise SemanticError if *document* is a dict with a non-empty ``error``."""
    if isinstance(document, dict):
        error = document.get("error")
        if error:
            raise SemanticError(str(error))
    return document
