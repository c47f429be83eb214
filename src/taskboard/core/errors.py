# src/taskboard/core/errors.py

from __future__ import annotations


class TaskboardError(Exception):
    """Base class for errors raised by the data-access layer."""


class ConfigurationError(TaskboardError):
    """
    Setup defect detected before any network attempt
    (e.g. proxy mode selected but no proxy address configured).
    """


class TransportError(TaskboardError):
    """
    A remote read failed: unreachable host, non-2xx status or an unparseable body.

    Carries the original request coordinates and a truncated response body
    so the failure can be diagnosed without re-issuing the request.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status = status
        self.body = body


def friendly_error_message(err: Exception) -> str:
    """Short user-facing text for a data-layer failure."""
    if isinstance(err, ConfigurationError):
        return f"Setup problem: {err}"
    if isinstance(err, TransportError):
        if err.status is None:
            return f"Could not reach the site ({err.method} {err.url}). Try again later."
        return f"Site returned {err.status}. Try again later."
    msg = str(err).strip()
    return msg or "Unexpected error."
