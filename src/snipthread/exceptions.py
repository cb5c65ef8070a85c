"""Custom exceptions for SnipThread."""

from __future__ import annotations


class SnipThreadError(Exception):
    """Base exception for all SnipThread errors."""


class ConfigError(SnipThreadError):
    """Configuration-related errors."""


class GraphError(SnipThreadError):
    """Snippet graph errors."""


class StoreUnavailable(GraphError):
    """The graph store cannot serve any query."""


class QueryFailed(GraphError):
    """A single store query failed."""


class FocusNotFound(SnipThreadError):
    """Raised when the requested focus snippet is absent from the store."""

    def __init__(self, snippet_id: int):
        super().__init__(f"Snippet {snippet_id} not found")
        self.snippet_id = snippet_id


class ResolverFailure(SnipThreadError):
    """One or more relation axes failed while building a thread context.

    ``failures`` maps the axis name (upstream, downstream, lateral) to the
    error it raised.
    """

    def __init__(self, failures: dict[str, BaseException], message: str = ""):
        axes = ", ".join(sorted(failures))
        super().__init__(message or f"Thread context build failed on: {axes}")
        self.failures = failures


class BuildTimeout(ResolverFailure):
    """The build deadline expired before every axis finished."""

    def __init__(self, pending: list[str], timeout: float):
        super().__init__(
            {axis: TimeoutError(f"{axis} did not finish in {timeout}s") for axis in pending},
            f"Thread context build timed out after {timeout}s "
            f"(pending: {', '.join(sorted(pending))})",
        )
        self.pending = sorted(pending)
        self.timeout = timeout
