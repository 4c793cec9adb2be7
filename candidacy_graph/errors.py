"""Error taxonomy for the candidacy graph.

- ValidationError: malformed input, reported immediately, never retried
- StoreUnavailable: ArangoDB unreachable or still starting, safe to retry
- StoreQueryError: the server ran the request and rejected it
"""

from typing import Optional


class CandidacyGraphError(Exception):
    """Base class for every error raised by the candidacy graph core."""


class ValidationError(CandidacyGraphError):
    """Raised when rebuild or query input is malformed."""


class StoreUnavailable(CandidacyGraphError):
    """Raised when the graph store cannot be reached."""


class StoreQueryError(CandidacyGraphError):
    """Raised when the graph store reports an error for a query."""

    def __init__(self, message: str, query_name: Optional[str] = None):
        super().__init__(message)
        self.query_name = query_name
