"""
Domain errors raised by sources, the failover orchestrator and the analysis pipeline.
"""

from typing import Optional


class CryptoscopeError(Exception):
    """Base exception for all cryptoscope errors."""


class SourceError(CryptoscopeError):
    """A single upstream source failed (network, non-2xx, malformed payload)."""

    def __init__(self, source: str, message: str, status_code: Optional[int] = None):
        self.source = source
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{source}] {message}")


class ParseError(SourceError):
    """A source answered but its payload could not be converted to canonical records."""


class UnsupportedRequestError(SourceError):
    """The source cannot serve this kind of request (e.g. unknown trading pair)."""


class AllSourcesFailedError(CryptoscopeError):
    """
    Every registered source failed for one logical request.

    The last underlying error is available as ``last_error`` and as ``__cause__``.
    """

    def __init__(
        self,
        request_kind: str,
        attempted: list[str],
        last_error: Optional[Exception] = None,
    ):
        self.request_kind = request_kind
        self.attempted = attempted
        self.last_error = last_error
        detail = str(last_error) if last_error else "Unknown error"
        super().__init__(
            f"All sources failed for {request_kind} "
            f"({len(attempted)} tried). Last error: {detail}"
        )


class AnalysisError(CryptoscopeError):
    """Indicator computation or enrichment failed for a single coin."""

    def __init__(self, coin_id: str, message: str):
        self.coin_id = coin_id
        self.message = message
        super().__init__(f"Analysis failed for {coin_id}: {message}")
