"""
Error taxonomy and error normalization.

Every failure in the pipeline is raised as an ``ArbitrageError`` subclass by the
clients or the selector, and converted exactly once into an ``ErrorRecord`` by
``normalize_error``.
"""

from dataclasses import dataclass
from typing import Any, Optional


class ArbitrageError(Exception):
    """Base class for all pipeline failures."""

    code = "ARBITRAGE_ERROR"

    def __init__(
        self,
        message: str,
        upstream_code: Optional[str] = None,
        upstream_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.upstream_code = upstream_code
        self.upstream_message = upstream_message


class UpstreamUnavailable(ArbitrageError):
    """Transport failure reaching an external API."""

    code = "UPSTREAM_UNAVAILABLE"


class UpstreamRejected(ArbitrageError):
    """External API responded but signalled a business-level failure."""

    code = "UPSTREAM_REJECTED"


class NoRateData(ArbitrageError):
    """Exchange rate response carried no usable rate."""

    code = "NO_RATE_DATA"


class NoAdvertisementFound(ArbitrageError):
    """No advertisement in the order book satisfied the selection policy."""

    code = "NO_ADVERTISEMENT_FOUND"


INTERNAL_ERROR_CODE = "INTERNAL_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured failure returned in place of an ArbitrageResult."""
    compact_text: str
    code: Optional[str] = None
    message: Optional[str] = None
    upstream_code: Optional[str] = None
    upstream_message: Optional[str] = None
    has_error: bool = True

    @property
    def extended_text(self) -> str:
        """Compact text with the upstream code/message appended, if any."""
        if self.upstream_code is None and self.upstream_message is None:
            return self.compact_text
        upstream = ": ".join(
            part for part in (self.upstream_code, self.upstream_message) if part
        )
        return f"{self.compact_text} (upstream {upstream})"

    def to_dict(self) -> dict[str, Any]:
        """JSON payload for the boundary layer."""
        return {
            "error": self.compact_text,
            "errorDetails": self.extended_text,
            "code": self.code,
            "message": self.message,
            "upstreamCode": self.upstream_code,
            "upstreamMessage": self.upstream_message,
            "hasError": self.has_error,
        }


def _compact(code: Optional[str], message: Optional[str]) -> str:
    if code and message:
        return f"{code}: {message}"
    return code or message or "Unknown error"


def normalize_error(error: Exception) -> ErrorRecord:
    """
    Convert any pipeline failure into an ErrorRecord.

    Args:
        error: The exception raised by a stage.

    Returns:
        ErrorRecord carrying the error code, message and upstream details.
    """
    if isinstance(error, ArbitrageError):
        return ErrorRecord(
            compact_text=_compact(error.code, error.message),
            code=error.code,
            message=error.message,
            upstream_code=error.upstream_code,
            upstream_message=error.upstream_message,
        )

    message = str(error) or type(error).__name__
    return ErrorRecord(
        compact_text=_compact(INTERNAL_ERROR_CODE, message),
        code=INTERNAL_ERROR_CODE,
        message=message,
    )
