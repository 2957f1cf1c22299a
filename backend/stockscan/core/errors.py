"""Lookup error taxonomy.

Every failure terminates only the lookup that raised it. Each error knows
the HTTP status it maps to and the JSON body returned to the scanner UI,
including the raw backend payload where one exists so operators can triage
without access to the SAP logs.
"""

import errno
from typing import Any, Dict, Optional


class StockLookupError(Exception):
    """Base class for all stock lookup failures."""

    status_code = 500

    def __init__(self, message: str, state: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.state = state

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class BarcodeValidationError(StockLookupError):
    """Malformed input, e.g. a missing barcode."""

    status_code = 400


class ConfigurationError(StockLookupError):
    """The SAP backend is not configured. Not retried."""

    status_code = 500


class ProductNotFoundError(StockLookupError):
    """The backend answered with an empty result set for the barcode."""

    status_code = 404

    def __init__(self, message: str, details: Any = None, state: Optional[str] = None):
        super().__init__(message, state=state)
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details}


class UpstreamTransportError(StockLookupError):
    """Non-success status or undecodable body from either hop."""

    status_code = 502

    def __init__(
        self,
        message: str,
        details: Any = None,
        upstream_status: Optional[int] = None,
        state: Optional[str] = None,
    ):
        super().__init__(message, state=state)
        self.details = details
        self.upstream_status = upstream_status

    def to_body(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "details": self.details,
            "status": self.upstream_status,
        }


class UpstreamNetworkError(UpstreamTransportError):
    """DNS, TLS, connect or timeout failure before any response arrived."""

    def __init__(self, message: str, exc: BaseException, state: Optional[str] = None):
        super().__init__(message, details=describe_exception(exc), state=state)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details}


class UpstreamShapeError(StockLookupError):
    """Successful status, but no known envelope carries the expected key."""

    status_code = 502

    def __init__(self, message: str, details: Any = None, raw: Any = None, state: Optional[str] = None):
        super().__init__(message, state=state)
        self.details = details
        self.raw = raw

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details, "raw": self.raw}


def _error_code(exc: BaseException) -> Optional[str]:
    code = getattr(exc, "errno", None)
    if code is not None:
        return errno.errorcode.get(code, str(code))
    return type(exc).__name__


def describe_exception(exc: BaseException) -> Dict[str, Any]:
    """Flatten a network exception and its cause into a JSON-safe dict."""
    cause = exc.__cause__ or exc.__context__
    return {
        "message": str(exc) or type(exc).__name__,
        "code": _error_code(exc),
        "cause": str(cause) if cause is not None else None,
        "causeCode": _error_code(cause) if cause is not None else None,
    }
