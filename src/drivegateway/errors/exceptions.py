"""Exception hierarchy and HTTP error mapping for drivegateway."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional


class DriveGatewayError(Exception):
    """
    Base exception for drivegateway.

    Attributes:
        details: Optional structured information (e.g., HTTP status, reason).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class ConfigurationError(DriveGatewayError):
    """Raised when the service credential or settings are missing or malformed."""


class AuthExchangeError(DriveGatewayError):
    """Raised when the token endpoint rejects the signed assertion."""


class TransportError(DriveGatewayError):
    """Raised when network/timeout issues prevent the request."""


class ValidationError(DriveGatewayError):
    """Raised when a request is missing a required field or carries a bad value."""


class StorageAPIError(DriveGatewayError):
    """Raised for any non-2xx answer of the Drive API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str = "",
        reason: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        merged = {"status_code": status_code, "reason": reason}
        if details:
            merged.update(details)
        super().__init__(message, details=merged, cause=cause)
        self.status_code = status_code
        self.body = body
        self.reason = reason

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to drivegateway exceptions."""

    status_code: int
    body: str = ""
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    operation: str = "request",
    cause: Optional[BaseException] = None,
) -> StorageAPIError:
    """
    Map a Drive HTTP error to a StorageAPIError.

    The message always embeds the upstream status and body so callers see what
    Drive answered, e.g. ``Google Drive API error (create_folder): 403 - {...}``.
    """
    body = info.body or info.message or ""
    message = f"Google Drive API error ({operation}): {info.status_code}"
    if body:
        message = f"{message} - {body}"

    return StorageAPIError(
        message,
        status_code=info.status_code,
        body=body,
        reason=info.reason,
        details=info.details,
        cause=cause,
    )


def http_error_to_info(exc: Any) -> HttpErrorInfo:
    """Extract status, reason and body from a googleapiclient ``HttpError``."""
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    body = ""
    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        body = content.decode("utf-8", errors="replace")
        try:
            payload = json.loads(body)
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            err = payload["error"]
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if isinstance(status_code, str) and status_code.isdigit():
        status_code = int(status_code)
    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        body=body,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
