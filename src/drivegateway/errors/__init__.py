"""Public error exports for drivegateway."""

from __future__ import annotations

from .exceptions import (
    AuthExchangeError,
    ConfigurationError,
    DriveGatewayError,
    HttpErrorInfo,
    StorageAPIError,
    TransportError,
    ValidationError,
    http_error_to_info,
    map_http_error,
)

__all__ = [
    "DriveGatewayError",
    "ConfigurationError",
    "AuthExchangeError",
    "StorageAPIError",
    "TransportError",
    "ValidationError",
    "HttpErrorInfo",
    "http_error_to_info",
    "map_http_error",
]
