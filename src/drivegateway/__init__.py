"""drivegateway public API."""

from __future__ import annotations

__version__ = "1.0.0"

from drivegateway.auth import (  # noqa: E402
    AccessToken,
    ServiceAccountTokenClient,
    ServiceCredential,
    TokenCache,
)
from drivegateway.config import GatewaySettings  # noqa: E402
from drivegateway.controller import DriveGateway  # noqa: E402
from drivegateway.errors import (  # noqa: E402
    AuthExchangeError,
    ConfigurationError,
    DriveGatewayError,
    HttpErrorInfo,
    StorageAPIError,
    TransportError,
    ValidationError,
    map_http_error,
)
from drivegateway.models import (  # noqa: E402
    ChildListing,
    CourseStructure,
    DeleteResult,
    DriveFile,
    DriveFolder,
    DriveItem,
    TopicFolder,
)
from drivegateway.provisioning import CourseFolderProvisioner  # noqa: E402

__all__ = [
    "__version__",
    # High-level
    "DriveGateway",
    "CourseFolderProvisioner",
    "GatewaySettings",
    # Auth
    "ServiceCredential",
    "AccessToken",
    "ServiceAccountTokenClient",
    "TokenCache",
    # Models
    "DriveItem",
    "DriveFolder",
    "DriveFile",
    "ChildListing",
    "DeleteResult",
    "CourseStructure",
    "TopicFolder",
    # Errors
    "DriveGatewayError",
    "ConfigurationError",
    "AuthExchangeError",
    "StorageAPIError",
    "TransportError",
    "ValidationError",
    "HttpErrorInfo",
    "map_http_error",
]
