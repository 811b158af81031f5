"""Public auth exports for drivegateway."""

from __future__ import annotations

from .service_credential import ServiceCredential
from .token_client import AccessToken, ServiceAccountTokenClient, TokenCache

__all__ = ["ServiceCredential", "AccessToken", "ServiceAccountTokenClient", "TokenCache"]
