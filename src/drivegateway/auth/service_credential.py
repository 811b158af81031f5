"""Service principal credential for drivegateway."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from drivegateway.errors import ConfigurationError

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
DEFAULT_SCOPE = "https://www.googleapis.com/auth/drive"


@dataclass(slots=True, frozen=True)
class ServiceCredential:
    """
    Identity used to sign JWT-bearer assertions.

    Loaded once at startup and never mutated. Construction does not validate;
    `validate()` is called by the token client right before signing so that a
    process with missing key material still starts and reports the problem per
    request.
    """

    issuer: str
    private_key: str
    key_id: str = ""
    client_id: str = ""
    token_uri: str = DEFAULT_TOKEN_URI
    auth_uri: str = DEFAULT_AUTH_URI
    scope: str = DEFAULT_SCOPE

    def __post_init__(self) -> None:
        # PEM keys copied into env vars usually carry literal "\n" sequences.
        if "\\n" in self.private_key:
            object.__setattr__(self, "private_key", self.private_key.replace("\\n", "\n"))

    def __repr__(self) -> str:
        return (
            f"ServiceCredential(issuer={self.issuer!r}, key_id={self.key_id!r}, "
            f"has_private_key={self.has_private_key}, token_uri={self.token_uri!r})"
        )

    @property
    def has_private_key(self) -> bool:
        return bool(self.private_key.strip())

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: if the key, issuer or token endpoint is missing.
        """
        missing = []
        if not self.has_private_key:
            missing.append("private key")
        if not self.issuer.strip():
            missing.append("client email")
        if not self.token_uri.strip():
            missing.append("token URI")
        if missing:
            raise ConfigurationError(
                "Missing Google service account credentials: " + ", ".join(missing),
                details={"missing": missing},
            )

    @classmethod
    def from_service_account_info(
        cls,
        info: Mapping[str, Any],
        *,
        scope: str = DEFAULT_SCOPE,
    ) -> "ServiceCredential":
        """Build from a Google service-account JSON document."""
        if not isinstance(info, Mapping):
            raise ConfigurationError("Service account info must be a JSON object")

        def _get(key: str, default: str = "") -> str:
            value = info.get(key)
            return value if isinstance(value, str) and value else default

        return cls(
            issuer=_get("client_email"),
            private_key=_get("private_key"),
            key_id=_get("private_key_id"),
            client_id=_get("client_id"),
            token_uri=_get("token_uri", DEFAULT_TOKEN_URI),
            auth_uri=_get("auth_uri", DEFAULT_AUTH_URI),
            scope=scope,
        )
