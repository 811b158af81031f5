"""JWT-bearer token exchange for drivegateway."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional
from urllib.parse import urlencode

from google.auth import crypt, jwt
from google.auth import exceptions as google_exceptions
from google.auth.transport.requests import Request

from drivegateway.errors import AuthExchangeError, ConfigurationError, TransportError
from drivegateway.util.time import from_epoch, now_utc

from .service_credential import ServiceCredential

logger = logging.getLogger(__name__)

GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
TOKEN_LIFETIME_SECS = 3600
# Stay clear of google-auth's own refresh threshold (225 s before expiry).
CACHE_MARGIN_SECS = 300.0


@dataclass(slots=True, frozen=True)
class AccessToken:
    """Opaque bearer token and the window it is valid for."""

    token: str
    issued_at: datetime
    expiry: datetime

    def __repr__(self) -> str:
        return f"AccessToken(issued_at={self.issued_at!r}, expiry={self.expiry!r})"

    @property
    def lifetime(self) -> timedelta:
        return self.expiry - self.issued_at

    def expires_within(self, seconds: float, now: datetime) -> bool:
        """True if the token is expired or will expire in the next `seconds`."""
        return now + timedelta(seconds=seconds) >= self.expiry


class ServiceAccountTokenClient:
    """Sign an assertion with the service credential and trade it for a token."""

    def __init__(
        self,
        credential: ServiceCredential,
        *,
        request: Optional[Callable[..., Any]] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._credential = credential
        self._request = request
        self._timeout = timeout
        self._clock = clock

    @property
    def credential(self) -> ServiceCredential:
        return self._credential

    def authenticate(self) -> AccessToken:
        """
        Exchange a freshly signed assertion for an access token.

        Returns:
            AccessToken valid for exactly one hour from issuance.

        Raises:
            ConfigurationError: credential missing or key unusable (no network call).
            AuthExchangeError: token endpoint answered non-2xx or without a token.
            TransportError: the token endpoint could not be reached.
        """
        self._credential.validate()

        issued_at = int(self._clock().timestamp())
        assertion = self.build_assertion(issued_at)

        body = urlencode({"grant_type": GRANT_TYPE, "assertion": assertion})
        response = self._post(body)

        status = getattr(response, "status", 0)
        raw = getattr(response, "data", b"") or b""
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)

        if not 200 <= status < 300:
            logger.error("Token exchange failed with status %s", status)
            raise AuthExchangeError(
                f"Token exchange failed ({status}): {text}",
                details={"status_code": status, "body": text},
            )

        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise AuthExchangeError(
                "Token endpoint returned a non-JSON body",
                details={"status_code": status, "body": text},
                cause=exc,
            ) from exc

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthExchangeError(
                f"Token endpoint response has no access_token: {text}",
                details={"status_code": status, "body": text},
            )

        logger.info("Obtained access token for %s", self._credential.issuer)
        return AccessToken(
            token=token,
            issued_at=from_epoch(issued_at),
            expiry=from_epoch(issued_at + TOKEN_LIFETIME_SECS),
        )

    def build_assertion(self, issued_at: int) -> str:
        """Return the RS256-signed assertion for `issued_at` (POSIX seconds)."""
        cred = self._credential
        try:
            signer = crypt.RSASigner.from_string(cred.private_key, cred.key_id or None)
        except (ValueError, TypeError) as exc:
            raise ConfigurationError(
                "Service account private key could not be loaded",
                details={"issuer": cred.issuer},
                cause=exc,
            ) from exc

        payload = {
            "iss": cred.issuer,
            "scope": cred.scope,
            "aud": cred.token_uri,
            "iat": issued_at,
            "exp": issued_at + TOKEN_LIFETIME_SECS,
        }
        assertion = jwt.encode(signer, payload)
        return assertion.decode("ascii") if isinstance(assertion, bytes) else assertion

    def _post(self, body: str) -> Any:
        request = self._request
        if request is None:
            request = Request()

        kwargs: dict[str, Any] = {}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            return request(
                url=self._credential.token_uri,
                method="POST",
                body=body,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                **kwargs,
            )
        except google_exceptions.TransportError as exc:
            raise TransportError(
                "Token endpoint unreachable",
                details={"token_uri": self._credential.token_uri},
                cause=exc,
            ) from exc


class TokenCache:
    """
    Single-slot cache in front of a token client.

    A cached token is handed out only while it is more than `margin_sec` away
    from expiry. Refreshes happen under the lock, so concurrent callers wait
    for one exchange instead of racing.
    """

    def __init__(
        self,
        client: ServiceAccountTokenClient,
        *,
        margin_sec: float = CACHE_MARGIN_SECS,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._client = client
        self._margin_sec = margin_sec
        self._clock = clock
        self._lock = threading.Lock()
        self._token: Optional[AccessToken] = None

    def get(self) -> AccessToken:
        with self._lock:
            current = self._token
            if current is not None and not current.expires_within(self._margin_sec, self._clock()):
                return current
            self._token = None
            fresh = self._client.authenticate()
            self._token = fresh
            return fresh

    def invalidate(self) -> None:
        with self._lock:
            self._token = None
