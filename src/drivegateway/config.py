"""Process settings for drivegateway, read once from the environment."""

from __future__ import annotations

import base64
import binascii
import json
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from drivegateway.auth import ServiceCredential
from drivegateway.auth.service_credential import (
    DEFAULT_AUTH_URI,
    DEFAULT_SCOPE,
    DEFAULT_TOKEN_URI,
)
from drivegateway.errors import ConfigurationError
from drivegateway.provisioning import (
    DEFAULT_COURSES_FOLDER_NAME,
    DEFAULT_PROJECTS_FOLDER_NAME,
)

DEFAULT_TIMEOUT_SEC = 30.0
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class GatewaySettings:
    """Everything the gateway needs from its host process."""

    credential: ServiceCredential
    shared_drive_id: str = ""
    timeout_sec: float = DEFAULT_TIMEOUT_SEC
    cache_tokens: bool = True
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    courses_folder_name: str = DEFAULT_COURSES_FOLDER_NAME
    projects_folder_name: str = DEFAULT_PROJECTS_FOLDER_NAME
    log_level: str = "INFO"

    @property
    def root_folder_id(self) -> str:
        """Parent of newly provisioned course containers."""
        return self.shared_drive_id or "root"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewaySettings":
        """
        Read settings from `environ` (defaults to os.environ).

        GOOGLE_SERVICE_ACCOUNT_JSON, raw or base64, takes precedence over the
        individual GOOGLE_* credential variables.

        Raises:
            ConfigurationError: if a value is present but cannot be parsed.
                Missing key material is not an error here.
        """
        env = os.environ if environ is None else environ
        scope = _get(env, "GOOGLE_DRIVE_SCOPE", DEFAULT_SCOPE)

        raw_json = _get(env, "GOOGLE_SERVICE_ACCOUNT_JSON")
        if raw_json:
            credential = ServiceCredential.from_service_account_info(
                _decode_service_account_json(raw_json),
                scope=scope,
            )
        else:
            credential = ServiceCredential(
                issuer=_get(env, "GOOGLE_CLIENT_EMAIL"),
                private_key=_get(env, "GOOGLE_PRIVATE_KEY"),
                key_id=_get(env, "GOOGLE_PRIVATE_KEY_ID"),
                client_id=_get(env, "GOOGLE_CLIENT_ID"),
                token_uri=_get(env, "GOOGLE_TOKEN_URI", DEFAULT_TOKEN_URI),
                auth_uri=_get(env, "GOOGLE_AUTH_URI", DEFAULT_AUTH_URI),
                scope=scope,
            )

        return cls(
            credential=credential,
            shared_drive_id=_get(env, "GOOGLE_DRIVE_FOLDER_ID"),
            timeout_sec=_get_float(env, "DRIVE_GATEWAY_TIMEOUT", DEFAULT_TIMEOUT_SEC),
            cache_tokens=_get_bool(env, "DRIVE_GATEWAY_TOKEN_CACHE", True),
            max_upload_bytes=_get_int(env, "DRIVE_GATEWAY_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
            courses_folder_name=_get(
                env, "DRIVE_GATEWAY_COURSES_FOLDER_NAME", DEFAULT_COURSES_FOLDER_NAME
            ),
            projects_folder_name=_get(
                env, "DRIVE_GATEWAY_PROJECTS_FOLDER_NAME", DEFAULT_PROJECTS_FOLDER_NAME
            ),
            log_level=_get(env, "LOG_LEVEL", "INFO").upper(),
        )


def _get(env: Mapping[str, str], key: str, default: str = "") -> str:
    value = env.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = _get(env, key)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number", details={key: raw}, cause=exc) from exc
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive", details={key: raw})
    return value


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = _get(env, key)
    if not raw:
        return default
    if not raw.isdigit() or int(raw) <= 0:
        raise ConfigurationError(f"{key} must be a positive integer", details={key: raw})
    return int(raw)


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = _get(env, key).lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(f"{key} must be true or false", details={key: raw})


def _decode_service_account_json(raw: str) -> dict:
    text = raw
    if not raw.lstrip().startswith("{"):
        try:
            text = base64.b64decode(raw, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                "GOOGLE_SERVICE_ACCOUNT_JSON is neither JSON nor base64-encoded JSON",
                cause=exc,
            ) from exc
    try:
        info = json.loads(text)
    except ValueError as exc:
        raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_JSON is not valid JSON", cause=exc) from exc
    if not isinstance(info, dict):
        raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_JSON must be a JSON object")
    return info
