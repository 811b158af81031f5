"""HTTP surface of drivegateway."""

from __future__ import annotations

from .app import configure_logging, create_app

__all__ = ["create_app", "configure_logging"]
