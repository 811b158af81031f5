"""Drive controller exports for drivegateway."""

from __future__ import annotations

from .drive_gateway import DriveGateway, build_drive_service

__all__ = ["DriveGateway", "build_drive_service"]
