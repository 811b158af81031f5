"""Public model exports for drivegateway."""

from __future__ import annotations

from .drive_item import DriveFile, DriveFolder, DriveItem, item_from_dict
from .listing import ChildListing
from .results import CourseStructure, DeleteResult, TopicFolder

__all__ = [
    "DriveItem",
    "DriveFolder",
    "DriveFile",
    "item_from_dict",
    "ChildListing",
    "DeleteResult",
    "CourseStructure",
    "TopicFolder",
]
