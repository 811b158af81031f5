"""Data model for Drive folders and files handed back to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from drivegateway.util.mime import is_folder
from drivegateway.util.time import parse_rfc3339, to_rfc3339

VIEW_LINK_TEMPLATE = "https://drive.google.com/file/d/{id}/view"


@dataclass(slots=True)
class DriveItem:
    """
    A resource owned by the Drive API.

    Notes:
        - `item_id` is always the identifier assigned by Drive; nothing in
          drivegateway invents identifiers.
    """

    item_id: str
    name: str
    mime_type: str
    parents: list[str] = field(default_factory=list)

    size: Optional[int] = None
    created_time: Optional[datetime] = None
    modified_time: Optional[datetime] = None
    web_view_link: Optional[str] = None
    icon_link: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return is_folder(self.mime_type)

    def to_dict(self) -> dict[str, Any]:
        """Render with Drive's own field names, skipping unknown values."""
        out: dict[str, Any] = {
            "id": self.item_id,
            "name": self.name,
            "mimeType": self.mime_type,
            "parents": list(self.parents),
        }
        if self.size is not None:
            out["size"] = str(self.size)
        if self.created_time is not None:
            out["createdTime"] = to_rfc3339(self.created_time)
        if self.modified_time is not None:
            out["modifiedTime"] = to_rfc3339(self.modified_time)
        if self.web_view_link:
            out["webViewLink"] = self.web_view_link
        if self.icon_link:
            out["iconLink"] = self.icon_link
        return out


@dataclass(slots=True)
class DriveFolder(DriveItem):
    """A Drive folder."""


@dataclass(slots=True)
class DriveFile(DriveItem):
    """A Drive file (anything that is not a folder)."""

    @property
    def view_link(self) -> str:
        """Caller-facing link; Drive's value when present, canonical otherwise."""
        return self.web_view_link or VIEW_LINK_TEMPLATE.format(id=self.item_id)


def item_from_dict(data: dict[str, Any]) -> DriveFolder | DriveFile:
    """Build a DriveFolder or DriveFile from a Drive v3 `files` resource."""
    item_id = data.get("id")
    if not isinstance(item_id, str) or not item_id:
        raise ValueError("Drive resource has no id")

    name = data.get("name")
    mime_type = data.get("mimeType")
    parents = data.get("parents")

    size = None
    if isinstance(data.get("size"), str) and data["size"].isdigit():
        size = int(data["size"])
    elif isinstance(data.get("size"), int):
        size = data["size"]

    kwargs: dict[str, Any] = dict(
        item_id=item_id,
        name=name if isinstance(name, str) else "",
        mime_type=mime_type if isinstance(mime_type, str) else "",
        parents=list(parents) if isinstance(parents, list) else [],
        size=size,
        created_time=_optional_time(data.get("createdTime")),
        modified_time=_optional_time(data.get("modifiedTime")),
        web_view_link=_optional_str(data.get("webViewLink")),
        icon_link=_optional_str(data.get("iconLink")),
    )
    if is_folder(kwargs["mime_type"]):
        return DriveFolder(**kwargs)
    return DriveFile(**kwargs)


def _optional_time(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return parse_rfc3339(value)
    except ValueError:
        return None


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None
