"""Field definitions for Google Drive API responses."""

from __future__ import annotations

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "parents,"
    "size,"
    "createdTime,"
    "modifiedTime,"
    "webViewLink,"
    "iconLink"
)

LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"

ABOUT_FIELDS: str = "user,storageQuota"

SHARED_DRIVE_FIELDS: str = "id,name,capabilities"
