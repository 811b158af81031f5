from __future__ import annotations

import mimetypes
from typing import Optional

FOLDER_MIME: str = "application/vnd.google-apps.folder"
DEFAULT_BINARY_MIME: str = "application/octet-stream"


def is_folder(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME


def resolve_upload_mime(name: str, declared: Optional[str] = None) -> str:
    """
    Pick the MIME type sent with an upload.

    A declared type wins unless it is empty or the generic binary type; then
    the extension of `name` is consulted before falling back to
    application/octet-stream.
    """
    if declared and declared.strip() and declared != DEFAULT_BINARY_MIME:
        return declared.strip()
    guessed, _ = mimetypes.guess_type(name or "")
    return guessed or DEFAULT_BINARY_MIME
