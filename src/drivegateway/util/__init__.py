from .mime import DEFAULT_BINARY_MIME, FOLDER_MIME, is_folder, resolve_upload_mime
from .time import from_epoch, now_utc, parse_rfc3339, to_rfc3339

__all__ = [
    "FOLDER_MIME",
    "DEFAULT_BINARY_MIME",
    "is_folder",
    "resolve_upload_mime",
    "now_utc",
    "from_epoch",
    "parse_rfc3339",
    "to_rfc3339",
]
