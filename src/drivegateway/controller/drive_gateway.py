"""Google Drive operations on behalf of HTTP callers."""

from __future__ import annotations

import io
import logging
from typing import Any, Callable, Optional

import httplib2
from google.auth import exceptions as google_exceptions
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from drivegateway.auth import (
    AccessToken,
    ServiceAccountTokenClient,
    ServiceCredential,
    TokenCache,
)
from drivegateway.errors import (
    AuthExchangeError,
    ConfigurationError,
    StorageAPIError,
    TransportError,
    ValidationError,
    http_error_to_info,
    map_http_error,
)
from drivegateway.models import (
    ChildListing,
    DeleteResult,
    DriveFile,
    DriveFolder,
    item_from_dict,
)
from drivegateway.util.mime import DEFAULT_BINARY_MIME, FOLDER_MIME

from .fields import ABOUT_FIELDS, FILE_FIELDS, LIST_FIELDS, SHARED_DRIVE_FIELDS

logger = logging.getLogger(__name__)

ROOT_FOLDER = "root"
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000
DEFAULT_ORDER_BY = "modifiedTime desc"

ServiceFactory = Callable[[AccessToken], Any]


def build_drive_service(token: AccessToken, *, timeout: Optional[float] = None) -> Any:
    """Build a Drive v3 resource that sends `token` and honours `timeout`."""
    # No expiry: TokenCache decides when a token is stale, and a bearer-only
    # Credentials object cannot refresh itself.
    creds = Credentials(token=token.token)
    http = AuthorizedHttp(creds, http=httplib2.Http(timeout=timeout))
    return build("drive", "v3", http=http, cache_discovery=False)


class DriveGateway:
    """
    Thin, stateless mediator in front of the Drive v3 API.

    Notes:
        - Every operation authenticates (or reuses a cached, unexpired token)
          and then issues exactly one storage call.
        - `supportsAllDrives` is applied to all requests consistently.
        - Nothing is retried; retry policy belongs to the caller.
    """

    def __init__(
        self,
        credential: ServiceCredential,
        *,
        shared_drive_id: Optional[str] = None,
        timeout: Optional[float] = None,
        cache_tokens: bool = True,
        token_client: Optional[ServiceAccountTokenClient] = None,
        service_factory: Optional[ServiceFactory] = None,
    ) -> None:
        self._credential = credential
        self._shared_drive_id = shared_drive_id or None
        self._token_client = token_client or ServiceAccountTokenClient(
            credential,
            timeout=timeout,
        )
        self._token_cache = TokenCache(self._token_client) if cache_tokens else None
        if service_factory is None:
            def service_factory(token: AccessToken) -> Any:
                return build_drive_service(token, timeout=timeout)
        self._service_factory = service_factory

    @property
    def credential(self) -> ServiceCredential:
        return self._credential

    @property
    def shared_drive_id(self) -> Optional[str]:
        return self._shared_drive_id

    # ----------------------------
    # Public API
    # ----------------------------
    def authenticate(self) -> AccessToken:
        """Run a fresh JWT-bearer exchange (never served from the cache)."""
        return self._token_client.authenticate()

    def create_folder(
        self,
        name: str,
        parent_id: str = ROOT_FOLDER,
        *,
        shared_drive_id: Optional[str] = None,
    ) -> DriveFolder:
        """
        Create a folder under `parent_id`.

        With `shared_drive_id` and the root sentinel as parent, the folder is
        created at the top of that shared drive.

        Calling this twice with the same arguments creates two folders; Drive
        does not deduplicate by name.
        """
        _require_text(name, "Folder name is required")
        parent = parent_id or ROOT_FOLDER
        if shared_drive_id and parent == ROOT_FOLDER:
            # The root folder of a shared drive has the drive's own id.
            parent = shared_drive_id

        body: dict[str, Any] = {
            "name": name,
            "mimeType": FOLDER_MIME,
            "parents": [parent],
        }

        service = self._service()
        req = service.files().create(
            body=body,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        )
        data = self._execute(req, "create_folder")
        folder = item_from_dict(data)
        if not isinstance(folder, DriveFolder):
            raise StorageAPIError(
                "Google Drive API error (create_folder): created resource is not a folder",
                status_code=200,
                body=str(data),
            )
        logger.info("Created folder %r (%s) under %s", folder.name, folder.item_id, parent)
        return folder

    def list_children(
        self,
        folder_id: str = ROOT_FOLDER,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        order_by: str = DEFAULT_ORDER_BY,
        shared_drive: bool = False,
        all_pages: bool = False,
    ) -> ChildListing:
        """
        List non-trashed children of `folder_id`.

        The returned listing is lazy: Drive is queried when it is iterated, and
        again on every new iteration.

        Raises:
            ValidationError: if page_size is outside 1..1000.
            ConfigurationError: if shared scoping is requested without a
                configured shared drive.
        """
        if not isinstance(page_size, int) or not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"pageSize must be an integer between 1 and {MAX_PAGE_SIZE}",
                details={"page_size": page_size},
            )
        if shared_drive and not self._shared_drive_id:
            raise ConfigurationError("Shared Drive ID not configured in environment variables")

        params: dict[str, Any] = {
            "q": _build_parent_query(folder_id or ROOT_FOLDER),
            "pageSize": page_size,
            "orderBy": order_by or DEFAULT_ORDER_BY,
            "fields": LIST_FIELDS,
            "supportsAllDrives": True,
            "includeItemsFromAllDrives": True,
        }
        if shared_drive:
            params["corpora"] = "drive"
            params["driveId"] = self._shared_drive_id
        else:
            params["corpora"] = "user"

        def fetch_page(page_token: Optional[str]) -> tuple[list[DriveFolder | DriveFile], Optional[str]]:
            service = self._service()
            req = service.files().list(pageToken=page_token, **params)
            data = self._execute(req, "list_children")
            items = [item_from_dict(f) for f in data.get("files", []) or []]
            next_token = data.get("nextPageToken")
            return items, next_token if isinstance(next_token, str) and next_token else None

        return ChildListing(fetch_page, all_pages=all_pages)

    def upload_file(
        self,
        folder_id: str,
        name: str,
        data: bytes,
        mime_type: Optional[str] = None,
    ) -> DriveFile:
        """
        Upload `data` as a new file in one multipart request.

        Metadata and bytes travel together; there is no resumable session.
        """
        _require_text(folder_id, "Folder ID is required")
        _require_text(name, "File name is required")
        if not isinstance(data, (bytes, bytearray)):
            raise ValidationError("File content must be bytes")

        use_mime = mime_type or DEFAULT_BINARY_MIME
        body = {"name": name, "parents": [folder_id], "mimeType": use_mime}
        media = MediaIoBaseUpload(io.BytesIO(bytes(data)), mimetype=use_mime, resumable=False)

        service = self._service()
        req = service.files().create(
            body=body,
            media_body=media,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        )
        result = self._execute(req, "upload_file")
        item = item_from_dict(result)
        if not isinstance(item, DriveFile):
            raise StorageAPIError(
                "Google Drive API error (upload_file): uploaded resource is a folder",
                status_code=200,
                body=str(result),
            )
        logger.info("Uploaded %r (%d bytes) as %s into %s", name, len(data), item.item_id, folder_id)
        return item

    def delete_resource(self, resource_id: str) -> DeleteResult:
        """
        Delete a file or folder (Drive removes a folder's subtree itself).

        A 404 from Drive means the resource is already gone and is reported as
        success with `already_absent=True`.
        """
        _require_text(resource_id, "Resource ID is required")

        service = self._service()
        req = service.files().delete(fileId=resource_id, supportsAllDrives=True)
        try:
            self._execute(req, "delete_resource")
        except StorageAPIError as exc:
            if not exc.is_not_found:
                raise
            logger.info("Resource %s already absent; delete treated as success", resource_id)
            return DeleteResult(resource_id=resource_id, already_absent=True)

        logger.info("Deleted resource %s", resource_id)
        return DeleteResult(resource_id=resource_id)

    def find_folder(self, parent_id: str, name: str) -> Optional[DriveFolder]:
        """Return a non-trashed folder called `name` directly under `parent_id`, if any."""
        _require_text(parent_id, "Parent folder ID is required")
        _require_text(name, "Folder name is required")

        q = (
            f"{_build_parent_query(parent_id)}"
            f" and mimeType='{FOLDER_MIME}' and name='{_escape_query(name)}'"
        )
        service = self._service()
        req = service.files().list(
            q=q,
            pageSize=1,
            fields=LIST_FIELDS,
            supportsAllDrives=True,
            includeItemsFromAllDrives=True,
        )
        data = self._execute(req, "find_folder")
        for raw in data.get("files", []) or []:
            item = item_from_dict(raw)
            if isinstance(item, DriveFolder):
                return item
        return None

    def about(self) -> dict[str, Any]:
        """Return the service account's Drive user and storage quota."""
        service = self._service()
        req = service.about().get(fields=ABOUT_FIELDS)
        return self._execute(req, "about")

    def get_shared_drive(self, drive_id: str) -> dict[str, Any]:
        """Return id, name and capabilities of a shared drive."""
        _require_text(drive_id, "Shared drive ID is required")
        service = self._service()
        req = service.drives().get(driveId=drive_id, fields=SHARED_DRIVE_FIELDS)
        return self._execute(req, "get_shared_drive")

    # ----------------------------
    # Internals
    # ----------------------------
    def _access_token(self) -> AccessToken:
        if self._token_cache is not None:
            return self._token_cache.get()
        return self._token_client.authenticate()

    def _service(self) -> Any:
        return self._service_factory(self._access_token())

    def _execute(self, req: Any, operation: str) -> Any:
        try:
            result = req.execute()
        except HttpError as exc:
            mapped = map_http_error(http_error_to_info(exc), operation=operation, cause=exc)
            if not mapped.is_not_found:
                logger.warning("%s", mapped)
            raise mapped from exc
        except google_exceptions.RefreshError as exc:
            # Raised by AuthorizedHttp when Drive answers 401 for the bearer token.
            if self._token_cache is not None:
                self._token_cache.invalidate()
            logger.warning("Access token rejected during %s: %s", operation, exc)
            raise AuthExchangeError(
                f"Google Drive rejected the access token ({operation}): {exc}",
                details={"operation": operation},
                cause=exc,
            ) from exc
        except (httplib2.HttpLib2Error, OSError, TimeoutError) as exc:
            raise TransportError(
                f"Network error during {operation}: {exc}",
                details={"operation": operation},
                cause=exc,
            ) from exc
        return result if result is not None else {}


def _require_text(value: Any, message: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)


def _escape_query(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _build_parent_query(parent_id: str) -> str:
    return f"'{_escape_query(parent_id)}' in parents and trashed=false"
