"""Request schemas for the HTTP surface.

Each schema validates its payload up front and raises ValidationError for a
missing or malformed field, so no remote call is made for a request that
could never succeed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from drivegateway.controller.drive_gateway import (
    DEFAULT_ORDER_BY,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ROOT_FOLDER,
)
from drivegateway.errors import ValidationError
from drivegateway.util.mime import resolve_upload_mime


def _as_object(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _required(payload: Mapping[str, Any], key: str, message: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message, details={"field": key})
    return value.strip()


def _optional(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", details={"field": key})
    return value.strip() or None


@dataclass(frozen=True)
class ListQuery:
    folder_id: str = ROOT_FOLDER
    page_size: int = DEFAULT_PAGE_SIZE
    order_by: str = DEFAULT_ORDER_BY
    is_shared_drive: bool = False

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "ListQuery":
        raw_size = (args.get("pageSize") or "").strip()
        page_size = DEFAULT_PAGE_SIZE
        if raw_size:
            if not raw_size.isdigit() or not 1 <= int(raw_size) <= MAX_PAGE_SIZE:
                raise ValidationError(
                    f"pageSize must be an integer between 1 and {MAX_PAGE_SIZE}",
                    details={"field": "pageSize"},
                )
            page_size = int(raw_size)

        return cls(
            folder_id=(args.get("folderId") or "").strip() or ROOT_FOLDER,
            page_size=page_size,
            order_by=(args.get("orderBy") or "").strip() or DEFAULT_ORDER_BY,
            is_shared_drive=(args.get("isSharedDrive") or "").strip().lower() == "true",
        )


@dataclass(frozen=True)
class CreateFolderRequest:
    folder_name: str
    parent_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateFolderRequest":
        body = _as_object(payload)
        return cls(
            folder_name=_required(body, "folderName", "Folder name is required"),
            parent_id=_optional(body, "parentId"),
        )


@dataclass(frozen=True)
class CourseStructureRequest:
    company_slug: str
    course_title: str

    @classmethod
    def from_payload(cls, payload: Any) -> "CourseStructureRequest":
        body = _as_object(payload)
        message = "Company slug and course title are required"
        return cls(
            company_slug=_required(body, "companySlug", message),
            course_title=_required(body, "courseTitle", message),
        )


@dataclass(frozen=True)
class TopicFolderRequest:
    parent_folder_id: str
    topic_name: str
    topic_type: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TopicFolderRequest":
        body = _as_object(payload)
        message = "Parent folder ID and topic name are required"
        return cls(
            parent_folder_id=_required(body, "parentFolderId", message),
            topic_name=_required(body, "topicName", message),
            topic_type=_optional(body, "topicType"),
        )


@dataclass(frozen=True)
class DeleteFileRequest:
    file_id: str
    file_name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "DeleteFileRequest":
        body = _as_object(payload)
        return cls(
            file_id=_required(body, "fileId", "File ID is required"),
            file_name=_optional(body, "fileName"),
        )


@dataclass(frozen=True)
class DeleteFolderRequest:
    folder_id: str
    project_title: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "DeleteFolderRequest":
        body = _as_object(payload)
        return cls(
            folder_id=_required(body, "folderId", "Folder ID is required"),
            project_title=_optional(body, "projectTitle"),
        )


@dataclass(frozen=True)
class UploadForm:
    folder_id: str
    file_name: str
    mime_type: str
    file: Any

    @classmethod
    def from_request(cls, form: Mapping[str, str], files: Mapping[str, Any]) -> "UploadForm":
        upload = files.get("file")
        if upload is None:
            raise ValidationError("No file provided", details={"field": "file"})

        folder_id = (form.get("folderId") or "").strip()
        if not folder_id:
            raise ValidationError("Folder ID is required", details={"field": "folderId"})

        file_name = (form.get("fileName") or "").strip() or (upload.filename or "").strip()
        if not file_name:
            raise ValidationError("File name is required", details={"field": "fileName"})

        return cls(
            folder_id=folder_id,
            file_name=file_name,
            mime_type=resolve_upload_mime(file_name, upload.mimetype),
            file=upload,
        )
