"""HTTP endpoints of the gateway."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from drivegateway import __version__
from drivegateway.config import GatewaySettings
from drivegateway.controller import DriveGateway
from drivegateway.errors import StorageAPIError
from drivegateway.provisioning import CourseFolderProvisioner
from drivegateway.util.time import now_utc, to_rfc3339

from .schemas import (
    CourseStructureRequest,
    CreateFolderRequest,
    DeleteFileRequest,
    DeleteFolderRequest,
    ListQuery,
    TopicFolderRequest,
    UploadForm,
)

logger = logging.getLogger(__name__)

drive_bp = Blueprint("drive", __name__)

EXTENSION_KEY = "drivegateway"

ENDPOINTS = [
    "/health",
    "/list",
    "/create-folder",
    "/create-course-structure",
    "/create-topic-folder",
    "/simple-upload",
    "/delete-file",
    "/delete-project-folder",
    "/validate-service-account",
]


@dataclass(frozen=True)
class GatewayContext:
    settings: GatewaySettings
    gateway: DriveGateway
    provisioner: CourseFolderProvisioner


def _context() -> GatewayContext:
    return current_app.extensions[EXTENSION_KEY]


def _ok(**fields: Any):
    return jsonify({"success": True, **fields}), 200


def _json_body() -> Any:
    return request.get_json(silent=True)


@drive_bp.route("/", methods=["GET"])
@drive_bp.route("/health", methods=["GET"])
def health():
    return jsonify({
        "status": "healthy",
        "timestamp": to_rfc3339(now_utc()),
        "version": __version__,
        "endpoints": ENDPOINTS,
    }), 200


@drive_bp.route("/list", methods=["GET"])
def list_files():
    query = ListQuery.from_args(request.args)
    listing = _context().gateway.list_children(
        query.folder_id,
        page_size=query.page_size,
        order_by=query.order_by,
        shared_drive=query.is_shared_drive,
    )
    files = [item.to_dict() for item in listing]
    return _ok(files=files, total=len(files))


@drive_bp.route("/create-folder", methods=["POST"])
def create_folder():
    req = CreateFolderRequest.from_payload(_json_body())
    ctx = _context()
    # Without a parent the folder goes to the configured shared drive, if any.
    folder = ctx.gateway.create_folder(
        req.folder_name,
        req.parent_id or ctx.settings.root_folder_id,
        shared_drive_id=ctx.settings.shared_drive_id or None,
    )
    return _ok(folder=folder.to_dict())


@drive_bp.route("/create-course-structure", methods=["POST"])
def create_course_structure():
    req = CourseStructureRequest.from_payload(_json_body())
    structure = _context().provisioner.create_course_structure(req.company_slug, req.course_title)
    return _ok(
        courseFolderId=structure.courses.item_id,
        folderIds=structure.folder_ids(),
        courseFolderName=structure.course_folder_name,
    )


@drive_bp.route("/create-topic-folder", methods=["POST"])
def create_topic_folder():
    req = TopicFolderRequest.from_payload(_json_body())
    topic = _context().provisioner.create_topic_folder(
        req.parent_folder_id,
        req.topic_name,
        req.topic_type,
    )
    return _ok(
        topicFolderId=topic.folder.item_id,
        folderName=topic.folder.name,
        isExisting=topic.is_existing,
    )


@drive_bp.route("/simple-upload", methods=["POST"])
def simple_upload():
    form = UploadForm.from_request(request.form, request.files)
    data = form.file.read()
    uploaded = _context().gateway.upload_file(form.folder_id, form.file_name, data, form.mime_type)
    return _ok(
        fileId=uploaded.item_id,
        fileName=uploaded.name,
        webViewLink=uploaded.view_link,
    )


@drive_bp.route("/delete-file", methods=["DELETE"])
def delete_file():
    req = DeleteFileRequest.from_payload(_json_body())
    result = _context().gateway.delete_resource(req.file_id)
    fields: dict[str, Any] = {
        "deletedFileId": result.resource_id,
        "fileName": req.file_name or "Unknown File",
    }
    if result.already_absent:
        fields["note"] = "File was already deleted or not found"
    return _ok(**fields)


@drive_bp.route("/delete-project-folder", methods=["DELETE"])
def delete_project_folder():
    req = DeleteFolderRequest.from_payload(_json_body())
    result = _context().gateway.delete_resource(req.folder_id)
    fields: dict[str, Any] = {
        "deletedFolderId": result.resource_id,
        "message": f"Project folder deleted: {req.project_title or req.folder_id}",
    }
    if result.already_absent:
        fields["note"] = "Folder was already deleted or not found"
    return _ok(**fields)


@drive_bp.route("/validate-service-account", methods=["GET"])
def validate_service_account():
    ctx = _context()
    gateway = ctx.gateway
    credential = gateway.credential

    gateway.authenticate()
    about = gateway.about()

    shared_drive_id = gateway.shared_drive_id
    shared_drive_test = None
    if shared_drive_id:
        try:
            shared_drive_test = {"success": True, "data": gateway.get_shared_drive(shared_drive_id)}
        except StorageAPIError as exc:
            logger.warning("Shared drive %s not accessible: %s", shared_drive_id, exc)
            shared_drive_test = {"success": False, "error": str(exc)}

    return _ok(
        serviceAccount={
            "email": credential.issuer,
            "clientId": credential.client_id,
            "hasPrivateKey": credential.has_private_key,
            "tokenGenerated": True,
        },
        driveApi={
            "accessible": True,
            "user": about.get("user"),
            "quota": about.get("storageQuota"),
        },
        sharedDrive={
            "configured": bool(shared_drive_id),
            "driveId": shared_drive_id,
            "test": shared_drive_test,
        },
        timestamp=to_rfc3339(now_utc()),
    )
