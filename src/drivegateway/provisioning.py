"""CourseFolderProvisioner: composes gateway calls into course/topic folders."""

from __future__ import annotations

import logging
from typing import Optional

from drivegateway.controller import DriveGateway
from drivegateway.controller.drive_gateway import ROOT_FOLDER
from drivegateway.errors import StorageAPIError, TransportError, ValidationError
from drivegateway.models import CourseStructure, TopicFolder

logger = logging.getLogger(__name__)

DEFAULT_COURSES_FOLDER_NAME = "📚 Course Materials"
DEFAULT_PROJECTS_FOLDER_NAME = "🎯 Projects"

TOPIC_ICONS = {
    "project": "🔧",
    "course_content": "📚",
    "company": "🏢",
    "course_category": "📚",
    "course": "📖",
}
DEFAULT_TOPIC_ICON = "📄"


def course_folder_name(company_slug: str, course_title: str) -> str:
    """`[<SLUG>] <title>`, the name of a course's top-level container."""
    return f"[{company_slug.strip().upper()}] {course_title.strip()}"


def topic_folder_name(topic_name: str, topic_type: Optional[str]) -> str:
    icon = TOPIC_ICONS.get(topic_type or "", DEFAULT_TOPIC_ICON)
    return f"{icon} {topic_name.strip()}"


class CourseFolderProvisioner:
    """
    Build the folder layout used for course and project assets.

    Every folder is created through the gateway, so every identifier returned
    was assigned by Drive. Creation is not idempotent: provisioning the same
    course twice yields two structures. Callers that need one structure per
    course keep their own mapping from course to folder ids and consult it
    before calling.
    """

    def __init__(
        self,
        gateway: DriveGateway,
        *,
        root_folder_id: Optional[str] = None,
        courses_folder_name: str = DEFAULT_COURSES_FOLDER_NAME,
        projects_folder_name: str = DEFAULT_PROJECTS_FOLDER_NAME,
    ) -> None:
        self._gateway = gateway
        self._root_folder_id = root_folder_id or ROOT_FOLDER
        self._courses_folder_name = courses_folder_name
        self._projects_folder_name = projects_folder_name

    @property
    def root_folder_id(self) -> str:
        return self._root_folder_id

    def create_course_structure(self, company_slug: str, course_title: str) -> CourseStructure:
        """
        Create the course container and its two fixed subfolders.

        Raises:
            ValidationError: if company_slug or course_title is blank.
        """
        if not company_slug or not company_slug.strip() or not course_title or not course_title.strip():
            raise ValidationError("Company slug and course title are required")

        name = course_folder_name(company_slug, course_title)
        main = self._gateway.create_folder(name, self._root_folder_id)
        courses = self._gateway.create_folder(self._courses_folder_name, main.item_id)
        projects = self._gateway.create_folder(self._projects_folder_name, main.item_id)

        logger.info("Provisioned course structure %r (%s)", name, main.item_id)
        return CourseStructure(main=main, courses=courses, projects=projects)

    def create_topic_folder(
        self,
        parent_folder_id: str,
        topic_name: str,
        topic_type: Optional[str] = None,
    ) -> TopicFolder:
        """
        Return the `<icon> <topic>` folder under `parent_folder_id`.

        A folder with that name already under the parent is reused. The lookup
        is best-effort: if it fails on a Drive or network error the folder is
        created anyway, and two concurrent callers can still both create one.
        """
        if not parent_folder_id or not topic_name or not topic_name.strip():
            raise ValidationError("Parent folder ID and topic name are required")

        name = topic_folder_name(topic_name, topic_type)
        try:
            existing = self._gateway.find_folder(parent_folder_id, name)
        except (StorageAPIError, TransportError) as exc:
            logger.warning("Could not check for existing folder %r: %s", name, exc)
            existing = None

        if existing is not None:
            logger.info("Reusing topic folder %r (%s)", name, existing.item_id)
            return TopicFolder(folder=existing, is_existing=True)
        return TopicFolder(folder=self._gateway.create_folder(name, parent_folder_id))
