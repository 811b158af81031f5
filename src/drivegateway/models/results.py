"""Result models for gateway and provisioning operations."""

from __future__ import annotations

from dataclasses import dataclass

from .drive_item import DriveFolder


@dataclass(slots=True, frozen=True)
class DeleteResult:
    """Acknowledgement of a delete; `already_absent` is set when Drive answered 404."""

    resource_id: str
    already_absent: bool = False


@dataclass(slots=True, frozen=True)
class CourseStructure:
    """Folders created for one course: the container and its two fixed subfolders."""

    main: DriveFolder
    courses: DriveFolder
    projects: DriveFolder

    @property
    def course_folder_name(self) -> str:
        return self.main.name

    def folder_ids(self) -> dict[str, str]:
        return {
            "main": self.main.item_id,
            "courses": self.courses.item_id,
            "projects": self.projects.item_id,
        }


@dataclass(slots=True, frozen=True)
class TopicFolder:
    """A topic folder and whether it already existed under its parent."""

    folder: DriveFolder
    is_existing: bool = False
