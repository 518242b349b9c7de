"""validation.py — Request body validation producing typed request models.

Each ``validate_*`` function takes the parsed JSON body and returns
``(model, None)`` on success or ``(None, message)`` on failure, where
``message`` is the client-facing reason. Values are passed through
unchanged; whitespace-only strings count as empty.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from taskboard.config import MAX_TITLE_LENGTH

__all__ = [
    "ProjectInput",
    "TaskInput",
    "TaskUpdate",
    "validate_project_input",
    "validate_task_create",
    "validate_task_update",
]

_TITLE_TOO_LONG = f"Title must be less than {MAX_TITLE_LENGTH} characters"


@dataclass(frozen=True)
class ProjectInput:
    title: str
    description: str

    def to_document(self) -> Dict[str, Any]:
        return {"title": self.title, "description": self.description}


@dataclass(frozen=True)
class TaskInput:
    title: str
    completed: bool = False

    def to_document(self, project_id: str) -> Dict[str, Any]:
        return {"projectId": project_id, "title": self.title, "completed": self.completed}


@dataclass(frozen=True)
class TaskUpdate:
    title: str
    completed: Optional[bool] = None

    def to_fields(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"title": self.title}
        if self.completed is not None:
            fields["completed"] = self.completed
        return fields


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _check_title(title: Any) -> Optional[str]:
    if _is_empty(title):
        return "Title is required"
    if not isinstance(title, str):
        return "Title must be a string"
    if len(title) > MAX_TITLE_LENGTH:
        return _TITLE_TOO_LONG
    return None


def _check_completed(body: Dict[str, Any]) -> Optional[str]:
    # null counts as absent; JSON 0/1 and "true" strings are rejected
    completed = body.get("completed")
    if completed is not None and not isinstance(completed, bool):
        return "Completed must be a boolean"
    return None


def validate_project_input(body: Dict[str, Any]) -> Tuple[Optional[ProjectInput], Optional[str]]:
    """Shared by project create and update."""
    title = body.get("title")
    description = body.get("description")

    # A blank value that was sent gets the combined message; an absent one is named.
    title_blank = _is_empty(title)
    description_blank = _is_empty(description)
    if (
        (title_blank and description_blank)
        or (title_blank and title is not None)
        or (description_blank and description is not None)
    ):
        return None, "Title and description are required"
    if title is None:
        return None, "Title is required"
    if description is None:
        return None, "Description is required"
    if not isinstance(title, str):
        return None, "Title must be a string"
    if not isinstance(description, str):
        return None, "Description must be a string"
    if len(title) > MAX_TITLE_LENGTH:
        return None, _TITLE_TOO_LONG
    return ProjectInput(title=title, description=description), None


def validate_task_create(body: Dict[str, Any]) -> Tuple[Optional[TaskInput], Optional[str]]:
    error = _check_title(body.get("title")) or _check_completed(body)
    if error:
        return None, error
    return TaskInput(title=body["title"], completed=bool(body.get("completed") or False)), None


def validate_task_update(body: Dict[str, Any]) -> Tuple[Optional[TaskUpdate], Optional[str]]:
    """Like create, but an absent ``completed`` leaves the stored value alone."""
    error = _check_title(body.get("title")) or _check_completed(body)
    if error:
        return None, error
    return TaskUpdate(title=body["title"], completed=body.get("completed")), None
