"""tasks.py — Task resource handlers.

Routes:
    GET    /api/tasks/{projectId}   List tasks of a project
    POST   /api/tasks/{projectId}   Create a task in a project
    PUT    /api/tasks/{id}          Replace title (and completed, when given)
    DELETE /api/tasks/{id}          Delete a task
"""
from __future__ import annotations

from typing import Any, Dict

from botocore.exceptions import BotoCoreError, ClientError

from taskboard.config import PROJECTS_COLLECTION, TASKS_COLLECTION, logger
from taskboard.errors import DocumentNotFound, Internal, InvalidInput, NotFound
from taskboard.http_utils import _response
from taskboard.projects import PROJECT_NOT_FOUND
from taskboard.store import DocumentStore
from taskboard.validation import validate_task_create, validate_task_update

__all__ = [
    "handle_create",
    "handle_delete",
    "handle_list",
    "handle_update",
    "task_view",
]

TASK_NOT_FOUND = "Task not found"


def task_view(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc.get("id"),
        "projectId": doc.get("projectId"),
        "title": doc.get("title"),
        "completed": bool(doc.get("completed", False)),
    }


def _require_project(store: DocumentStore, project_id: str, failure_message: str) -> None:
    try:
        exists = store.exists(PROJECTS_COLLECTION, project_id)
    except (BotoCoreError, ClientError) as exc:
        logger.error("project lookup failed for %s: %s", project_id, exc)
        raise Internal(failure_message) from exc
    if not exists:
        raise NotFound(PROJECT_NOT_FOUND)


def handle_list(store: DocumentStore, project_id: str) -> Dict[str, Any]:
    _require_project(store, project_id, "Failed to fetch tasks")
    try:
        docs = store.where(TASKS_COLLECTION, "projectId", project_id)
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error fetching tasks: %s", exc)
        raise Internal("Failed to fetch tasks") from exc
    logger.info("Fetched tasks for project ID: %s", project_id)
    return _response(200, [task_view(doc) for doc in docs])


def handle_create(store: DocumentStore, project_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    data, validation_error = validate_task_create(body)
    if validation_error:
        logger.warning("task create rejected: %s", validation_error)
        raise InvalidInput(validation_error)

    _require_project(store, project_id, "Failed to create task")
    try:
        doc = store.add(TASKS_COLLECTION, data.to_document(project_id))
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error creating task: %s", exc)
        raise Internal("Failed to create task") from exc
    logger.info("Created task with ID: %s", doc["id"])
    return _response(201, task_view(doc))


def handle_update(store: DocumentStore, task_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    data, validation_error = validate_task_update(body)
    if validation_error:
        logger.warning("task update rejected for %s: %s", task_id, validation_error)
        raise InvalidInput(validation_error)

    try:
        doc = store.update(TASKS_COLLECTION, task_id, data.to_fields())
    except DocumentNotFound:
        raise NotFound(TASK_NOT_FOUND) from None
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error updating task %s: %s", task_id, exc)
        raise Internal("Failed to update task") from exc
    logger.info("Updated task with ID: %s", task_id)
    return _response(200, task_view(doc))


def handle_delete(store: DocumentStore, task_id: str) -> Dict[str, Any]:
    try:
        store.delete(TASKS_COLLECTION, task_id)
    except DocumentNotFound:
        raise NotFound(TASK_NOT_FOUND) from None
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error deleting task %s: %s", task_id, exc)
        raise Internal("Failed to delete task") from exc
    logger.info("Deleted task with ID: %s", task_id)
    return _response(200, {"message": "Task deleted successfully"})
