"""projects.py — Project resource handlers.

Routes:
    GET    /api/projects          List all projects
    POST   /api/projects          Create a project
    GET    /api/projects/{id}     Get a single project
    PUT    /api/projects/{id}     Replace title/description
    DELETE /api/projects/{id}     Delete a project (and its tasks, when cascade is on)
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from taskboard.config import CASCADE_TASK_DELETE, PROJECTS_COLLECTION, TASKS_COLLECTION, logger
from taskboard.errors import DocumentNotFound, Internal, InvalidInput, NotFound
from taskboard.http_utils import _response
from taskboard.store import DocumentStore
from taskboard.validation import validate_project_input

__all__ = [
    "handle_create",
    "handle_delete",
    "handle_get",
    "handle_list",
    "handle_update",
    "project_view",
]

PROJECT_NOT_FOUND = "Project not found"


def project_view(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc.get("id"),
        "title": doc.get("title"),
        "description": doc.get("description"),
    }


def handle_list(store: DocumentStore) -> Dict[str, Any]:
    try:
        docs = store.scan(PROJECTS_COLLECTION)
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error fetching projects: %s", exc)
        raise Internal("Failed to fetch projects") from exc
    logger.info("Fetched all projects successfully (%d)", len(docs))
    return _response(200, [project_view(doc) for doc in docs])


def handle_get(store: DocumentStore, project_id: str) -> Dict[str, Any]:
    try:
        doc = store.get(PROJECTS_COLLECTION, project_id)
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error fetching project %s: %s", project_id, exc)
        raise Internal("Failed to fetch project") from exc
    if doc is None:
        raise NotFound(PROJECT_NOT_FOUND)
    return _response(200, project_view(doc))


def handle_create(store: DocumentStore, body: Dict[str, Any]) -> Dict[str, Any]:
    data, validation_error = validate_project_input(body)
    if validation_error:
        logger.warning("project create rejected: %s", validation_error)
        raise InvalidInput(validation_error)

    try:
        doc = store.add(PROJECTS_COLLECTION, data.to_document())
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error creating project: %s", exc)
        raise Internal("Failed to create project") from exc
    logger.info("Created project with ID: %s", doc["id"])
    return _response(201, project_view(doc))


def handle_update(store: DocumentStore, project_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    data, validation_error = validate_project_input(body)
    if validation_error:
        logger.warning("project update rejected for %s: %s", project_id, validation_error)
        raise InvalidInput(validation_error)

    try:
        doc = store.update(PROJECTS_COLLECTION, project_id, data.to_document())
    except DocumentNotFound:
        raise NotFound(PROJECT_NOT_FOUND) from None
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error updating project %s: %s", project_id, exc)
        raise Internal("Failed to update project") from exc
    logger.info("Updated project with ID: %s", project_id)
    return _response(200, project_view(doc))


def _delete_project_tasks(store: DocumentStore, project_id: str) -> int:
    """Remove tasks that reference ``project_id``; returns how many were removed.

    Best effort: the project is already gone, so failures are logged and
    leave the remaining tasks orphaned.
    """
    try:
        tasks = store.where(TASKS_COLLECTION, "projectId", project_id)
    except (BotoCoreError, ClientError) as exc:
        logger.error("task cleanup lookup failed for project %s: %s", project_id, exc)
        return 0

    removed = 0
    for task in tasks:
        try:
            store.delete(TASKS_COLLECTION, task["id"])
            removed += 1
        except DocumentNotFound:
            logger.info("task %s already removed during cleanup", task["id"])
        except (BotoCoreError, ClientError) as exc:
            logger.error("task cleanup failed for %s (project %s): %s", task["id"], project_id, exc)
    return removed


def handle_delete(
    store: DocumentStore,
    project_id: str,
    cascade: Optional[bool] = None,
) -> Dict[str, Any]:
    """Delete a project; its tasks are removed too only when cascade is on.

    ``cascade`` defaults to ``CASCADE_TASK_DELETE`` (off).
    """
    if cascade is None:
        cascade = CASCADE_TASK_DELETE
    try:
        store.delete(PROJECTS_COLLECTION, project_id)
    except DocumentNotFound:
        raise NotFound(PROJECT_NOT_FOUND) from None
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error deleting project %s: %s", project_id, exc)
        raise Internal("Failed to delete project") from exc
    logger.info("Deleted project with ID: %s", project_id)

    if cascade:
        removed = _delete_project_tasks(store, project_id)
        if removed:
            logger.info("Deleted %d task(s) of project %s", removed, project_id)
    return _response(200, {"message": "Project deleted successfully"})
