"""lambda_function.py

Router for the taskboard REST API. Maps HTTP method + path to a project or
task handler and turns handler outcomes into API Gateway proxy responses.

Routes:
    GET    /api/projects                 List projects
    POST   /api/projects                 Create a project
    GET    /api/projects/{id}            Get a project
    PUT    /api/projects/{id}            Update a project
    DELETE /api/projects/{id}            Delete a project
    GET    /api/tasks/{projectId}        List tasks of a project
    POST   /api/tasks/{projectId}        Create a task
    PUT    /api/tasks/{id}               Update a task
    DELETE /api/tasks/{id}               Delete a task
    OPTIONS *                            CORS preflight

``build_handler(store)`` binds the router to an explicit store; the local
server and tests use it directly. ``lambda_handler`` is the Lambda entry
point and builds its store once per container.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Optional
from urllib.parse import unquote

from taskboard import projects, tasks
from taskboard.config import logger
from taskboard.errors import ApiError, InvalidInput
from taskboard.http_utils import _cors_headers, _error, _json_body, _path_method
from taskboard.store import DocumentStore, build_store

__all__ = [
    "build_handler",
    "lambda_handler",
    "route",
]

Handler = Callable[[Dict[str, Any]], Dict[str, Any]]

# ---------------------------------------------------------------------------
# Path parsing
# ---------------------------------------------------------------------------

_RE_PROJECTS = re.compile(r"^/api/projects/?$")
_RE_PROJECT = re.compile(r"^/api/projects/(?P<id>[^/]+)/?$")
_RE_TASKS = re.compile(r"^/api/tasks/(?P<id>[^/]+)/?$")


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


def _dispatch(store: DocumentStore, method: str, path: str, event: Dict[str, Any]) -> Dict[str, Any]:
    if _RE_PROJECTS.match(path):
        if method == "GET":
            return projects.handle_list(store)
        if method == "POST":
            return projects.handle_create(store, _body(event))
        return _error(405, "Method not allowed")

    m = _RE_PROJECT.match(path)
    if m:
        project_id = unquote(m.group("id"))
        if method == "GET":
            return projects.handle_get(store, project_id)
        if method == "PUT":
            return projects.handle_update(store, project_id, _body(event))
        if method == "DELETE":
            return projects.handle_delete(store, project_id)
        return _error(405, "Method not allowed")

    m = _RE_TASKS.match(path)
    if m:
        # GET/POST address a project, PUT/DELETE address a task.
        resource_id = unquote(m.group("id"))
        if method == "GET":
            return tasks.handle_list(store, resource_id)
        if method == "POST":
            return tasks.handle_create(store, resource_id, _body(event))
        if method == "PUT":
            return tasks.handle_update(store, resource_id, _body(event))
        if method == "DELETE":
            return tasks.handle_delete(store, resource_id)
        return _error(405, "Method not allowed")

    return _error(404, f"Not found: {path}")


def _body(event: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return _json_body(event)
    except ValueError as exc:
        raise InvalidInput(str(exc)) from None


def route(store: DocumentStore, event: Dict[str, Any]) -> Dict[str, Any]:
    """Serve one API Gateway event against ``store``."""
    method, path = _path_method(event)
    logger.info("%s %s", method, path)

    if method == "OPTIONS":
        return {"statusCode": 204, "headers": _cors_headers(), "body": ""}

    try:
        return _dispatch(store, method, path, event)
    except ApiError as exc:
        return _error(exc.status_code, exc.message)
    except Exception:
        logger.exception("Unhandled error serving %s %s", method, path)
        return _error(500, "Internal Server Error")


def build_handler(store: DocumentStore) -> Handler:
    """Bind the router to ``store``."""

    def handler(event: Dict[str, Any]) -> Dict[str, Any]:
        return route(store, event)

    return handler


# ---------------------------------------------------------------------------
# Lambda entry point
# ---------------------------------------------------------------------------

_handler: Optional[Handler] = None


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    global _handler
    if _handler is None:
        _handler = build_handler(build_store())
    return _handler(event)
