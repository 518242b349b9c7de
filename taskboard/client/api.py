"""api.py — Thin JSON client for the taskboard REST API.

Every call either returns the decoded response body or raises
``ApiRequestError`` carrying a short operation message. There are no
retries; a timeout is an ordinary failure.
"""
from __future__ import annotations

import json
import logging
import os
import ssl
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

import certifi

from taskboard.config import TASKBOARD_API_TIMEOUT, TASKBOARD_API_URL

__all__ = [
    "ApiRequestError",
    "TaskboardApi",
]

logger = logging.getLogger(__name__)

HTTP_USER_AGENT = "taskboard-client/1.0"


class ApiRequestError(Exception):
    """A request failed in transport or came back with a non-2xx status.

    ``message`` is the operation-level text shown to users; ``detail`` is
    the server's ``error`` string, when it sent one.
    """

    def __init__(self, message: str, status: Optional[int] = None, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.detail = detail


def _build_ssl_context() -> Optional[ssl.SSLContext]:
    """Build an SSL context, preferring SSL_CERT_FILE and falling back to certifi."""
    cert_file = str(os.environ.get("SSL_CERT_FILE", "") or "").strip()
    if cert_file:
        try:
            return ssl.create_default_context(cafile=cert_file)
        except (OSError, ssl.SSLError) as exc:
            logger.warning("SSL_CERT_FILE %r is not usable: %s", cert_file, exc)
    try:
        return ssl.create_default_context(cafile=certifi.where())
    except (OSError, ssl.SSLError):
        return ssl.create_default_context()


_SSL_CTX = _build_ssl_context()


def _urlopen(req: urllib.request.Request, timeout: float):
    if req.full_url.startswith("https:") and _SSL_CTX is not None:
        return urllib.request.urlopen(req, timeout=timeout, context=_SSL_CTX)
    return urllib.request.urlopen(req, timeout=timeout)


def _quote(value: str) -> str:
    return urllib.parse.quote(str(value), safe="")


class TaskboardApi:
    """One method per endpoint; ids are URL-encoded into the path."""

    def __init__(self, base_url: str = TASKBOARD_API_URL, timeout: float = TASKBOARD_API_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        failure_message: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json", "User-Agent": HTTP_USER_AGENT}
        body = None
        if payload is not None:
            headers["Content-Type"] = "application/json"
            body = json.dumps(payload).encode("utf-8")

        req = urllib.request.Request(url=url, method=method, headers=headers, data=body)
        try:
            with _urlopen(req, timeout=self.timeout) as resp:
                text = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            raw = exc.read().decode("utf-8", errors="replace") if exc.fp is not None else ""
            try:
                detail = (json.loads(raw) or {}).get("error") if raw else None
            except (json.JSONDecodeError, AttributeError):
                detail = raw or None
            logger.error("%s %s -> %s: %s", method, url, exc.code, detail or exc.reason)
            raise ApiRequestError(failure_message, status=exc.code, detail=detail) from exc
        except (urllib.error.URLError, OSError) as exc:
            logger.error("%s %s unreachable: %s", method, url, exc)
            raise ApiRequestError(failure_message) from exc

        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("%s %s returned invalid JSON", method, url)
            raise ApiRequestError(failure_message) from exc

    # -- projects -----------------------------------------------------------

    def fetch_projects(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/projects", "Failed to fetch projects")

    def get_project(self, project_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/projects/{_quote(project_id)}", "Failed to fetch project")

    def create_project(self, project: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/projects", "Failed to create project", project)

    def update_project(self, project_id: str, project: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/projects/{_quote(project_id)}", "Failed to update project", project)

    def delete_project(self, project_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/projects/{_quote(project_id)}", "Failed to delete project")

    # -- tasks --------------------------------------------------------------

    def fetch_tasks(self, project_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/tasks/{_quote(project_id)}", "Failed to fetch tasks")

    def create_task(self, project_id: str, task: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", f"/tasks/{_quote(project_id)}", "Failed to create task", task)

    def update_task(self, task_id: str, task: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/tasks/{_quote(task_id)}", "Failed to update task", task)

    def delete_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/tasks/{_quote(task_id)}", "Failed to delete task")
