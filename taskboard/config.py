"""config.py — Environment-driven settings and the shared logger.

Values are read once at import time.
"""
from __future__ import annotations

import logging
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


__all__ = [
    "CASCADE_TASK_DELETE",
    "CORS_ORIGIN",
    "DYNAMODB_ENDPOINT_URL",
    "DYNAMODB_REGION",
    "HOST",
    "LOG_FILE",
    "LOG_LEVEL",
    "MAX_REQUEST_BODY_BYTES",
    "MAX_TITLE_LENGTH",
    "PORT",
    "PROJECTS_COLLECTION",
    "PROJECTS_TABLE",
    "TABLE_NAMES",
    "TASKBOARD_API_TIMEOUT",
    "TASKBOARD_API_URL",
    "TASKS_COLLECTION",
    "TASKS_PROJECT_INDEX",
    "TASKS_TABLE",
    "logger",
]

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

PORT = _env_int("PORT", 5000)
HOST = os.environ.get("HOST", "0.0.0.0")
CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "*")

# Request bodies above 1 MiB are rejected by the local server.
MAX_REQUEST_BODY_BYTES = 1_048_576

# ---------------------------------------------------------------------------
# Document store
# ---------------------------------------------------------------------------

PROJECTS_COLLECTION = "projects"
TASKS_COLLECTION = "tasks"

PROJECTS_TABLE = os.environ.get("PROJECTS_TABLE", "projects")
TASKS_TABLE = os.environ.get("TASKS_TABLE", "tasks")
TASKS_PROJECT_INDEX = os.environ.get("TASKS_PROJECT_INDEX", "").strip()
TABLE_NAMES = {
    PROJECTS_COLLECTION: PROJECTS_TABLE,
    TASKS_COLLECTION: TASKS_TABLE,
}

DYNAMODB_REGION = os.environ.get("DYNAMODB_REGION", "us-west-2")
DYNAMODB_ENDPOINT_URL = os.environ.get("DYNAMODB_ENDPOINT_URL", "").strip()

CASCADE_TASK_DELETE = _env_bool("CASCADE_TASK_DELETE", False)

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

MAX_TITLE_LENGTH = 1000

# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

TASKBOARD_API_URL = os.environ.get("TASKBOARD_API_URL", "http://localhost:5000/api")
TASKBOARD_API_TIMEOUT = _env_int("TASKBOARD_API_TIMEOUT", 20)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.environ.get("LOG_FILE", "logs/server.log").strip()

logger = logging.getLogger("taskboard")
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
