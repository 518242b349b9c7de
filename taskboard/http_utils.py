"""http_utils.py — HTTP response building, body parsing, path/method extraction.

Responses use the API Gateway proxy shape
(``statusCode`` / ``headers`` / ``body``). Error bodies are
``{"error": "<message>"}``.
"""
from __future__ import annotations

import base64
import binascii
import json
from decimal import Decimal
from typing import Any, Dict, Tuple

from taskboard.config import CORS_ORIGIN

__all__ = [
    "_cors_headers",
    "_error",
    "_json_body",
    "_path_method",
    "_response",
]


def _cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": CORS_ORIGIN,
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Accept, Content-Type",
    }


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _response(status_code: int, payload: Any) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {**_cors_headers(), "Content-Type": "application/json"},
        "body": json.dumps(payload, default=_json_default),
    }


def _error(status_code: int, message: str) -> Dict[str, Any]:
    return _response(status_code, {"error": message})


def _json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Parse the event body as a JSON object; an empty body is ``{}``.

    Raises ValueError with a client-facing message on malformed input.
    """
    raw = event.get("body")
    if raw in (None, ""):
        return {}

    if event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise ValueError("Invalid JSON body") from None

    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        raise ValueError("Invalid JSON body") from None

    if not isinstance(parsed, dict):
        raise ValueError("JSON body must be an object")
    return parsed


def _path_method(event: Dict[str, Any]) -> Tuple[str, str]:
    """Extract HTTP method and path from an API Gateway v1 or v2 event."""
    http = (event.get("requestContext") or {}).get("http") or {}
    method = (http.get("method") or event.get("httpMethod") or "GET").upper()
    path = event.get("rawPath") or http.get("path") or event.get("path") or "/"
    return method, path
