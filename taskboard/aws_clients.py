"""aws_clients.py — DynamoDB client construction.

The client is created on first call and cached for the life of the
process (or warm Lambda container).
"""
from __future__ import annotations

from typing import Optional

import boto3
from botocore.config import Config

from taskboard.config import DYNAMODB_ENDPOINT_URL, DYNAMODB_REGION

__all__ = [
    "_get_ddb",
]

_ddb = None


def _get_ddb(region: Optional[str] = None, endpoint_url: Optional[str] = None):
    """Get (or create) the DynamoDB client singleton."""
    global _ddb
    if _ddb is None:
        kwargs = {
            "region_name": region or DYNAMODB_REGION,
            "config": Config(retries={"max_attempts": 3, "mode": "standard"}),
        }
        endpoint = endpoint_url or DYNAMODB_ENDPOINT_URL
        if endpoint:
            kwargs["endpoint_url"] = endpoint
        _ddb = boto3.client("dynamodb", **kwargs)
    return _ddb
