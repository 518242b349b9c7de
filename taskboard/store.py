"""store.py — Collection-based document store over DynamoDB.

Each collection is a table keyed by the string attribute ``id``. Writes
that address an existing document are conditional on it existing, so a
missing key surfaces as ``DocumentNotFound`` instead of an upsert.
``botocore`` errors other than a failed condition propagate unchanged.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from botocore.exceptions import ClientError

from taskboard.aws_clients import _get_ddb
from taskboard.config import TABLE_NAMES, TASKS_COLLECTION, TASKS_PROJECT_INDEX, logger
from taskboard.errors import DocumentNotFound
from taskboard.serialization import _deserialize, _new_document_id, _serialize, _serialize_item

__all__ = [
    "DocumentStore",
    "build_store",
]

_KEY = "id"


def _is_conditional_check_failed(exc: Exception) -> bool:
    if not isinstance(exc, ClientError):
        return False
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class DocumentStore:
    """Create/read/update/delete documents by key, plus collection scans."""

    def __init__(
        self,
        client: Any,
        table_names: Mapping[str, str],
        indexes: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> None:
        self._ddb = client
        self._tables = dict(table_names)
        # collection -> {field: index_name} for equality lookups backed by a GSI
        self._indexes = {name: dict(fields) for name, fields in (indexes or {}).items()}

    def _table(self, collection: str) -> str:
        try:
            return self._tables[collection]
        except KeyError:
            raise ValueError(f"Unknown collection '{collection}'") from None

    @staticmethod
    def _key(doc_id: str) -> Dict[str, Any]:
        return {_KEY: _serialize(doc_id)}

    def add(self, collection: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert ``data`` under a newly generated key; returns the stored document."""
        doc = {k: v for k, v in data.items() if k != _KEY}
        doc[_KEY] = _new_document_id()
        self._ddb.put_item(
            TableName=self._table(collection),
            Item=_serialize_item(doc),
            ConditionExpression="attribute_not_exists(#k)",
            ExpressionAttributeNames={"#k": _KEY},
        )
        return doc

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        resp = self._ddb.get_item(
            TableName=self._table(collection),
            Key=self._key(doc_id),
            ConsistentRead=True,
        )
        raw = resp.get("Item")
        if not raw:
            return None
        return _deserialize(raw)

    def exists(self, collection: str, doc_id: str) -> bool:
        resp = self._ddb.get_item(
            TableName=self._table(collection),
            Key=self._key(doc_id),
            ProjectionExpression="#k",
            ExpressionAttributeNames={"#k": _KEY},
            ConsistentRead=True,
        )
        return bool(resp.get("Item"))

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Overwrite ``fields`` on an existing document; returns the full new document."""
        fields = {k: v for k, v in fields.items() if k != _KEY}
        if not fields:
            doc = self.get(collection, doc_id)
            if doc is None:
                raise DocumentNotFound(collection, doc_id)
            return doc

        names: Dict[str, str] = {"#k": _KEY}
        values: Dict[str, Any] = {}
        assignments: List[str] = []
        for i, (field, value) in enumerate(fields.items()):
            names[f"#f{i}"] = field
            values[f":v{i}"] = _serialize(value)
            assignments.append(f"#f{i} = :v{i}")

        try:
            resp = self._ddb.update_item(
                TableName=self._table(collection),
                Key=self._key(doc_id),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(#k)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if _is_conditional_check_failed(exc):
                raise DocumentNotFound(collection, doc_id) from exc
            raise
        return _deserialize(resp.get("Attributes") or {})

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            self._ddb.delete_item(
                TableName=self._table(collection),
                Key=self._key(doc_id),
                ConditionExpression="attribute_exists(#k)",
                ExpressionAttributeNames={"#k": _KEY},
            )
        except ClientError as exc:
            if _is_conditional_check_failed(exc):
                raise DocumentNotFound(collection, doc_id) from exc
            raise

    def scan(self, collection: str) -> List[Dict[str, Any]]:
        """Return every document in ``collection`` in the table's natural order."""
        table = self._table(collection)
        resp = self._ddb.scan(TableName=table)
        items = list(resp.get("Items", []))
        while resp.get("LastEvaluatedKey"):
            resp = self._ddb.scan(TableName=table, ExclusiveStartKey=resp["LastEvaluatedKey"])
            items.extend(resp.get("Items", []))
        return [_deserialize(raw) for raw in items]

    def where(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        """Return documents whose ``field`` equals ``value``."""
        table = self._table(collection)
        index_name = self._indexes.get(collection, {}).get(field)
        kwargs: Dict[str, Any] = {
            "TableName": table,
            "ExpressionAttributeNames": {"#f": field},
            "ExpressionAttributeValues": {":v": _serialize(value)},
        }
        if index_name:
            kwargs["IndexName"] = index_name
            kwargs["KeyConditionExpression"] = "#f = :v"
            op = self._ddb.query
        else:
            kwargs["FilterExpression"] = "#f = :v"
            op = self._ddb.scan

        items: List[Dict[str, Any]] = []
        while True:
            resp = op(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return [_deserialize(raw) for raw in items]


def build_store(client: Any = None) -> DocumentStore:
    """Build the process-wide store from configuration."""
    indexes = {}
    if TASKS_PROJECT_INDEX:
        indexes[TASKS_COLLECTION] = {"projectId": TASKS_PROJECT_INDEX}
    store = DocumentStore(client or _get_ddb(), TABLE_NAMES, indexes)
    logger.info("document store initialized: tables=%s indexes=%s", TABLE_NAMES, indexes)
    return store
