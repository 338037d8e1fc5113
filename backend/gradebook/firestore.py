"""
firestore.py — Document store accessor over the Firestore REST API.

Every read is a ``runQuery`` against one collection with equality filters on
the owning teacher (and student / subject where relevant). Typed Firestore
values are decoded to plain Python and top-level camelCase field names are
converted to the snake_case keys used by the analytics code. Timestamps are
left as ISO strings; gradebook.timestamps normalises them.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from gradebook.store import StoreError

logger = logging.getLogger(__name__)

BASE_URL = "https://firestore.googleapis.com/v1"

STUDENTS = "students"
SUBJECTS = "subjects"
COMPONENTS = "assessmentComponents"
SCORES = "studentScores"


# ── Value decoding ──────────────────────────────────────────────────

def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def decode_value(value: Dict[str, Any]) -> Any:
    """Convert a Firestore typed value to a Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "mapValue" in value:
        fields = value["mapValue"].get("fields") or {}
        return {k: decode_value(v) for k, v in fields.items()}
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values") or []]
    for key in ("stringValue", "timestampValue", "referenceValue", "bytesValue"):
        if key in value:
            return value[key]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    return None


def decode_document(document: Dict[str, Any]) -> Dict[str, Any]:
    record = {
        _snake(name): decode_value(value)
        for name, value in (document.get("fields") or {}).items()
    }
    record["id"] = str(document.get("name", "")).rsplit("/", 1)[-1]
    return record


def _field_filter(field: str, value: str) -> Dict[str, Any]:
    return {
        "fieldFilter": {
            "field": {"fieldPath": field},
            "op": "EQUAL",
            "value": {"stringValue": value},
        }
    }


def build_query(collection: str, filters: Dict[str, str]) -> Dict[str, Any]:
    clauses = [_field_filter(field, value) for field, value in filters.items()]
    if len(clauses) == 1:
        where = clauses[0]
    else:
        where = {"compositeFilter": {"op": "AND", "filters": clauses}}
    return {"structuredQuery": {"from": [{"collectionId": collection}], "where": where}}


# ── Accessor ────────────────────────────────────────────────────────

class FirestoreStore:
    """Read-only accessor for one Firestore project and database."""

    def __init__(
        self,
        project_id: str,
        database: str = "(default)",
        token: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.project_id = project_id
        self.database = database
        self.token = token
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def documents_url(self) -> str:
        return f"{BASE_URL}/projects/{self.project_id}/databases/{self.database}/documents"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def run_query(self, collection: str, **filters: str) -> List[Dict[str, Any]]:
        try:
            res = self._client.post(
                f"{self.documents_url}:runQuery",
                headers=self._headers(),
                json=build_query(collection, filters),
            )
            res.raise_for_status()
            rows = res.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreError(f"Query on '{collection}' failed: {exc}") from exc

        records = [decode_document(row["document"]) for row in rows if "document" in row]
        logger.debug("Fetched %d %s documents", len(records), collection)
        return records

    def get_students(self, teacher_id: str) -> List[Dict[str, Any]]:
        return self.run_query(STUDENTS, teacherId=teacher_id)

    def get_subjects(self, teacher_id: str) -> List[Dict[str, Any]]:
        return self.run_query(SUBJECTS, teacherId=teacher_id)

    def get_scores(self, student_id: str, teacher_id: str) -> List[Dict[str, Any]]:
        return self.run_query(SCORES, studentId=student_id, teacherId=teacher_id)

    def get_scores_by_subject(self, subject_id: str, teacher_id: str) -> List[Dict[str, Any]]:
        return self.run_query(SCORES, subjectId=subject_id, teacherId=teacher_id)

    def get_components(self, subject_id: str, teacher_id: str) -> List[Dict[str, Any]]:
        records = self.run_query(COMPONENTS, subjectId=subject_id, teacherId=teacher_id)
        return sorted(records, key=lambda c: str(c.get("name", "")))

    def close(self) -> None:
        self._client.close()
