"""
Tests for gradebook/firestore.py and gradebook/store.py — REST decoding,
query building, error mapping, environment wiring.
"""

import json
import os
import sys
from datetime import datetime, timezone

import httpx
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from gradebook.firestore import FirestoreStore, build_query, decode_document, decode_value
from gradebook.store import StoreError, store_from_env
from gradebook.timestamps import to_instant

DOC_PREFIX = "projects/demo/databases/(default)/documents"

SCORE_DOC = {
    "name": f"{DOC_PREFIX}/studentScores/abc123",
    "fields": {
        "studentId": {"stringValue": "s1"},
        "subjectId": {"stringValue": "m"},
        "teacherId": {"stringValue": "t1"},
        "examScore": {"integerValue": "80"},
        "finalScore": {"doubleValue": 82.5},
        "classAssessmentScores": {"mapValue": {"fields": {
            "compA": {"integerValue": "90"},
            "compB": {"doubleValue": 70.5},
        }}},
        "createdAt": {"timestampValue": "2024-01-02T03:04:05Z"},
    },
}


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestDecoding:

    def test_scalars(self):
        assert decode_value({"nullValue": None}) is None
        assert decode_value({"booleanValue": True}) is True
        assert decode_value({"integerValue": "42"}) == 42
        assert decode_value({"doubleValue": 1.5}) == 1.5
        assert decode_value({"stringValue": "x"}) == "x"

    def test_containers(self):
        assert decode_value({"arrayValue": {"values": [{"integerValue": "1"}, {"stringValue": "a"}]}}) == [1, "a"]
        assert decode_value({"arrayValue": {}}) == []
        assert decode_value({"mapValue": {}}) == {}

    def test_document(self):
        record = decode_document(SCORE_DOC)
        assert record["id"] == "abc123"
        assert record["student_id"] == "s1"
        assert record["teacher_id"] == "t1"
        assert record["exam_score"] == 80
        assert record["final_score"] == 82.5
        # Nested map keys are component ids and stay as stored.
        assert record["class_assessment_scores"] == {"compA": 90, "compB": 70.5}
        assert to_instant(record["created_at"]) == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestBuildQuery:

    def test_single_filter(self):
        query = build_query("students", {"teacherId": "t1"})
        where = query["structuredQuery"]["where"]
        assert where["fieldFilter"]["field"]["fieldPath"] == "teacherId"
        assert where["fieldFilter"]["value"] == {"stringValue": "t1"}

    def test_composite_filter(self):
        query = build_query("studentScores", {"studentId": "s1", "teacherId": "t1"})
        where = query["structuredQuery"]["where"]["compositeFilter"]
        assert where["op"] == "AND"
        assert len(where["filters"]) == 2
        assert query["structuredQuery"]["from"] == [{"collectionId": "studentScores"}]


class TestFirestoreStore:

    def test_get_scores(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[
                {"document": SCORE_DOC, "readTime": "2024-01-03T00:00:00Z"},
            ])

        store = FirestoreStore("demo", token="secret", client=_client(handler))
        scores = store.get_scores("s1", "t1")

        assert [s["id"] for s in scores] == ["abc123"]
        assert seen["path"].endswith("/documents:runQuery")
        assert seen["auth"] == "Bearer secret"
        filters = seen["body"]["structuredQuery"]["where"]["compositeFilter"]["filters"]
        assert {f["fieldFilter"]["field"]["fieldPath"] for f in filters} == {"studentId", "teacherId"}

    def test_empty_result(self):
        store = FirestoreStore("demo", client=_client(
            lambda request: httpx.Response(200, json=[{"readTime": "2024-01-03T00:00:00Z"}])
        ))
        assert store.get_students("t1") == []

    def test_no_token_no_auth_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[])

        FirestoreStore("demo", client=_client(handler)).get_subjects("t1")
        assert seen["auth"] is None

    def test_components_sorted_by_name(self):
        docs = [
            {"document": {"name": f"{DOC_PREFIX}/assessmentComponents/{cid}", "fields": {"name": {"stringValue": name}}}}
            for cid, name in [("c2", "Quizzes"), ("c1", "Homework")]
        ]
        store = FirestoreStore("demo", client=_client(lambda request: httpx.Response(200, json=docs)))
        assert [c["name"] for c in store.get_components("m", "t1")] == ["Homework", "Quizzes"]

    def test_http_error_raises_store_error(self):
        store = FirestoreStore("demo", client=_client(lambda request: httpx.Response(503)))
        with pytest.raises(StoreError):
            store.get_students("t1")

    def test_transport_error_raises_store_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        store = FirestoreStore("demo", client=_client(handler))
        with pytest.raises(StoreError):
            store.get_scores_by_subject("m", "t1")


class TestStoreFromEnv:

    def test_requires_project(self, monkeypatch):
        monkeypatch.delenv("FIRESTORE_PROJECT_ID", raising=False)
        with pytest.raises(StoreError):
            store_from_env()

    def test_builds_firestore_store(self, monkeypatch):
        monkeypatch.setenv("FIRESTORE_PROJECT_ID", "demo")
        monkeypatch.setenv("FIRESTORE_TOKEN", "tok")
        store = store_from_env()
        assert isinstance(store, FirestoreStore)
        assert store.project_id == "demo"
        assert store.token == "tok"
        assert "projects/demo/databases/(default)/documents" in store.documents_url
