"""Functional tests for the master and instance HTTP endpoints.

Requests go through the in-process FastAPI app against the shared SQLite
database prepared by conftest.
"""

from __future__ import annotations

import csv
import io

from sample_data import COLUMNS, SAMPLE_ROWS, make_csv

CSV_HEADERS = {"Content-Type": "text/csv"}


def _upload(client, data: bytes, name: str = "Pre-op assessment"):
    return client.post("/api/v1/masters", params={"name": name}, content=data, headers=CSV_HEADERS)


def _by_id(body: dict) -> dict:
    return {q["question_id"]: q for q in body["questions"]}


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "db": True}


def test_request_id_is_echoed_or_generated(client):
    res = client.get("/health", headers={"X-Request-Id": "abc-123"})
    assert res.headers["X-Request-Id"] == "abc-123"
    generated = client.get("/health").headers["X-Request-Id"]
    assert generated and generated != "abc-123"


def test_preview_parses_without_saving(client, sample_csv):
    res = client.post("/api/v1/masters/preview", content=sample_csv, headers=CSV_HEADERS)
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["row_count"] == len(SAMPLE_ROWS)
    assert [q["id"] for q in body["questions"]] == ["Q1", "Q2", "Q3", "Q4", "Q5"]
    assert body["warnings"] == ['Section "Health" has only 1 question']
    assert body["questions"][4]["enable_when"]["logic"] == "OR"


def test_preview_warns_about_non_contiguous_rows(client):
    rows = [SAMPLE_ROWS[0], SAMPLE_ROWS[2], SAMPLE_ROWS[1]]
    res = client.post("/api/v1/masters/preview", content=make_csv(rows), headers=CSV_HEADERS)
    assert res.status_code == 200, res.text
    assert "Question Q1 (line 4): rows are not contiguous; merged with earlier rows" in res.json()["warnings"]


def test_multipart_upload_creates_master(client, sample_csv):
    res = client.post(
        "/api/v1/masters",
        params={"name": "Multipart"},
        files={"file": ("questionnaire.csv", sample_csv, "text/csv")},
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["question_count"] == 5
    assert len(body["admin_link_id"]) >= 16


def test_master_view_explains_display_logic(client, sample_csv):
    link = _upload(client, sample_csv).json()["admin_link_id"]
    res = client.get(f"/api/v1/masters/{link}")
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Pre-op assessment"
    assert body["question_count"] == 5

    questions = _by_id(body)
    assert [q["question_id"] for q in body["questions"]] == ["Q1", "Q2", "Q3", "Q4", "Q5"]
    assert questions["Q1"]["answer_options"] == "Yes|No"
    assert questions["Q1"]["options"] == [
        {"value": "Yes", "characteristic": "patient_has_preferred_name"},
        {"value": "No", "characteristic": "patient_has_no_preferred_name"},
    ]
    assert questions["Q1"]["enable_when_summary"] is None

    assert questions["Q2"]["enable_when_summary"] == (
        'Shown when: "Do you have a preferred name?" is answered "Yes"'
    )
    assert questions["Q4"]["enable_when_summary"] == (
        'Shown when: "How old are you?" is less than 16 and "What is your preferred name?" has no value'
    )
    q5 = questions["Q5"]["enable_when_translation"]
    assert q5["logic"] == "OR"
    assert [c["raw"] for c in q5["conditions"]] == [False, True]
    assert q5["conditions"][1]["readable"] == "unknown_flag is answered"
    assert q5["conditions"][0]["logical_op"] == "OR"
    assert q5["conditions"][1]["logical_op"] is None


def test_name_is_required(client, sample_csv):
    res = _upload(client, sample_csv, name="  ")
    assert res.status_code == 400
    assert res.headers["content-type"].startswith("application/problem+json")
    assert res.json()["detail"] == "Questionnaire name is required"


def test_invalid_upload_is_a_problem_document(client):
    rows = [dict(SAMPLE_ROWS[0])]
    res = _upload(client, make_csv(rows))
    assert res.status_code == 400
    body = res.json()
    assert body["title"] == "Invalid questionnaire upload"
    assert body["detail"] == 'Question 1 (Q1): "radio" type requires at least 2 options (found 1)'
    assert body["question_index"] == 1
    assert body["question_id"] == "Q1"
    assert body["instance"] == "/api/v1/masters"
    assert body["request_id"] == res.headers["X-Request-Id"]


def test_missing_columns_are_reported(client):
    res = _upload(client, make_csv(SAMPLE_ROWS, columns=COLUMNS[:-1]))
    assert res.status_code == 400
    assert res.json()["detail"] == "CSV is missing required columns: HelperValue"


def test_oversized_upload_is_413(client, sample_csv, monkeypatch):
    monkeypatch.setenv("UPLOAD_MAX_BYTES", "64")
    res = _upload(client, sample_csv)
    assert res.status_code == 413


def test_unknown_master_is_404(client):
    res = client.get("/api/v1/masters/does-not-exist")
    assert res.status_code == 404
    assert res.json()["title"] == "Master questionnaire not found"
    assert client.get("/api/v1/masters/does-not-exist/export").status_code == 404


def test_export_round_trips_the_upload(client, sample_csv):
    link = _upload(client, sample_csv).json()["admin_link_id"]
    res = client.get(f"/api/v1/masters/{link}/export")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(res.content.decode("utf-8"))))
    assert len(rows) == len(SAMPLE_ROWS)
    assert rows[0]["Id"] == "Q1" and rows[0]["Option"] == "Yes"


def test_instance_copies_master_questions(client, sample_csv):
    link = _upload(client, sample_csv).json()["admin_link_id"]
    res = client.post(f"/api/v1/masters/{link}/instances", json={"trust_name": " North Trust "})
    assert res.status_code == 201, res.text
    created = res.json()
    assert created["question_count"] == 5
    assert created["trust_link_id"] != link

    view = client.get(f"/api/v1/instances/{created['trust_link_id']}")
    assert view.status_code == 200
    body = view.json()
    assert body["trust_name"] == "North Trust"
    assert _by_id(body)["Q2"]["enable_when_summary"] == (
        'Shown when: "Do you have a preferred name?" is answered "Yes"'
    )


def test_instance_errors(client):
    res = client.post("/api/v1/masters/nope/instances", json={"trust_name": "T"})
    assert res.status_code == 404
    res = client.post("/api/v1/masters/nope/instances", json={})
    assert res.status_code == 422
    assert res.json()["errors"][0]["loc"][-1] == "trust_name"
    res = client.get("/api/v1/instances/nope")
    assert res.status_code == 404
    assert res.json()["title"] == "Questionnaire not found"


def test_enable_when_parse_endpoint(client):
    res = client.post("/api/v1/enable-when/parse", json={"expression": "(a=true) AND(b<=5) OR(c)"})
    assert res.status_code == 200
    body = res.json()
    assert body["mixed_connectives"] is True
    assert body["enable_when"]["logic"] == "OR"
    assert body["enable_when"]["conditions"][1] == {"characteristic": "b", "operator": "<=", "value": "5"}
    assert body["enable_when"]["conditions"][2]["operator"] == "exists"

    blank = client.post("/api/v1/enable-when/parse", json={"expression": "  "}).json()
    assert blank == {"enable_when": None, "mixed_connectives": False}
