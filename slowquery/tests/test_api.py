"""Tests for FastAPI endpoints."""

import pytest
from fastapi.testclient import TestClient

from slowquery.app import app
from slowquery.core.config import settings
from slowquery.services.workspace import Workspace, get_workspace

client = TestClient(app)


@pytest.fixture
def workspace():
    """Give each test its own workspace."""
    ws = Workspace()
    app.dependency_overrides[get_workspace] = lambda: ws
    yield ws
    app.dependency_overrides.pop(get_workspace, None)


def test_health_check():
    """Test health check endpoint."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert "metrics" in data
    assert "version" in data


def test_get_metrics():
    """Test Prometheus metrics endpoint."""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "slowquery_analyses_total" in response.text


def test_list_rules():
    """Test the catalog listing."""
    response = client.get("/api/rules")
    assert response.status_code == 200

    rules = response.json()
    assert len(rules) == 15
    assert rules[0]["code"] == "SQ001"
    assert rules[0]["pattern"] == r"\bSELECT\s+\*"


def test_analyze_endpoint():
    """Test detailed analysis over raw text."""
    response = client.post("/api/analyze", json={"text": "SELECT * FROM users"})
    assert response.status_code == 200

    data = response.json()
    assert data["total"] == 1
    finding = data["findings"][0]
    assert finding["code"] == "SQ001"
    assert finding["startOffset"] == 0
    assert finding["length"] == 8
    assert finding["severity"] == "warning"


def test_analyze_endpoint_empty_text():
    """Test empty text is valid and clean."""
    response = client.post("/api/analyze", json={"text": ""})
    assert response.status_code == 200
    assert response.json() == {"findings": [], "total": 0}


def test_analyze_endpoint_missing_text():
    """Test request validation."""
    response = client.post("/api/analyze", json={})
    assert response.status_code == 422


def test_analyze_endpoint_too_large(monkeypatch):
    """Test oversized documents are rejected."""
    monkeypatch.setattr(settings, "max_document_length", 10)

    response = client.post("/api/analyze", json={"text": "SELECT * FROM users"})
    assert response.status_code == 400
    assert "maximum length" in response.json()["detail"]


def test_summarize_endpoint():
    """Test summary analysis over raw text."""
    response = client.post(
        "/api/summarize", json={"text": "SELECT * FROM a;\nSELECT * FROM b LEFT JOIN c ON 1 = 1"}
    )
    assert response.status_code == 200

    data = response.json()
    assert data["level"] == "warning"
    assert len(data["issues"]) == 2
    assert data["message"].startswith("Detected potential issues:\n- ")


def test_summarize_endpoint_no_issues():
    """Test the distinct no-issues outcome."""
    response = client.post("/api/summarize", json={"text": "SELECT id FROM users"})
    assert response.status_code == 200
    assert response.json() == {
        "level": "info",
        "message": "No slow query patterns detected.",
        "issues": [],
    }


def test_open_document(workspace):
    """Test opening a SQL document returns ranged diagnostics."""
    response = client.post(
        "/api/documents/open",
        json={"uri": "file:///q.sql", "languageId": "sql", "text": "SELECT id\nFROM t\nWHERE a = NULL"},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["uri"] == "file:///q.sql"
    assert data["languageId"] == "sql"
    assert data["version"] == 1
    assert len(data["diagnostics"]) == 1
    diag = data["diagnostics"][0]
    assert diag["code"] == "SQ005"
    assert diag["range"]["start"] == {"line": 2, "character": 0}


def test_open_non_sql_document(workspace):
    """Test non-SQL documents get no diagnostics."""
    response = client.post(
        "/api/documents/open",
        json={"uri": "file:///app.js", "languageId": "javascript", "text": "SELECT * FROM users"},
    )
    assert response.status_code == 200
    assert response.json()["diagnostics"] == []


def test_reopen_as_non_sql_clears_diagnostics(workspace):
    """Test stale SQL diagnostics are not served after a reopen as plaintext."""
    client.post(
        "/api/documents/open",
        json={"uri": "file:///f", "languageId": "sql", "text": "SELECT * FROM t"},
    )
    response = client.post(
        "/api/documents/open",
        json={"uri": "file:///f", "languageId": "plaintext", "text": "hello"},
    )
    assert response.status_code == 200
    assert response.json()["languageId"] == "plaintext"
    assert response.json()["version"] == 2
    assert response.json()["diagnostics"] == []

    response = client.get("/api/diagnostics", params={"uri": "file:///f"})
    assert response.status_code == 200
    assert response.json()["diagnostics"] == []


def test_change_document_replaces_diagnostics(workspace):
    """Test a change replaces the document's diagnostics."""
    client.post(
        "/api/documents/open",
        json={"uri": "file:///q.sql", "languageId": "sql", "text": "SELECT * FROM users"},
    )
    response = client.post(
        "/api/documents/change", json={"uri": "file:///q.sql", "text": "SELECT id FROM users"}
    )
    assert response.status_code == 200
    assert response.json()["diagnostics"] == []
    assert response.json()["version"] == 2

    response = client.get("/api/diagnostics", params={"uri": "file:///q.sql"})
    assert response.status_code == 200
    assert response.json()["diagnostics"] == []


def test_change_unknown_document(workspace):
    """Test changing a document that is not open."""
    response = client.post(
        "/api/documents/change", json={"uri": "file:///nope.sql", "text": "SELECT 1"}
    )
    assert response.status_code == 404


def test_get_diagnostics_unknown_document(workspace):
    response = client.get("/api/diagnostics", params={"uri": "file:///nope.sql"})
    assert response.status_code == 404


def test_command_without_active_document(workspace):
    """Test the on-demand command with nothing open."""
    response = client.post("/api/commands/detect-slow-queries")
    assert response.status_code == 409
    assert response.json()["detail"] == "No active editor detected."


def test_command_with_active_document(workspace):
    """Test the on-demand command summarizes the focused document."""
    client.post(
        "/api/documents/open",
        json={"uri": "file:///a.sql", "languageId": "sql", "text": "SELECT id FROM a"},
    )
    client.post(
        "/api/documents/open",
        json={
            "uri": "file:///b.sql",
            "languageId": "sql",
            "text": "SELECT * FROM b",
            "activate": False,
        },
    )

    response = client.post("/api/commands/detect-slow-queries")
    assert response.status_code == 200
    assert response.json()["level"] == "info"

    response = client.post("/api/documents/focus", json={"uri": "file:///b.sql"})
    assert response.status_code == 200

    response = client.post("/api/commands/detect-slow-queries")
    assert response.status_code == 200
    data = response.json()
    assert data["level"] == "warning"
    assert "Avoid using 'SELECT *'" in data["message"]


def test_close_document(workspace):
    """Test closing drops the document and clears the active one."""
    client.post(
        "/api/documents/open",
        json={"uri": "file:///q.sql", "languageId": "sql", "text": "SELECT * FROM t"},
    )

    response = client.post("/api/documents/close", json={"uri": "file:///q.sql"})
    assert response.status_code == 200
    assert response.json() == {"uri": "file:///q.sql", "closed": True}

    assert client.post("/api/commands/detect-slow-queries").status_code == 409
    assert client.post("/api/documents/close", json={"uri": "file:///q.sql"}).status_code == 404
