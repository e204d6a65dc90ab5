"""
Tests for the HTTP surface.
"""
from concurrent.futures import ThreadPoolExecutor
import threading
import time
from unittest.mock import patch
import pytest
from fastapi.testclient import TestClient
from dod_agent.main import app
from dod_agent.services.jira_client import JiraClientError


@pytest.fixture
def client(config):
    with patch("dod_agent.api.generate.ConfigLoader") as mock_loader_cls:
        mock_loader_cls.return_value.resolve_config.return_value = config
        yield TestClient(app)


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "Definition of Done Generator API"}
    assert client.get("/health").json() == {"status": "healthy"}


def test_generate_dod_from_json(client, ticket_json):
    response = client.post("/api/v1/dod", json={"ticket_json": ticket_json, "output_format": "jira"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["errors"] == []
    assert body["meta"]["ticket_key"] == "ABC-1"
    assert body["meta"]["ticket_type"] == "backend"
    assert body["meta"]["agent_version"]
    assert body["dod"].startswith("# Definition of Done: ABC-1")
    assert body["jira_markup"].startswith("h1. Definition of Done: ABC-1")
    assert body["document"]["sections"][-1]["title"] == "Reviewer Checklist"


def test_generate_dod_partial_failure_still_returns_document(client, ticket_json):
    response = client.post(
        "/api/v1/dod",
        json={"ticket_json": ticket_json, "mr_url": "https://gitlab.com/g/p/-/merge_requests/1"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert len(body["errors"]) == 1


def test_generate_dod_invalid_input(client):
    response = client.post("/api/v1/dod", json={"type": "mobile"})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid input:")


def test_generate_dod_ticket_fetch_failure(client):
    with patch("dod_agent.agent.orchestrator.JiraClient") as mock_client_cls:
        mock_client_cls.return_value.fetch_ticket.side_effect = JiraClientError("Jira API unreachable")
        response = client.post("/api/v1/dod", json={"ticket_url": "ABC-123", "jira_token": "t"})

    assert response.status_code == 502
    assert "Jira API unreachable" in response.json()["detail"]


def test_generate_dod_wrong_field_type(client):
    response = client.post("/api/v1/dod", json={"ticket_url": "ABC-1", "post_comment": "maybe"})
    assert response.status_code == 422


def test_format_jira(client):
    response = client.post("/api/v1/dod/format/jira", json={"markdown": "## Title\n- [ ] **Label:** item"})
    assert response.status_code == 200
    assert response.json() == {"jira_markup": "h2. Title\n- [ ] *Label:* item"}


def test_format_jira_requires_markdown(client):
    assert client.post("/api/v1/dod/format/jira", json={}).status_code == 422


def test_generate_dod_does_not_block_other_requests(config):
    fetch_started = threading.Event()
    release_fetch = threading.Event()

    def slow_fetch(*args, **kwargs):
        fetch_started.set()
        release_fetch.wait(timeout=5)
        raise JiraClientError("Jira API timeout")

    with patch("dod_agent.api.generate.ConfigLoader") as mock_loader_cls, \
            patch("dod_agent.agent.orchestrator.JiraClient") as mock_client_cls:
        mock_loader_cls.return_value.resolve_config.return_value = config
        mock_client_cls.return_value.fetch_ticket.side_effect = slow_fetch

        with TestClient(app) as client, ThreadPoolExecutor(max_workers=1) as executor:
            pending = executor.submit(
                client.post, "/api/v1/dod", json={"ticket_url": "ABC-1", "jira_token": "t"}
            )
            assert fetch_started.wait(timeout=5)

            started = time.monotonic()
            health = client.get("/health")
            elapsed = time.monotonic() - started

            release_fetch.set()
            response = pending.result(timeout=10)

    assert health.status_code == 200
    assert elapsed < 1
    assert response.status_code == 502
    assert "Jira API timeout" in response.json()["detail"]
