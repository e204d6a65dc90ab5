"""
Tests for the Jira client. HTTP calls are mocked at requests.request.
"""
import json
from unittest.mock import Mock, patch
import pytest
import requests
from requests.auth import HTTPBasicAuth
from dod_agent.services.jira_client import (
    JiraClient,
    JiraClientError,
    build_adf_document,
    extract_adf_text,
    extract_linked_issues,
)

ISSUE_PAYLOAD = {
    "key": "ABC-123",
    "fields": {
        "summary": "Add login endpoint",
        "labels": ["backend"],
        "issuetype": {"name": "Story"},
        "issuelinks": [
            {"outwardIssue": {"key": "ABC-1"}},
            {"inwardIssue": {"key": "ABC-2"}},
        ],
        "description": {
            "type": "doc",
            "version": 1,
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": "Implement login"}]},
                {"type": "heading", "content": [{"type": "text", "text": "Acceptance Criteria"}]},
                {
                    "type": "bulletList",
                    "content": [
                        {"type": "listItem", "content": [
                            {"type": "paragraph", "content": [{"type": "text", "text": "User can log in"}]},
                        ]},
                        {"type": "listItem", "content": [
                            {"type": "paragraph", "content": [{"type": "text", "text": "User can log out"}]},
                        ]},
                    ],
                },
            ],
        },
    },
}


def _response(payload=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.content = json.dumps(payload).encode() if payload is not None else b""
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


@pytest.fixture
def client():
    return JiraClient("https://jira.example.com/", "secret-token", email="dev@example.com")


def test_init_requires_base_url_and_token():
    with pytest.raises(JiraClientError, match="base URL"):
        JiraClient("", "token")
    with pytest.raises(JiraClientError, match="token"):
        JiraClient("https://jira.example.com", "")


def test_fetch_ticket_parses_issue(client):
    with patch("dod_agent.services.jira_client.requests.request", return_value=_response(ISSUE_PAYLOAD)) as mock_request:
        ticket = client.fetch_ticket("ABC-123")

    args, kwargs = mock_request.call_args
    assert args == ("GET", "https://jira.example.com/rest/api/3/issue/ABC-123")
    assert isinstance(kwargs["auth"], HTTPBasicAuth)
    assert kwargs["timeout"] == 30

    assert ticket.key == "ABC-123"
    assert ticket.summary == "Add login endpoint"
    assert ticket.labels == ("backend",)
    assert ticket.issue_type == "Story"
    assert ticket.linked_issues == ("ABC-1", "ABC-2")
    assert ticket.description.startswith("Implement login")
    assert ticket.acceptance_criteria == ("User can log in", "User can log out")


def test_bearer_auth_without_email():
    client = JiraClient("https://jira.example.com", "pat-token")
    with patch("dod_agent.services.jira_client.requests.request", return_value=_response(ISSUE_PAYLOAD)) as mock_request:
        client.fetch_ticket("ABC-123")

    kwargs = mock_request.call_args[1]
    assert "auth" not in kwargs
    assert kwargs["headers"]["Authorization"] == "Bearer pat-token"


def test_post_comment_sends_adf_paragraphs(client):
    with patch("dod_agent.services.jira_client.requests.request", return_value=_response({"id": "10"})) as mock_request:
        result = client.post_comment("ABC-1", "h1. Title\n\n- [ ] item")

    args, kwargs = mock_request.call_args
    assert args == ("POST", "https://jira.example.com/rest/api/3/issue/ABC-1/comment")
    assert result == {"id": "10"}
    body = kwargs["json"]["body"]
    assert body["type"] == "doc"
    assert [paragraph["content"] for paragraph in body["content"]] == [
        [{"type": "text", "text": "h1. Title"}],
        [],
        [{"type": "text", "text": "- [ ] item"}],
    ]


def test_post_comment_with_empty_response(client):
    with patch("dod_agent.services.jira_client.requests.request", return_value=_response(None, 201)):
        assert client.post_comment("ABC-1", "text") == {}


@pytest.mark.parametrize("status,fragment", [
    (401, "authentication failed"),
    (403, "authorization failed"),
    (404, "not found"),
    (429, "rate limit exceeded"),
    (503, "server error"),
    (418, "status 418"),
])
def test_http_errors_are_translated(client, status, fragment):
    with patch("dod_agent.services.jira_client.requests.request", return_value=_response({}, status)):
        with pytest.raises(JiraClientError, match=fragment):
            client.fetch_ticket("ABC-123")


def test_connection_error_is_translated(client):
    with patch(
        "dod_agent.services.jira_client.requests.request",
        side_effect=requests.exceptions.ConnectionError("refused"),
    ):
        with pytest.raises(JiraClientError, match="unreachable"):
            client.fetch_ticket("ABC-123")


def test_timeout_is_translated(client):
    with patch(
        "dod_agent.services.jira_client.requests.request",
        side_effect=requests.exceptions.Timeout("slow"),
    ):
        with pytest.raises(JiraClientError, match="timeout"):
            client.post_comment("ABC-123", "text")


def test_extract_adf_text_variants():
    assert extract_adf_text("already plain") == "already plain"
    assert extract_adf_text(None) == ""
    assert extract_adf_text({"type": "doc", "content": []}) == ""

    adf = {
        "type": "doc",
        "content": [
            {"type": "paragraph", "content": [
                {"type": "text", "text": "line one"},
                {"type": "hardBreak"},
                {"type": "text", "text": "line two"},
            ]},
            {"type": "orderedList", "content": [
                {"type": "listItem", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "first"}]}]},
                {"type": "listItem", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "second"}]}]},
            ]},
        ],
    }
    lines = [line for line in extract_adf_text(adf).split("\n") if line]
    assert lines == ["line one", "line two", "1. first", "2. second"]


def test_extract_linked_issues_skips_incomplete_links():
    links = [{"outwardIssue": {"key": "A-1"}}, {"type": {"name": "Blocks"}}, {"inwardIssue": {}}]
    assert extract_linked_issues(links) == ["A-1"]


def test_build_adf_document():
    document = build_adf_document("one\n\ntwo")
    assert document["version"] == 1
    assert len(document["content"]) == 3
    assert document["content"][1] == {"type": "paragraph", "content": []}
