"""
Tests for the GitLab client. HTTP calls are mocked at requests.get.
"""
from unittest.mock import Mock, patch
import pytest
import requests
from dod_agent.models.enums import ReviewStatus
from dod_agent.services.gitlab_client import (
    GitLabClient,
    GitLabClientError,
    extract_changed_files,
    parse_mr_url,
    select_most_recent_pipeline_status,
)

MR_URL = "https://gitlab.com/group/project/-/merge_requests/42"


def _response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


@pytest.fixture
def client():
    return GitLabClient("https://gitlab.com/", "glpat-secret")


def test_parse_mr_url():
    assert parse_mr_url(MR_URL) == ("group/project", "42")
    assert parse_mr_url("https://git.example.com/a/b/c/-/merge_requests/7?tab=pipelines") == ("a/b/c", "7")


def test_parse_mr_url_rejects_other_urls():
    with pytest.raises(GitLabClientError, match="Invalid GitLab MR URL"):
        parse_mr_url("https://gitlab.com/group/project/-/issues/1")


def test_fetch_merge_request(client):
    mr_payload = {
        "title": "Add login endpoint",
        "changes": [{"new_path": "app/login.py", "old_path": "app/login.py"}, {"old_path": "old.py"}],
    }
    pipelines = [
        {"status": "failed", "updated_at": "2024-01-01T10:00:00Z"},
        {"status": "success", "updated_at": "2024-01-02T10:00:00Z"},
    ]
    with patch(
        "dod_agent.services.gitlab_client.requests.get",
        side_effect=[_response(mr_payload), _response(pipelines)],
    ) as mock_get:
        merge_request = client.fetch_merge_request(MR_URL)

    urls = [call[0][0] for call in mock_get.call_args_list]
    assert urls == [
        "https://gitlab.com/api/v4/projects/group%2Fproject/merge_requests/42",
        "https://gitlab.com/api/v4/projects/group%2Fproject/merge_requests/42/pipelines",
    ]
    assert mock_get.call_args[1]["headers"]["PRIVATE-TOKEN"] == "glpat-secret"

    assert merge_request.title == "Add login endpoint"
    assert merge_request.ci_status == ReviewStatus.SUCCEEDED
    assert merge_request.changed_files == ("app/login.py", "old.py")
    assert merge_request.web_url == MR_URL


def test_most_recent_pipeline_wins_regardless_of_order():
    pipelines = [
        {"status": "running", "updated_at": "2024-03-01T12:00:00+00:00"},
        {"status": "success", "created_at": "2024-01-01T00:00:00Z"},
    ]
    assert select_most_recent_pipeline_status(pipelines) == ReviewStatus.RUNNING


@pytest.mark.parametrize("status,expected", [
    ("success", ReviewStatus.SUCCEEDED),
    ("failed", ReviewStatus.FAILED),
    ("running", ReviewStatus.RUNNING),
    ("pending", ReviewStatus.QUEUED),
    ("canceled", ReviewStatus.ABORTED),
    ("cancelled", ReviewStatus.ABORTED),
    ("skipped", ReviewStatus.QUEUED),
])
def test_pipeline_status_mapping(status, expected):
    assert select_most_recent_pipeline_status([{"status": status}]) == expected


def test_no_pipelines_is_queued():
    assert select_most_recent_pipeline_status([]) == ReviewStatus.QUEUED


def test_changed_files_missing():
    assert extract_changed_files({"title": "x"}) == []


@pytest.mark.parametrize("status,fragment", [
    (401, "authentication failed"),
    (403, "authorization failed"),
    (404, "not found"),
    (429, "rate limit"),
    (500, "server error"),
])
def test_http_errors_are_translated(client, status, fragment):
    with patch("dod_agent.services.gitlab_client.requests.get", return_value=_response({}, status)):
        with pytest.raises(GitLabClientError, match=fragment):
            client.fetch_merge_request(MR_URL)


def test_connection_error_is_translated(client):
    with patch(
        "dod_agent.services.gitlab_client.requests.get",
        side_effect=requests.exceptions.ConnectionError("refused"),
    ):
        with pytest.raises(GitLabClientError, match="unreachable"):
            client.fetch_merge_request(MR_URL)


def test_init_requires_token():
    with pytest.raises(GitLabClientError, match="token"):
        GitLabClient("https://gitlab.com", "")
