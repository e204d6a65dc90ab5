"""
Shared fixtures for DoD agent tests.
"""
import pytest
from dod_agent.config import Settings
from dod_agent.models.ticket import JiraTicket

SETTINGS_ENV_VARS = (
    "API_TITLE",
    "API_VERSION",
    "JIRA_BASE_URL",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
    "GITLAB_BASE_URL",
    "GITLAB_TOKEN",
    "DEFAULT_TICKET_TYPE",
    "DEFAULT_POST_COMMENT",
    "REQUEST_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove settings variables from the environment and run from an empty directory."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config():
    """Resolved settings with no credentials configured."""
    return Settings(
        _env_file=None,
        jira_base_url="https://jira.example.com",
        jira_email=None,
        jira_api_token=None,
        gitlab_base_url="https://gitlab.example.com",
        gitlab_token=None,
        default_ticket_type=None,
        default_post_comment=False,
    )


@pytest.fixture
def backend_ticket():
    return JiraTicket(
        key="BACKEND-123",
        summary="Add user export",
        description="Export users as CSV",
        labels=["backend", "api"],
        issue_type="Task",
        acceptance_criteria=["A", "B"],
    )


@pytest.fixture
def frontend_ticket():
    return JiraTicket(
        key="FE-42",
        summary="Redesign settings screen",
        description="Move settings into tabs",
        labels=["frontend"],
        issue_type="Task",
    )


@pytest.fixture
def infrastructure_ticket():
    return JiraTicket(
        key="OPS-7",
        summary="Move staging to new cluster",
        description="Provision nodes with terraform",
        labels=["infra"],
        issue_type="Task",
    )


@pytest.fixture
def ticket_json():
    """Ticket payload in the camelCase shape accepted on input."""
    return {
        "key": "ABC-1",
        "summary": "Add login endpoint",
        "description": "Acceptance Criteria:\n1. User can log in\n2. Invalid password is rejected",
        "labels": ["backend"],
        "issueType": "Story",
        "linkedIssues": ["ABC-2"],
    }
