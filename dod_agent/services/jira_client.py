"""
Jira client for fetching tickets and posting DoD comments.

Talks to Jira REST API v3. Ticket descriptions are converted from Atlassian
Document Format (ADF) to plain text and scanned for acceptance criteria.
"""
from typing import Any, Dict, List, Optional
import logging
import requests
from requests.auth import HTTPBasicAuth
from dod_agent.models.ticket import JiraTicket
from dod_agent.services.criteria_extractor import extract_acceptance_criteria

logger = logging.getLogger(__name__)

# ADF nodes followed by a line break when flattened to text
BLOCK_NODE_TYPES = ("paragraph", "heading", "listItem")
LIST_NODE_TYPES = ("bulletList", "orderedList")
SERVER_ERROR_STATUSES = (500, 502, 503, 504)


class JiraClientError(Exception):
    """Raised when Jira API calls fail."""
    pass


class JiraClient:
    """Client for reading Jira tickets and adding comments."""

    def __init__(
        self,
        base_url: str,
        api_token: str,
        email: Optional[str] = None,
        timeout: int = 30
    ):
        """
        Initialize Jira client.

        Args:
            base_url: Jira instance URL (e.g., "https://yourcompany.atlassian.net")
            api_token: Jira API token (or personal access token)
            email: Jira user email; when set, basic auth is used instead of a bearer token
            timeout: Request timeout in seconds
        """
        self.jira_url = (base_url or "").rstrip("/")
        self.api_token = api_token
        self.email = email
        self.timeout = timeout

        if not self.jira_url:
            raise JiraClientError("Jira base URL cannot be empty")
        if not self.api_token:
            raise JiraClientError("Jira API token cannot be empty")

    def _auth_kwargs(self) -> Dict[str, Any]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.email:
            return {"auth": HTTPBasicAuth(self.email, self.api_token), "headers": headers}
        headers["Authorization"] = f"Bearer {self.api_token}"
        return {"headers": headers}

    def _make_request(
        self,
        endpoint: str,
        ticket_key: str,
        operation: str,
        method: str = "GET",
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Make authenticated request to Jira API.

        Raises:
            JiraClientError: With a descriptive message if the request fails
        """
        url = f"{self.jira_url}{endpoint}"
        try:
            response = requests.request(
                method,
                url,
                json=payload,
                timeout=self.timeout,
                **self._auth_kwargs()
            )
            response.raise_for_status()
            if response.content:
                return response.json()
            return {}
        except requests.exceptions.RequestException as e:
            raise self._translate_error(e, ticket_key, operation) from e

    def fetch_ticket(self, ticket_key: str) -> JiraTicket:
        """
        Fetch a Jira ticket by its key.

        Args:
            ticket_key: Jira ticket key (e.g., "ABC-123")

        Returns:
            JiraTicket with acceptance criteria extracted from the description

        Raises:
            JiraClientError: If the ticket cannot be fetched
        """
        logger.info("Fetching Jira ticket %s", ticket_key)
        data = self._make_request(
            f"/rest/api/3/issue/{ticket_key}",
            ticket_key,
            "fetching ticket"
        )
        return self.parse_ticket(data)

    def post_comment(self, ticket_key: str, comment: str) -> Dict[str, Any]:
        """
        Post a comment to a Jira ticket, one ADF paragraph per line.

        Raises:
            JiraClientError: If the comment cannot be posted
        """
        logger.info("Posting DoD comment to %s (%d chars)", ticket_key, len(comment))
        return self._make_request(
            f"/rest/api/3/issue/{ticket_key}/comment",
            ticket_key,
            "posting comment",
            method="POST",
            payload={"body": build_adf_document(comment)}
        )

    def parse_ticket(self, data: Dict[str, Any]) -> JiraTicket:
        """Convert a Jira API v3 issue payload into a JiraTicket."""
        fields = data.get("fields") or {}
        description = extract_adf_text(fields.get("description"))

        return JiraTicket(
            key=data.get("key", ""),
            summary=fields.get("summary") or "",
            description=description,
            labels=fields.get("labels") or [],
            issue_type=(fields.get("issuetype") or {}).get("name", ""),
            linked_issues=extract_linked_issues(fields.get("issuelinks") or []),
            acceptance_criteria=extract_acceptance_criteria(description),
        )

    def _translate_error(
        self,
        error: requests.exceptions.RequestException,
        ticket_key: str,
        operation: str
    ) -> JiraClientError:
        if isinstance(error, requests.exceptions.ConnectionError):
            return JiraClientError(
                f"Jira API unreachable while {operation}: Unable to connect to {self.jira_url}"
            )
        if isinstance(error, requests.exceptions.Timeout):
            return JiraClientError(
                f"Jira API timeout: Request timed out while {operation} for {ticket_key}"
            )

        response = getattr(error, "response", None)
        if response is not None:
            status = response.status_code
            if status == 401:
                return JiraClientError(
                    f"Jira authentication failed while {operation}: Invalid or missing API token"
                )
            if status == 403:
                return JiraClientError(
                    f"Jira authorization failed while {operation}: "
                    f"Token does not have permission to access {ticket_key}"
                )
            if status == 404:
                return JiraClientError(
                    f"Jira resource not found while {operation}: {ticket_key} does not exist"
                )
            if status == 429:
                return JiraClientError(
                    f"Jira rate limit exceeded while {operation}: Too many requests, please try again later"
                )
            if status in SERVER_ERROR_STATUSES:
                return JiraClientError(
                    f"Jira server error while {operation}: The Jira API returned status {status}"
                )
            return JiraClientError(
                f"Jira API error: {operation} failed for {ticket_key} with status {status}"
            )

        return JiraClientError(f"Unexpected error while {operation} for {ticket_key}: {error}")


def extract_adf_text(adf_content: Any) -> str:
    """
    Extract plain text from Atlassian Document Format (ADF).

    Paragraphs, headings and list items end with a newline, and list items
    keep a "- " or "N. " marker, so that list structure survives for
    acceptance criteria extraction.
    """
    if isinstance(adf_content, str):
        return adf_content
    if not isinstance(adf_content, dict) or not adf_content.get("content"):
        return ""

    parts: List[str] = []

    def extract_node(node: Dict[str, Any]) -> None:
        node_type = node.get("type")
        if node_type == "text":
            parts.append(node.get("text", ""))
        elif node_type == "hardBreak":
            parts.append("\n")
        elif node_type in LIST_NODE_TYPES:
            for index, item in enumerate(node.get("content") or [], start=1):
                parts.append("- " if node_type == "bulletList" else f"{index}. ")
                extract_node(item)
        elif node.get("content"):
            for child in node["content"]:
                extract_node(child)
            if node_type in BLOCK_NODE_TYPES:
                parts.append("\n")

    for node in adf_content["content"]:
        extract_node(node)

    return "".join(parts).strip()


def extract_linked_issues(issue_links: List[Dict[str, Any]]) -> List[str]:
    """Collect keys of inward and outward linked issues."""
    linked: List[str] = []
    for link in issue_links:
        for direction in ("outwardIssue", "inwardIssue"):
            key = (link.get(direction) or {}).get("key")
            if key:
                linked.append(key)
    return linked


def build_adf_document(text: str) -> Dict[str, Any]:
    """Build an ADF document with one paragraph per line; blank lines become empty paragraphs."""
    content = []
    for line in text.split("\n"):
        if line.strip():
            content.append({"type": "paragraph", "content": [{"type": "text", "text": line}]})
        else:
            content.append({"type": "paragraph", "content": []})
    return {"type": "doc", "version": 1, "content": content}

