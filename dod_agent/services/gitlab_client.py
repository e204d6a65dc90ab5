"""
GitLab client for fetching merge request and pipeline data (REST API v4).

Read-only. The CI status of a merge request is taken from its most recent
pipeline.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple
import logging
import re
import urllib.parse
import requests
from dod_agent.models.enums import ReviewStatus
from dod_agent.models.ticket import MergeRequest

logger = logging.getLogger(__name__)

MR_URL_PATTERN = re.compile(r"/([^/]+(?:/[^/]+)*)/-/merge_requests/(\d+)")

PIPELINE_STATUS_MAP = {
    "success": ReviewStatus.SUCCEEDED,
    "failed": ReviewStatus.FAILED,
    "running": ReviewStatus.RUNNING,
    "pending": ReviewStatus.QUEUED,
    "canceled": ReviewStatus.ABORTED,
    "cancelled": ReviewStatus.ABORTED,
}
SERVER_ERROR_STATUSES = (500, 502, 503, 504)
EPOCH_FLOOR = datetime.min.replace(tzinfo=timezone.utc)


class GitLabClientError(Exception):
    """Raised when GitLab API calls fail."""
    pass


class GitLabClient:
    """Client for fetching GitLab merge requests."""

    def __init__(self, base_url: str, token: str, timeout: int = 30):
        self.gitlab_url = (base_url or "").rstrip("/")
        self.token = token
        self.timeout = timeout

        if not self.gitlab_url:
            raise GitLabClientError("GitLab base URL cannot be empty")
        if not self.token:
            raise GitLabClientError("GitLab token cannot be empty")

    def _make_request(self, endpoint: str, mr_url: str) -> Any:
        url = f"{self.gitlab_url}{endpoint}"
        headers = {"PRIVATE-TOKEN": self.token, "Accept": "application/json"}
        try:
            response = requests.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise self._translate_error(e, mr_url) from e

    def fetch_merge_request(self, mr_url: str) -> MergeRequest:
        """
        Fetch a merge request and the status of its most recent pipeline.

        Args:
            mr_url: Merge request URL (e.g., "https://gitlab.com/group/project/-/merge_requests/123")

        Returns:
            MergeRequest

        Raises:
            GitLabClientError: If the URL is malformed or the API call fails
        """
        project_path, mr_iid = parse_mr_url(mr_url)
        encoded_path = urllib.parse.quote(project_path, safe="")
        base_endpoint = f"/api/v4/projects/{encoded_path}/merge_requests/{mr_iid}"

        logger.info("Fetching GitLab merge request %s!%s", project_path, mr_iid)
        mr_data = self._make_request(base_endpoint, mr_url)
        pipelines = self._make_request(f"{base_endpoint}/pipelines", mr_url)

        return MergeRequest(
            title=mr_data.get("title") or "",
            ci_status=select_most_recent_pipeline_status(pipelines),
            changed_files=extract_changed_files(mr_data),
            web_url=mr_url,
        )

    def _translate_error(self, error: requests.exceptions.RequestException, mr_url: str) -> GitLabClientError:
        if isinstance(error, requests.exceptions.ConnectionError):
            return GitLabClientError(f"GitLab API unreachable: Unable to connect to {self.gitlab_url}")
        if isinstance(error, requests.exceptions.Timeout):
            return GitLabClientError(f"GitLab API timeout: Request timed out while fetching MR {mr_url}")

        response = getattr(error, "response", None)
        if response is not None:
            status = response.status_code
            if status == 401:
                return GitLabClientError("GitLab authentication failed: Invalid or missing API token")
            if status == 403:
                return GitLabClientError(
                    f"GitLab authorization failed: Token does not have permission to access {mr_url}"
                )
            if status == 404:
                return GitLabClientError(f"GitLab merge request not found: {mr_url} does not exist")
            if status == 429:
                return GitLabClientError("GitLab rate limit exceeded: Too many requests, please try again later")
            if status in SERVER_ERROR_STATUSES:
                return GitLabClientError(f"GitLab server error: The GitLab API returned status {status}")
            return GitLabClientError(f"GitLab API error: Fetching MR failed for {mr_url} with status {status}")

        return GitLabClientError(f"Unexpected error while fetching MR {mr_url}: {error}")


def parse_mr_url(mr_url: str) -> Tuple[str, str]:
    """
    Split a merge request URL into (project path, MR IID).

    Raises:
        GitLabClientError: If the URL has no /-/merge_requests/<iid> segment
    """
    path = urllib.parse.urlparse(mr_url).path
    match = MR_URL_PATTERN.search(path)
    if not match:
        raise GitLabClientError(f"Invalid GitLab MR URL format: {mr_url}")
    return match.group(1), match.group(2)


def _pipeline_timestamp(pipeline: Dict[str, Any]) -> datetime:
    value = pipeline.get("updated_at") or pipeline.get("created_at")
    if not value:
        return EPOCH_FLOOR
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return EPOCH_FLOOR
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def select_most_recent_pipeline_status(pipelines: List[Dict[str, Any]]) -> ReviewStatus:
    """Map the status of the most recently updated pipeline; no pipelines means queued."""
    if not pipelines:
        return ReviewStatus.QUEUED

    most_recent = max(pipelines, key=_pipeline_timestamp)
    status = (most_recent.get("status") or "").lower()
    return PIPELINE_STATUS_MAP.get(status, ReviewStatus.QUEUED)


def extract_changed_files(mr_data: Dict[str, Any]) -> List[str]:
    """Return changed file paths when the MR payload includes changes."""
    changes = mr_data.get("changes")
    if not isinstance(changes, list):
        return []
    paths = [change.get("new_path") or change.get("old_path") or "" for change in changes]
    return [path for path in paths if path]
