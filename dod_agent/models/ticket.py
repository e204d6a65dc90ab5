"""
Pydantic models for the work item inputs: Jira tickets and GitLab merge requests.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple
from dod_agent.models.enums import ReviewStatus


class JiraTicket(BaseModel):
    """
    A Jira ticket as consumed by the generator.

    Accepts both snake_case field names and the camelCase JSON shape used by
    ticket exports (issueType, linkedIssues, acceptanceCriteria).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str = Field(..., description="Ticket key, unique within the Jira instance (e.g., ABC-123)")
    summary: str = Field(default="", description="Ticket title")
    description: str = Field(default="", description="Free-form description text")
    labels: Tuple[str, ...] = Field(default_factory=tuple, description="Ticket labels (matched case-insensitively)")
    issue_type: str = Field(default="", alias="issueType", description="Issue kind, e.g. Story, Bug, Task")
    linked_issues: Tuple[str, ...] = Field(
        default_factory=tuple,
        alias="linkedIssues",
        description="Keys of related tickets"
    )
    acceptance_criteria: Optional[Tuple[str, ...]] = Field(
        default=None,
        alias="acceptanceCriteria",
        description="Pre-parsed acceptance criteria. None means extract from the description."
    )


class MergeRequest(BaseModel):
    """A GitLab merge request with the status of its most recent pipeline."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(default="", description="Merge request title")
    ci_status: ReviewStatus = Field(..., alias="ciStatus", description="Status of the most recent pipeline")
    changed_files: Tuple[str, ...] = Field(default_factory=tuple, alias="changedFiles")
    web_url: str = Field(default="", alias="webUrl", description="Canonical link to the merge request")
