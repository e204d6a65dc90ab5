"""
Request/response models for DoD generation.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from dod_agent.models.document import DoDTable
from dod_agent.models.enums import OutputFormat, TicketType
from dod_agent.models.ticket import JiraTicket


class DoDInput(BaseModel):
    """Raw generation request. Validated by InputParser before use."""

    ticket_url: Optional[str] = Field(None, description="Jira ticket URL or bare ticket key (e.g., ABC-123)")
    ticket_json: Optional[Dict[str, Any]] = Field(None, description="Ticket data supplied directly as JSON")
    type: Optional[str] = Field(None, description="Explicit ticket type: backend | frontend | infrastructure")
    mr_url: Optional[str] = Field(None, description="GitLab merge request URL")
    post_comment: bool = Field(default=False, description="Post the generated DoD as a Jira comment")
    jira_token: Optional[str] = Field(None, description="Jira API token (falls back to configuration)")
    gitlab_token: Optional[str] = Field(None, description="GitLab token (falls back to configuration)")
    output_format: OutputFormat = Field(default=OutputFormat.MARKDOWN)


class ValidationResult(BaseModel):
    """Outcome of input validation."""

    valid: bool
    errors: List[str] = Field(default_factory=list)


class ParsedInput(BaseModel):
    """Validated input with the ticket source resolved."""

    ticket_source: Literal["url", "json"]
    ticket_identifier: str
    ticket_data: Optional[JiraTicket] = None
    ticket_type: Optional[TicketType] = None
    mr_url: Optional[str] = None
    post_comment: bool = False
    jira_token: Optional[str] = None
    gitlab_token: Optional[str] = None
    output_format: OutputFormat = OutputFormat.MARKDOWN


class DoDGenerationResult(BaseModel):
    """Result of the end-to-end flow, including partial failures."""

    dod: str = Field(default="", description="Generated DoD in markdown")
    jira_markup: Optional[str] = Field(None, description="Generated DoD in Jira wiki markup (when requested)")
    document: Optional[DoDTable] = Field(None, description="Structured DoD document")
    errors: List[str] = Field(default_factory=list)
    success: bool = False
