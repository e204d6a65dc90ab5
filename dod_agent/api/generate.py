"""
POST /dod endpoints for Definition-of-Done generation.
"""
from datetime import datetime
import logging
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
from dod_agent.agent.orchestrator import generate_dod_from_input
from dod_agent.config import ConfigError, ConfigLoader, settings
from dod_agent.models.document import DoDTable
from dod_agent.models.enums import TicketType
from dod_agent.models.request import DoDInput
from dod_agent.services.input_parser import InputParser
from dod_agent.services.markdown_formatter import MarkdownFormatter

logger = logging.getLogger(__name__)

router = APIRouter()


class DoDMeta(BaseModel):
    """Metadata about a generated DoD."""

    ticket_key: str
    ticket_type: TicketType
    generated_at: datetime
    agent_version: str


class DoDResponse(BaseModel):
    """Response model for DoD generation."""

    meta: DoDMeta
    dod: str = Field(..., description="Definition of Done in markdown")
    jira_markup: Optional[str] = Field(None, description="Definition of Done in Jira wiki markup")
    document: DoDTable
    errors: List[str] = Field(default_factory=list, description="Non-fatal problems (MR fetch, comment posting)")
    success: bool


class JiraFormatRequest(BaseModel):
    """Request model for markdown to Jira conversion."""

    markdown: str = Field(..., description="Markdown text to convert")


class JiraFormatResponse(BaseModel):
    jira_markup: str


@router.post("/dod", response_model=DoDResponse)
def generate_dod(request: DoDInput) -> DoDResponse:
    """
    Generate a Definition of Done for a Jira ticket.

    Runs in the FastAPI threadpool: the Jira and GitLab clients block.

    Raises:
        HTTPException: 400 for invalid input or configuration, 502 when the ticket cannot be fetched
    """
    validation = InputParser().validate_input(request)
    if not validation.valid:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid input: {', '.join(validation.errors)}"
        )

    try:
        config = ConfigLoader().resolve_config()
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    result = generate_dod_from_input(request, config)

    if result.document is None:
        raise HTTPException(status_code=502, detail="; ".join(result.errors))

    return DoDResponse(
        meta=DoDMeta(
            ticket_key=result.document.metadata.ticket_key,
            ticket_type=result.document.metadata.ticket_type,
            generated_at=result.document.metadata.generated_at,
            agent_version=settings.api_version,
        ),
        dod=result.dod,
        jira_markup=result.jira_markup,
        document=result.document,
        errors=result.errors,
        success=result.success,
    )


@router.post("/dod/format/jira", response_model=JiraFormatResponse)
async def format_jira(request: JiraFormatRequest) -> JiraFormatResponse:
    """Convert markdown to Jira wiki markup."""
    return JiraFormatResponse(jira_markup=MarkdownFormatter().format_for_jira(request.markdown))
