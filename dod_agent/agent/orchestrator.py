"""
End-to-end DoD generation: parse input, fetch ticket and merge request,
generate, render and optionally post back to Jira.

Fatal problems (invalid input, ticket unavailable) stop the flow. Merge
request and comment posting problems are recorded in `errors` and the DoD is
still produced.
"""
from typing import List, Optional, Union, Dict, Any
import logging
from dod_agent.agent.generator import DoDGenerator
from dod_agent.config import Settings
from dod_agent.models.enums import OutputFormat
from dod_agent.models.request import DoDGenerationResult, DoDInput, ParsedInput
from dod_agent.models.ticket import JiraTicket, MergeRequest
from dod_agent.services.gitlab_client import GitLabClient, GitLabClientError
from dod_agent.services.input_parser import InputParser, InputValidationError
from dod_agent.services.jira_client import JiraClient, JiraClientError
from dod_agent.services.markdown_formatter import MarkdownFormatter

logger = logging.getLogger(__name__)


def _jira_client(token: str, config: Settings) -> JiraClient:
    return JiraClient(
        base_url=config.jira_base_url,
        api_token=token,
        email=config.jira_email,
        timeout=config.request_timeout,
    )


def _resolve_ticket(parsed: ParsedInput, jira_token: Optional[str], config: Settings) -> JiraTicket:
    if parsed.ticket_source == "json":
        return parsed.ticket_data

    if not jira_token:
        raise JiraClientError(
            "Jira token is required to fetch tickets by URL. "
            "Provide jira_token or set JIRA_API_TOKEN."
        )
    return _jira_client(jira_token, config).fetch_ticket(parsed.ticket_identifier)


def _resolve_merge_request(
    parsed: ParsedInput,
    gitlab_token: Optional[str],
    config: Settings,
    errors: List[str]
) -> Optional[MergeRequest]:
    if not parsed.mr_url:
        return None

    if not gitlab_token:
        logger.warning("Skipping merge request %s: no GitLab token configured", parsed.mr_url)
        errors.append("GitLab token is required to fetch merge request data. CI status was not included.")
        return None

    try:
        client = GitLabClient(config.gitlab_base_url, gitlab_token, timeout=config.request_timeout)
        return client.fetch_merge_request(parsed.mr_url)
    except GitLabClientError as e:
        logger.warning("Failed to fetch merge request %s: %s", parsed.mr_url, e)
        errors.append(f"Failed to fetch merge request: {e}")
        return None


def generate_dod_from_input(
    dod_input: Union[DoDInput, Dict[str, Any]],
    config: Settings
) -> DoDGenerationResult:
    """
    Run the full generation flow for one request.

    Args:
        dod_input: Raw request (DoDInput or dict with the same keys)
        config: Resolved settings supplying tokens, base URLs and defaults

    Returns:
        DoDGenerationResult; success is True only when no errors were recorded
    """
    errors: List[str] = []

    try:
        parsed = InputParser().parse_input(dod_input)
    except InputValidationError as e:
        logger.warning("Rejected DoD request: %s", e)
        return DoDGenerationResult(errors=[str(e)], success=False)

    logger.info(
        "Generating DoD for %s (source=%s, mr=%s, post_comment=%s)",
        parsed.ticket_identifier,
        parsed.ticket_source,
        bool(parsed.mr_url),
        parsed.post_comment,
    )

    jira_token = parsed.jira_token or config.jira_api_token
    gitlab_token = parsed.gitlab_token or config.gitlab_token

    try:
        ticket = _resolve_ticket(parsed, jira_token, config)
    except JiraClientError as e:
        logger.error("Failed to fetch ticket %s: %s", parsed.ticket_identifier, e)
        return DoDGenerationResult(errors=[f"Failed to fetch ticket: {e}"], success=False)

    merge_request = _resolve_merge_request(parsed, gitlab_token, config, errors)

    dod_table = DoDGenerator().generate_dod(
        ticket,
        merge_request=merge_request,
        ticket_type=parsed.ticket_type or config.default_ticket_type,
    )
    logger.info(
        "Generated DoD for %s: type=%s, sections=%d",
        ticket.key,
        dod_table.metadata.ticket_type.value,
        len(dod_table.sections),
    )

    formatter = MarkdownFormatter()
    markdown = formatter.format_dod_table(dod_table)
    jira_markup = None
    if parsed.output_format == OutputFormat.JIRA or parsed.post_comment:
        jira_markup = formatter.format_for_jira(markdown)

    if parsed.post_comment:
        if not jira_token:
            errors.append("Jira token is required to post comments. The DoD was not posted.")
        else:
            try:
                _jira_client(jira_token, config).post_comment(ticket.key, jira_markup)
                logger.info("Posted DoD comment to %s", ticket.key)
            except JiraClientError as e:
                logger.warning("Failed to post DoD comment to %s: %s", ticket.key, e)
                errors.append(f"Failed to post comment: {e}")

    return DoDGenerationResult(
        dod=markdown,
        jira_markup=jira_markup,
        document=dod_table,
        errors=errors,
        success=not errors,
    )
