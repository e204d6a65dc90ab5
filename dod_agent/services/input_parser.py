"""
Validation and normalization of DoD generation requests.
"""
from typing import Any, Dict, List, Union
from urllib.parse import urlparse
import re
from pydantic import ValidationError
from dod_agent.models.enums import TicketType
from dod_agent.models.request import DoDInput, ParsedInput, ValidationResult
from dod_agent.models.ticket import JiraTicket

TICKET_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9]+-\d+$")
VALID_TYPES = [ticket_type.value for ticket_type in TicketType]


class InputValidationError(Exception):
    """Raised when a generation request is invalid."""
    pass


def extract_jira_ticket_key(value: str) -> str:
    """
    Extract a Jira ticket key from a bare key or a /browse/ URL.

    Supports:
    - ABC-123
    - https://jira.example.com/browse/ABC-123
    - https://example.atlassian.net/browse/PROJ-456

    Raises:
        InputValidationError: If no ticket key can be found
    """
    value = value.strip()
    if TICKET_KEY_PATTERN.match(value):
        return value

    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputValidationError(
            "Invalid URL format. Expected format: https://jira.example.com/browse/TICKET-KEY "
            "or direct ticket key like ABC-123"
        )

    path_parts = parsed.path.split("/")
    if "browse" in path_parts:
        browse_index = path_parts.index("browse")
        if browse_index < len(path_parts) - 1 and TICKET_KEY_PATTERN.match(path_parts[browse_index + 1]):
            return path_parts[browse_index + 1]

    raise InputValidationError("URL does not contain a valid Jira ticket key in /browse/ path")


def validate_gitlab_mr_url(url: str) -> None:
    """
    Validate a GitLab merge request URL.

    Raises:
        InputValidationError: If the URL is not http(s) or has no numeric merge_requests segment
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputValidationError(
            "Invalid URL format. Expected format: https://gitlab.example.com/project/-/merge_requests/NUMBER"
        )

    path_parts = parsed.path.split("/")
    if "merge_requests" not in path_parts:
        raise InputValidationError("URL does not contain /merge_requests/ path")
    mr_index = path_parts.index("merge_requests")
    if mr_index >= len(path_parts) - 1:
        raise InputValidationError("URL does not contain /merge_requests/ path")
    if not path_parts[mr_index + 1].isdigit():
        raise InputValidationError("Merge request number must be numeric")


def _describe_validation_errors(error: ValidationError) -> List[str]:
    return [f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in error.errors()]


class InputParser:
    """Validates generation requests and resolves the ticket source."""

    def validate_input(self, raw_input: Union[DoDInput, Dict[str, Any]]) -> ValidationResult:
        """
        Validate a request and collect every problem found.

        Args:
            raw_input: DoDInput or a plain dictionary with the same keys

        Returns:
            ValidationResult with all error messages
        """
        errors = []

        if isinstance(raw_input, dict):
            try:
                raw_input = DoDInput(**raw_input)
            except ValidationError as e:
                return ValidationResult(
                    valid=False,
                    errors=_describe_validation_errors(e)
                )

        if not raw_input.ticket_url and raw_input.ticket_json is None:
            errors.append("Either ticket_url or ticket_json must be provided")

        if raw_input.ticket_url:
            try:
                extract_jira_ticket_key(raw_input.ticket_url)
            except InputValidationError as e:
                errors.append(f"Invalid ticket_url format: {e}")

        if raw_input.ticket_json is not None:
            try:
                JiraTicket.model_validate(raw_input.ticket_json)
            except ValidationError as e:
                errors.append(
                    "ticket_json must be a valid JiraTicket object: "
                    + "; ".join(_describe_validation_errors(e))
                )

        if raw_input.mr_url:
            try:
                validate_gitlab_mr_url(raw_input.mr_url)
            except InputValidationError as e:
                errors.append(f"Invalid mr_url format: {e}")

        if raw_input.type and raw_input.type not in VALID_TYPES:
            errors.append(f"type must be one of: {', '.join(VALID_TYPES)}")

        return ValidationResult(valid=not errors, errors=errors)

    def parse_input(self, raw_input: Union[DoDInput, Dict[str, Any]]) -> ParsedInput:
        """
        Parse and validate a request. ticket_url takes precedence over ticket_json.

        Raises:
            InputValidationError: If the request is invalid
        """
        validation = self.validate_input(raw_input)
        if not validation.valid:
            raise InputValidationError(f"Invalid input: {', '.join(validation.errors)}")

        dod_input = DoDInput(**raw_input) if isinstance(raw_input, dict) else raw_input

        if dod_input.ticket_url:
            ticket_source = "url"
            ticket_identifier = extract_jira_ticket_key(dod_input.ticket_url)
            ticket_data = None
        else:
            ticket_source = "json"
            ticket_data = JiraTicket.model_validate(dod_input.ticket_json)
            ticket_identifier = ticket_data.key

        return ParsedInput(
            ticket_source=ticket_source,
            ticket_identifier=ticket_identifier,
            ticket_data=ticket_data,
            ticket_type=TicketType(dod_input.type) if dod_input.type else None,
            mr_url=dod_input.mr_url or None,
            post_comment=dod_input.post_comment,
            jira_token=dod_input.jira_token,
            gitlab_token=dod_input.gitlab_token,
            output_format=dod_input.output_format,
        )
