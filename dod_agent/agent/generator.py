"""
Definition-of-Done document assembly.

Builds the ordered section list for a ticket:

    Acceptance Criteria, Automated Tests, Manual Test Steps,
    Documentation Updates, Continuous Integration,
    <type-specific sections>, Reviewer Checklist

Content depends on the resolved ticket type and on keyword signals found in
the ticket summary and description. Generation is a pure function of its
inputs apart from the timestamp.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union
from dod_agent.agent.rules import (
    CI_STATUS_DISPLAY,
    UNKNOWN_STATUS_GLYPH,
    ChecklistContent,
    ContentSignals,
    RowSpec,
)
from dod_agent.models.document import DoDMetadata, DoDRow, DoDSection, DoDTable
from dod_agent.models.enums import ReviewStatus, TicketType
from dod_agent.models.ticket import JiraTicket, MergeRequest
from dod_agent.services.criteria_extractor import extract_acceptance_criteria
from dod_agent.services.ticket_classifier import infer_ticket_type


def _row(row_spec: RowSpec, checked: bool = False) -> DoDRow:
    category, items = row_spec
    return DoDRow(category=category, items=list(items), checked=checked)


def _combined_text(ticket: JiraTicket) -> str:
    return f"{ticket.summary} {ticket.description}".lower()


def _contains_any(text: str, terms: Iterable[str]) -> bool:
    return any(term in text for term in terms)


def has_api_related_content(ticket: JiraTicket) -> bool:
    """True when summary or description mentions API-related terms."""
    return _contains_any(_combined_text(ticket), ContentSignals.API_TERMS)


def has_data_change_content(ticket: JiraTicket) -> bool:
    """True when summary or description mentions data/schema terms."""
    return _contains_any(_combined_text(ticket), ContentSignals.DATA_TERMS)


def is_feature_story(ticket: JiraTicket) -> bool:
    """True for Story issues or tickets describing a new feature."""
    if ticket.issue_type.lower() == ContentSignals.FEATURE_ISSUE_TYPE:
        return True
    return _contains_any(_combined_text(ticket), ContentSignals.FEATURE_TERMS)


def get_ci_status_indicator(status: Union[ReviewStatus, str]) -> str:
    """Return the display text for a CI status, e.g. '✓ passed'."""
    try:
        glyph, label = CI_STATUS_DISPLAY[ReviewStatus(status)]
    except ValueError:
        return f"{UNKNOWN_STATUS_GLYPH} {status}"
    return f"{glyph} {label}"


class DoDGenerator:
    """Assembles a DoDTable from a ticket and an optional merge request."""

    def generate_dod(
        self,
        ticket: JiraTicket,
        merge_request: Optional[MergeRequest] = None,
        ticket_type: Optional[TicketType] = None
    ) -> DoDTable:
        """
        Generate the Definition of Done for a ticket.

        Args:
            ticket: Ticket to generate the DoD for
            merge_request: Optional merge request supplying the CI status
            ticket_type: Explicit ticket type; inferred from the ticket when omitted

        Returns:
            DoDTable whose last section is always the Reviewer Checklist
        """
        resolved_type = infer_ticket_type(ticket, ticket_type)

        sections = [
            self.generate_acceptance_criteria_section(ticket),
            self.generate_testing_section(resolved_type, ticket),
            self.generate_manual_test_section(resolved_type, ticket),
            self.generate_documentation_section(resolved_type, ticket),
            self.generate_ci_section(merge_request),
            self.generate_reviewer_checklist(),
        ]
        # Type-specific sections go right before the Reviewer Checklist
        sections[-1:-1] = self.generate_type_specific_sections(resolved_type)

        return DoDTable(
            sections=sections,
            metadata=DoDMetadata(
                ticket_key=ticket.key,
                ticket_type=resolved_type,
                generated_at=datetime.now(timezone.utc),
            ),
        )

    def generate_acceptance_criteria_section(self, ticket: JiraTicket) -> DoDSection:
        criteria = ticket.acceptance_criteria
        if criteria is None:
            criteria = extract_acceptance_criteria(ticket.description)

        title = ChecklistContent.ACCEPTANCE_CRITERIA_TITLE
        if criteria:
            rows = [DoDRow(category=title, items=[criterion]) for criterion in criteria]
        else:
            rows = [DoDRow(category=title, items=[ChecklistContent.CRITERIA_PLACEHOLDER])]
        return DoDSection(title=title, rows=rows)

    def generate_testing_section(self, ticket_type: TicketType, ticket: JiraTicket) -> DoDSection:
        row_specs = ChecklistContent.AUTOMATED_TEST_ROWS.get(
            ticket_type, ChecklistContent.DEFAULT_AUTOMATED_TEST_ROWS
        )
        rows = [_row(row_spec) for row_spec in row_specs]
        if has_api_related_content(ticket):
            rows.append(_row(ChecklistContent.API_CONTRACT_TESTING_ROW))
        return DoDSection(title=ChecklistContent.AUTOMATED_TESTS_TITLE, rows=rows)

    def generate_manual_test_section(self, ticket_type: TicketType, ticket: JiraTicket) -> DoDSection:
        row_spec = ChecklistContent.MANUAL_TEST_ROWS.get(ticket_type, ChecklistContent.DEFAULT_MANUAL_TEST_ROW)
        rows = [_row(row_spec)]
        if has_data_change_content(ticket):
            rows.append(_row(ChecklistContent.DATA_VALIDATION_ROW))
        return DoDSection(title=ChecklistContent.MANUAL_TESTS_TITLE, rows=rows)

    def generate_documentation_section(self, ticket_type: TicketType, ticket: JiraTicket) -> DoDSection:
        items: List[str] = list(ChecklistContent.BASE_DOCUMENTATION_ITEMS)
        if ticket_type == TicketType.INFRASTRUCTURE:
            items.extend(ChecklistContent.RUNBOOK_ITEMS)
        if is_feature_story(ticket):
            items.extend(ChecklistContent.USER_DOCUMENTATION_ITEMS)

        row = DoDRow(category=ChecklistContent.DOCUMENTATION_CATEGORY, items=items)
        return DoDSection(title=ChecklistContent.DOCUMENTATION_TITLE, rows=[row])

    def generate_ci_section(self, merge_request: Optional[MergeRequest]) -> DoDSection:
        if merge_request is not None:
            row = DoDRow(
                category=ChecklistContent.CI_CATEGORY,
                items=[f"CI Status: {get_ci_status_indicator(merge_request.ci_status)}"],
                checked=merge_request.ci_status == ReviewStatus.SUCCEEDED,
            )
        else:
            row = DoDRow(category=ChecklistContent.CI_CATEGORY, items=[ChecklistContent.CI_PLACEHOLDER])
        return DoDSection(title=ChecklistContent.CI_TITLE, rows=[row])

    def generate_type_specific_sections(self, ticket_type: TicketType) -> List[DoDSection]:
        return [
            DoDSection(title=title, rows=[_row(row_spec)])
            for title, row_spec in ChecklistContent.TYPE_SECTIONS.get(ticket_type, ())
        ]

    def generate_reviewer_checklist(self) -> DoDSection:
        return DoDSection(
            title=ChecklistContent.REVIEWER_CHECKLIST_TITLE,
            rows=[_row(ChecklistContent.REVIEWER_CHECKLIST_ROW)],
        )
