"""
Ticket type inference.

Priority order: explicit type > labels > keyword scoring over text > default.
"""
import logging
from typing import Iterable, Optional
from dod_agent.agent.rules import ClassificationRules
from dod_agent.models.enums import TicketType
from dod_agent.models.ticket import JiraTicket

logger = logging.getLogger(__name__)


def infer_ticket_type(ticket: JiraTicket, explicit_type: Optional[TicketType] = None) -> TicketType:
    """
    Infer the ticket type of a Jira ticket.

    Args:
        ticket: Ticket to classify
        explicit_type: Caller-supplied type; always wins when given

    Returns:
        One of backend, frontend, infrastructure (never fails)
    """
    if explicit_type:
        return TicketType(explicit_type)

    from_labels = infer_from_labels(ticket.labels)
    if from_labels:
        logger.debug("Ticket %s classified as %s from labels", ticket.key, from_labels.value)
        return from_labels

    from_text = infer_from_text(ticket.summary, ticket.description, ticket.issue_type)
    if from_text:
        logger.debug("Ticket %s classified as %s from keywords", ticket.key, from_text.value)
        return from_text

    return ClassificationRules.DEFAULT_TYPE


def infer_from_labels(labels: Iterable[str]) -> Optional[TicketType]:
    """
    Match labels against per-type synonyms.

    A label matches when it equals or contains a synonym. Types are checked in
    TYPE_PRIORITY order over the whole label set, so label order never matters.
    """
    normalized = [label.lower() for label in labels]
    if not normalized:
        return None

    for ticket_type in ClassificationRules.TYPE_PRIORITY:
        synonyms = ClassificationRules.LABEL_SYNONYMS[ticket_type]
        if any(synonym in label for label in normalized for synonym in synonyms):
            return ticket_type
    return None


def score_text(text: str) -> dict:
    """Count how many distinct keywords of each type occur in text."""
    combined = text.lower()
    return {
        ticket_type: sum(1 for keyword in keywords if keyword in combined)
        for ticket_type, keywords in ClassificationRules.TEXT_KEYWORDS.items()
    }


def infer_from_text(summary: str, description: str, issue_type: str) -> Optional[TicketType]:
    """Pick the type with the highest keyword score; ties resolve by TYPE_PRIORITY."""
    scores = score_text(f"{summary} {description} {issue_type}")
    best = max(scores.values())
    if best == 0:
        return None

    for ticket_type in ClassificationRules.TYPE_PRIORITY:
        if scores[ticket_type] == best:
            return ticket_type
    return None
