"""
Closed enumerations used by the Definition-of-Done generator.
"""
from enum import Enum


class TicketType(str, Enum):
    """Work category of a ticket. Drives which DoD sections are generated."""
    
    BACKEND = "backend"
    FRONTEND = "frontend"
    INFRASTRUCTURE = "infrastructure"


class ReviewStatus(str, Enum):
    """CI status of a merge request."""
    
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    RUNNING = "running"
    QUEUED = "queued"
    ABORTED = "aborted"


class OutputFormat(str, Enum):
    """Markup dialect returned to the caller."""
    
    MARKDOWN = "markdown"
    JIRA = "jira"
