"""
Acceptance criteria extraction from free-form ticket descriptions.

Recognizes a criteria block introduced by an "Acceptance Criteria" header
(or a bare "AC:" / "ACs:" line) and splits it into individual criteria.
Supported formats inside the block: numbered lists, bullets, checkboxes and
Given/When/Then scenarios. Extraction never fails; unrecognized input yields
an empty list.
"""
import re
from typing import List

HEADER_PHRASES = ("acceptance criteria", "acceptance criterion")
HEADER_LINES = ("ac:", "acs:")

NUMBERED_PATTERN = re.compile(r"^\d+[.)]\s+(.+)$")
BULLET_PATTERN = re.compile(r"^[-*•]\s+(.+)$")
CHECKBOX_PATTERN = re.compile(r"^\[[ x]\]\s+(.+)$", re.IGNORECASE)
SCENARIO_PREFIXES = ("Given ", "When ", "Then ")
CONJUNCTION_PREFIX = "And "

# Section header terminating the block, e.g. "Notes:" or "Out-of-scope:"
MAX_TERMINATOR_LENGTH = 50


def _is_header(line: str) -> bool:
    lower_line = line.lower()
    return any(phrase in lower_line for phrase in HEADER_PHRASES) or lower_line in HEADER_LINES


def _is_terminator(line: str) -> bool:
    return line.endswith(":") and len(line) < MAX_TERMINATOR_LENGTH and " " not in line


def _normalize(criterion: str) -> str:
    return " ".join(criterion.split())


def extract_acceptance_criteria(text: str) -> List[str]:
    """
    Extract acceptance criteria from ticket text.

    Args:
        text: Ticket description (plain text, one line per paragraph/list item)

    Returns:
        Ordered list of criterion strings. Empty when no criteria block is found.
    """
    if not text:
        return []

    criteria: List[str] = []
    in_block = False
    current = ""

    def flush() -> None:
        nonlocal current
        normalized = _normalize(current)
        if normalized:
            criteria.append(normalized)
        current = ""

    for raw_line in text.split("\n"):
        line = raw_line.strip()

        if _is_header(line):
            in_block = True
            continue

        if not in_block or not line:
            continue

        match = (
            NUMBERED_PATTERN.match(line)
            or BULLET_PATTERN.match(line)
            or CHECKBOX_PATTERN.match(line)
        )
        if match:
            flush()
            current = match.group(1)
            continue

        if line.startswith(SCENARIO_PREFIXES):
            flush()
            current = line
            continue

        if line.startswith(CONJUNCTION_PREFIX):
            current = f"{current} {line}" if current else line
            continue

        if _is_terminator(line):
            break

        # Free text only continues an existing criterion
        if current:
            current = f"{current} {line}"

    flush()
    return criteria
