"""
Markdown rendering of a DoDTable and conversion of Markdown to Jira wiki markup.

Markdown conventions:
    # Definition of Done: <KEY>
    ## <Section title>
    - [ ] **<Category>:** <single item>
    - [x] **<Category>**
      - <item>

Lines after the first of a multi-line item are indented under their bullet.

Jira conversion rewrites headings, bold spans, fenced code blocks and table
headers. Heading, fence and table syntax is only recognized at column 0, so
indented item text passes through unchanged. Checkbox tokens and all
labels/items are preserved.
"""
import re
from typing import List
from dod_agent.models.document import DoDRow, DoDSection, DoDTable

HEADING_PATTERNS = (
    (re.compile(r"^# (.+)$", re.MULTILINE), r"h1. \1"),
    (re.compile(r"^## (.+)$", re.MULTILINE), r"h2. \1"),
    (re.compile(r"^### (.+)$", re.MULTILINE), r"h3. \1"),
)
# **content** where content neither starts nor ends with '*'
BOLD_PATTERN = re.compile(r"\*\*([^*](?:.*?[^*])?)\*\*")
CODE_BLOCK_PATTERN = re.compile(r"^```(\w+)?\n([\s\S]*?)^```", re.MULTILINE)
TABLE_SEPARATOR_PATTERN = re.compile(r"^\|[\s\-:|]+\|$")


class MarkdownFormatter:
    """Formats DoD documents as Markdown and Jira wiki markup."""

    def format_dod_table(self, dod: DoDTable) -> str:
        """
        Format a DoD table as Markdown.

        Args:
            dod: Generated DoD document

        Returns:
            Markdown string
        """
        metadata = dod.metadata
        lines: List[str] = [
            f"# Definition of Done: {metadata.ticket_key}",
            "",
            f"**Ticket Type:** {metadata.ticket_type.value}",
            f"**Generated:** {metadata.generated_at.isoformat(timespec='seconds')}",
            "",
        ]

        for section in dod.sections:
            lines.extend(self._format_section(section))
            lines.append("")

        return "\n".join(lines)

    def _format_section(self, section: DoDSection) -> List[str]:
        lines = [f"## {section.title}", ""]
        for row in section.rows:
            lines.extend(self._format_row(row))
        return lines

    def _format_row(self, row: DoDRow) -> List[str]:
        checkbox = "[x]" if row.checked else "[ ]"
        category = escape_asterisks(row.category)

        if len(row.items) == 1:
            return [f"- {checkbox} **{category}:** {_indent_continuation(row.items[0], '  ')}"]

        lines = [f"- {checkbox} **{category}**"]
        lines.extend(f"  - {_indent_continuation(item, '    ')}" for item in row.items)
        return lines

    def format_for_jira(self, markdown: str) -> str:
        """
        Convert Markdown produced by format_dod_table (or similar) to Jira wiki markup.

        Steps run in a fixed order: headings, checkboxes (unchanged), bold,
        fenced code blocks, tables.
        """
        jira_markup = markdown

        for pattern, replacement in HEADING_PATTERNS:
            jira_markup = pattern.sub(replacement, jira_markup)

        # Checkbox tokens "- [ ]" / "- [x]" are valid in Jira as-is

        # Line by line so a bold span never crosses a newline
        jira_markup = "\n".join(
            BOLD_PATTERN.sub(r"*\1*", line) for line in jira_markup.split("\n")
        )

        jira_markup = CODE_BLOCK_PATTERN.sub(_replace_code_block, jira_markup)

        return _convert_tables(jira_markup)


def escape_asterisks(text: str) -> str:
    """Escape '*' so it cannot be read as a bold delimiter."""
    return text.replace("*", "\\*")


def _indent_continuation(item: str, indent: str) -> str:
    """Indent every line after the first so it stays inside its list item."""
    first, *rest = item.split("\n")
    return "\n".join([first] + [indent + line if line else line for line in rest])


def _replace_code_block(match: "re.Match") -> str:
    language, body = match.group(1), match.group(2)
    opening = f"{{code:{language}}}" if language else "{code}"
    return f"{opening}\n{body}{{code}}"


def _is_table_separator(line: str) -> bool:
    return bool(TABLE_SEPARATOR_PATTERN.match(line.rstrip()))


def _convert_tables(text: str) -> str:
    """Only unindented lines count as table rows; indented ones belong to a list item."""
    lines = text.split("\n")
    converted: List[str] = []

    for index, line in enumerate(lines):
        stripped = line.rstrip()

        if _is_table_separator(stripped):
            continue

        is_table_row = stripped.startswith("|") and stripped.endswith("|") and len(stripped) > 2
        is_header = (
            is_table_row
            and index + 1 < len(lines)
            and _is_table_separator(lines[index + 1])
        )
        if is_header:
            headers = [cell.strip() for cell in stripped[1:-1].split("|")]
            converted.append("|| " + " || ".join(headers) + " ||")
        else:
            converted.append(line)

    return "\n".join(converted)
