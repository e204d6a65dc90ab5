"""
Document model for a generated Definition of Done.

A DoDTable is an ordered list of titled sections, each holding rows of
(category label, items, checked flag), plus generation metadata. Collections
are tuples, so a generated document cannot be changed after construction.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Tuple
from dod_agent.models.enums import TicketType


class DoDRow(BaseModel):
    """A single checklist row."""

    model_config = ConfigDict(frozen=True)

    category: str = Field(..., description="Row label rendered in bold before the items")
    items: Tuple[str, ...] = Field(..., min_length=1, description="Ordered item strings (never empty)")
    checked: bool = Field(default=False, description="Completion flag")


class DoDSection(BaseModel):
    """A titled group of rows."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1, description="Section title")
    rows: Tuple[DoDRow, ...] = Field(default_factory=tuple)


class DoDMetadata(BaseModel):
    """Metadata recorded at generation time."""

    model_config = ConfigDict(frozen=True)

    ticket_key: str
    ticket_type: TicketType
    generated_at: datetime


class DoDTable(BaseModel):
    """Complete Definition-of-Done document."""

    model_config = ConfigDict(frozen=True)

    sections: Tuple[DoDSection, ...] = Field(default_factory=tuple)
    metadata: DoDMetadata

    def section_titles(self) -> List[str]:
        """Return section titles in document order."""
        return [section.title for section in self.sections]

    def get_section(self, title: str) -> Optional[DoDSection]:
        """Return the first section with the given title, or None."""
        for section in self.sections:
            if section.title == title:
                return section
        return None
