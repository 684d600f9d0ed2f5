"""Section assembler - turns titled sections into ordered document blocks.

Pure function with no I/O. Spacing values are in twentieths of a point, the
unit word processors use for paragraph spacing.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from backend.app.models.documents import SectionSpec

TITLE_SPACING_AFTER = 400
HEADING_SPACING_BEFORE = 300
HEADING_SPACING_AFTER = 200
PARAGRAPH_SPACING_AFTER = 120


@dataclass(frozen=True)
class TitleBlock:
    """Document title, centered, largest heading rank."""

    text: str
    spacing_after: int = TITLE_SPACING_AFTER


@dataclass(frozen=True)
class HeadingBlock:
    """Section heading; rank 1 is the top level."""

    text: str
    rank: int
    spacing_before: int = HEADING_SPACING_BEFORE
    spacing_after: int = HEADING_SPACING_AFTER


@dataclass(frozen=True)
class ParagraphBlock:
    """One line of section body text."""

    text: str
    spacing_after: int = PARAGRAPH_SPACING_AFTER


Block = TitleBlock | HeadingBlock | ParagraphBlock


def heading_rank(level: int | None) -> int:
    """Map a section level to a heading rank.

    Only 2 and 3 are sub-levels; every other value, including None, is top level.
    """
    if level == 2:
        return 2
    if level == 3:
        return 3
    return 1


def split_paragraphs(content: str) -> list[str]:
    """Split content on newlines, dropping blank lines."""
    return [line for line in content.split("\n") if line.strip()]


def assemble_sections(title: str, sections: Sequence[SectionSpec]) -> list[Block]:
    """Assemble the block sequence for a document.

    Args:
        title: Document display title
        sections: Sections in output order

    Returns:
        Title block, then for each section a heading block followed by one
        paragraph block per non-blank content line
    """
    blocks: list[Block] = [TitleBlock(text=title)]

    for section in sections:
        blocks.append(HeadingBlock(text=section.title, rank=heading_rank(section.level)))
        blocks.extend(ParagraphBlock(text=line) for line in split_paragraphs(section.content))

    return blocks
