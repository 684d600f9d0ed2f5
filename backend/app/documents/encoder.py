"""DOCX encoder - renders assembled blocks and branding with python-docx."""

import io
import logging
from collections.abc import Sequence

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Emu, RGBColor, Twips

from backend.app.documents.assembler import Block, HeadingBlock, ParagraphBlock, TitleBlock
from backend.app.documents.branding import decode_logo
from backend.app.documents.errors import AssetDecodeError, EncodingError
from backend.app.models.branding import ResolvedBranding
from backend.app.utils.metrics import logo_decode_failures_total

logger = logging.getLogger(__name__)

# Logo box in pixels; 9525 EMU per pixel at 96 dpi
LOGO_WIDTH_PX = 200
LOGO_HEIGHT_PX = 100
EMU_PER_PIXEL = 9525
LOGO_SPACING_AFTER = 400


def _apply_heading_styles(doc: DocxDocument, branding: ResolvedBranding) -> None:
    """Color Heading 1 and Heading 2; Heading 3 keeps template defaults."""
    for style_name, color in (
        ("Heading 1", branding.primary_color),
        ("Heading 2", branding.secondary_color),
    ):
        font = doc.styles[style_name].font
        font.bold = True
        font.color.rgb = RGBColor.from_string(color.lstrip("#"))


def _add_logo(doc: DocxDocument, logo: str) -> bool:
    """Insert the centered logo paragraph. Returns False if it was skipped."""
    try:
        decoded = decode_logo(logo)
    except AssetDecodeError as e:
        logger.warning("Logo decode failed, continuing without logo: %s", e)
        logo_decode_failures_total.labels(reason="decode").inc()
        return False

    paragraph = doc.add_paragraph()
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    paragraph.paragraph_format.space_after = Twips(LOGO_SPACING_AFTER)

    try:
        paragraph.add_run().add_picture(
            io.BytesIO(decoded.data),
            width=Emu(LOGO_WIDTH_PX * EMU_PER_PIXEL),
            height=Emu(LOGO_HEIGHT_PX * EMU_PER_PIXEL),
        )
    except Exception as e:
        # Unrecognized or corrupt image: drop the half-built paragraph
        element = paragraph._element
        element.getparent().remove(element)
        logger.warning(
            "Logo image rejected, continuing without logo",
            extra={"structured": {"subtype": decoded.subtype, "error": type(e).__name__}},
        )
        logo_decode_failures_total.labels(reason="unrecognized_image").inc()
        return False

    return True


def _add_block(doc: DocxDocument, block: Block) -> None:
    """Render one assembled block."""
    if isinstance(block, TitleBlock):
        paragraph = doc.add_heading(block.text, level=0)
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        paragraph.paragraph_format.space_after = Twips(block.spacing_after)
    elif isinstance(block, HeadingBlock):
        paragraph = doc.add_heading(block.text, level=block.rank)
        paragraph.paragraph_format.space_before = Twips(block.spacing_before)
        paragraph.paragraph_format.space_after = Twips(block.spacing_after)
    elif isinstance(block, ParagraphBlock):
        paragraph = doc.add_paragraph()
        paragraph.add_run(block.text)
        paragraph.paragraph_format.space_after = Twips(block.spacing_after)
    else:
        raise TypeError(f"unsupported block type: {type(block).__name__}")


def encode_document(blocks: Sequence[Block], branding: ResolvedBranding) -> bytes:
    """Serialize blocks and branding into DOCX package bytes.

    A logo that cannot be decoded is skipped; everything else that goes wrong
    while building or saving the package is fatal.

    Args:
        blocks: Output of the section assembler
        branding: Resolved branding (logo optional)

    Returns:
        DOCX bytes

    Raises:
        EncodingError: If the package could not be built or serialized
    """
    try:
        doc = Document()
        _apply_heading_styles(doc, branding)

        if branding.logo:
            _add_logo(doc, branding.logo)

        for block in blocks:
            _add_block(doc, block)

        buffer = io.BytesIO()
        doc.save(buffer)
    except Exception as e:
        logger.exception("DOCX encoding failed")
        raise EncodingError(f"{type(e).__name__}: {e}") from e

    return buffer.getvalue()
