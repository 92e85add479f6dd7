from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from docx import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.constants import RELATIONSHIP_TYPE
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Mm, Pt, RGBColor

from .builder import ImageRun, LinkRun, ListEntry, RunStyle, StyledParagraph, TextRun
from .errors import FontNotFoundError, OutputWriteError
from .fonts import FontFamily
from .styling import RGB, Margins, TextAlignment

logger = logging.getLogger(__name__)

A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297

INDENT_STEP_CM = 0.75
MARKER_WIDTH_CM = 0.6
RULE_SIZE_EIGHTHS = 6

_ALIGNMENTS = {
    TextAlignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    TextAlignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    TextAlignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
    TextAlignment.JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
}


class DocxBackend:
    """Rendering backend writing a Word document through python-docx."""

    def __init__(self, asset_root: Optional[Path] = None) -> None:
        self.document = DocxDocument()
        self.asset_root = asset_root
        self.fonts: dict[str, FontFamily] = {}
        self._pending_space = 0.0

    def configure_page(self, margins: Margins) -> None:
        """Apply A4 page setup and the configured margins."""
        section = self.document.sections[0]
        section.page_height = Mm(A4_HEIGHT_MM)
        section.page_width = Mm(A4_WIDTH_MM)
        section.top_margin = Mm(margins.top)
        section.right_margin = Mm(margins.right)
        section.bottom_margin = Mm(margins.bottom)
        section.left_margin = Mm(margins.left)

    def register_font_family(self, font_ref: str, family: FontFamily) -> None:
        self.fonts[font_ref] = family

    def add_spacing(self, points: float) -> None:
        self._pending_space += points

    def add_paragraph(self, paragraph: StyledParagraph) -> None:
        docx_paragraph = self.document.add_paragraph()
        self._format_paragraph(docx_paragraph, paragraph.alignment, paragraph.background_color)
        if paragraph.indent_level:
            docx_paragraph.paragraph_format.left_indent = Cm(INDENT_STEP_CM * paragraph.indent_level)
        self._add_runs(docx_paragraph, paragraph)

    def add_list(self, entries: Sequence[ListEntry]) -> None:
        for entry in entries:
            docx_paragraph = self.document.add_paragraph()
            self._format_paragraph(docx_paragraph, entry.paragraph.alignment, entry.paragraph.background_color)
            fmt = docx_paragraph.paragraph_format
            fmt.left_indent = Cm(INDENT_STEP_CM * (entry.level + 1) + MARKER_WIDTH_CM)
            fmt.first_line_indent = Cm(-MARKER_WIDTH_CM)

            run = docx_paragraph.add_run(f"{entry.marker}\t")
            if entry.marker_style is not None:
                self._style_run(run, entry.marker_style, entry.paragraph.background_color)
            self._add_runs(docx_paragraph, entry.paragraph)

    def add_horizontal_rule(self, style: RunStyle) -> None:
        docx_paragraph = self.document.add_paragraph()
        p_bdr = OxmlElement("w:pBdr")
        bottom = OxmlElement("w:bottom")
        bottom.set(qn("w:val"), "single")
        bottom.set(qn("w:sz"), str(RULE_SIZE_EIGHTHS))
        bottom.set(qn("w:space"), "1")
        bottom.set(qn("w:color"), _hex(style.color) if style.color else "auto")
        p_bdr.append(bottom)
        # pBdr must precede the spacing element python-docx adds below
        docx_paragraph._p.get_or_add_pPr().append(p_bdr)
        self._format_paragraph(docx_paragraph, None, None)

    def render(self, target: str | Path) -> None:
        output_path = Path(target)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self.document.save(output_path)
        except OSError as exc:
            raise OutputWriteError(str(output_path), exc) from exc
        logger.debug("Saved DOCX to %s", output_path)

    def _format_paragraph(self, docx_paragraph, alignment: Optional[TextAlignment], background: Optional[RGB]) -> None:
        if background is not None:
            _set_paragraph_shading(docx_paragraph, background)
        fmt = docx_paragraph.paragraph_format
        fmt.space_before = Pt(self._pending_space)
        fmt.space_after = Pt(0)
        self._pending_space = 0.0
        if alignment is not None:
            docx_paragraph.alignment = _ALIGNMENTS[alignment]

    def _add_runs(self, docx_paragraph, paragraph: StyledParagraph) -> None:
        for item in paragraph.runs:
            if isinstance(item, TextRun):
                lines = item.text.split("\n")
                for index, line in enumerate(lines):
                    run = docx_paragraph.add_run(line)
                    self._style_run(run, item.style, paragraph.background_color)
                    if index < len(lines) - 1:
                        run.add_break()
            elif isinstance(item, LinkRun):
                self._add_hyperlink(docx_paragraph, item, paragraph.background_color)
            elif isinstance(item, ImageRun):
                self._add_image(docx_paragraph, item, paragraph.background_color)

    def _add_hyperlink(self, docx_paragraph, link: LinkRun, background: Optional[RGB]) -> None:
        """Wrap a styled run in a ``w:hyperlink`` element.

        python-docx has no public hyperlink API, so the run is built normally
        and then moved under a hyperlink element tied to an external
        relationship.
        """
        r_id = docx_paragraph.part.relate_to(link.url, RELATIONSHIP_TYPE.HYPERLINK, is_external=True)
        run = docx_paragraph.add_run(link.text)
        self._style_run(run, link.style, background)
        hyperlink = OxmlElement("w:hyperlink")
        hyperlink.set(qn("r:id"), r_id)
        hyperlink.append(run._r)
        docx_paragraph._p.append(hyperlink)

    def _add_image(self, docx_paragraph, image: ImageRun, background: Optional[RGB]) -> None:
        image_path = Path(image.src)
        if self.asset_root is not None and not image_path.is_absolute():
            candidate = self.asset_root / image.src
            if candidate.exists():
                image_path = candidate

        run = docx_paragraph.add_run()
        if image.src and image_path.is_file():
            run.add_picture(str(image_path))
        else:
            logger.info("Image %s not found, writing its alt text", image.src)
            run.add_text(f"[{image.alt or image.src}]")
            self._style_run(run, image.style, background)

    def _style_run(self, run, style: RunStyle, background: Optional[RGB]) -> None:
        if style.font_family is not None:
            family = self.fonts.get(style.font_family)
            if family is None:
                raise FontNotFoundError(style.font_family)
            run.font.name = family.variant(bold=style.bold, italic=style.italic)
        run.font.size = Pt(style.size)
        run.bold = style.bold
        run.italic = style.italic
        run.underline = style.underline
        run.font.strike = style.strikethrough
        if style.color is not None:
            run.font.color.rgb = RGBColor(*style.color)
        if style.background_color is not None and style.background_color != background:
            shading = OxmlElement("w:shd")
            shading.set(qn("w:val"), "clear")
            shading.set(qn("w:fill"), _hex(style.background_color))
            run._r.get_or_add_rPr().append(shading)


def _set_paragraph_shading(docx_paragraph, color: RGB) -> None:
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:fill"), _hex(color))
    docx_paragraph._p.get_or_add_pPr().append(shading)


def _hex(color: RGB) -> str:
    return "{:02X}{:02X}{:02X}".format(*color)
