"""Format conversion: editor markup to PDF or DOCX bytes.

Both renderers walk the same RichDocument produced by the editor parser, so
headings, lists, rules and inline bold/italic/underline/font size survive the
conversion. Font families map onto the matching PDF base fonts where one exists;
other families, and text the base fonts cannot encode, keep the default font.
"""

import html
import io
import logging
import re
from typing import Optional

from docx import Document as DocxDocument
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt
from reportlab.lib import colors
from reportlab.lib.enums import TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from leasedocs.errors import ValidationError
from leasedocs.models.document import DownloadFormat
from leasedocs.services.editor import BlockKind, RichDocument, parse_html
from leasedocs.utils.pdf_fonts import get_font_name, register_unicode_fonts

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(px|pt)?\s*$", re.IGNORECASE)

# CSS family -> reportlab base font
_PDF_FACES = {
    "times": "Times-Roman",
    "times new roman": "Times-Roman",
    "georgia": "Times-Roman",
    "serif": "Times-Roman",
    "helvetica": "Helvetica",
    "arial": "Helvetica",
    "verdana": "Helvetica",
    "sans-serif": "Helvetica",
    "courier": "Courier",
    "courier new": "Courier",
    "monospace": "Courier",
}


def font_size_points(size: Optional[str]) -> Optional[float]:
    """'16px' -> 12.0, '14pt' -> 14.0, '11' -> 11.0, junk -> None"""
    if not size:
        return None
    match = _SIZE_PATTERN.match(size)
    if not match:
        return None
    value = float(match.group(1))
    if (match.group(2) or "").lower() == "px":
        value *= 0.75
    return value


def pdf_font_face(family: Optional[str], text: str) -> Optional[str]:
    """'Georgia, serif' -> 'Times-Roman'; None when the family is unknown
    or the text falls outside the base fonts' encoding."""
    if not family:
        return None
    face = _PDF_FACES.get(family.split(",")[0].strip().strip("\"'").lower())
    if face is None:
        return None
    try:
        text.encode("cp1252")
    except UnicodeEncodeError:
        return None
    return face


class FormatConverter:
    """Convert generated document content into downloadable binaries"""

    def __init__(self):
        register_unicode_fonts()
        self.font_name = get_font_name()
        self.font_bold = get_font_name(bold=True)
        self._init_styles()

    def _init_styles(self):
        """Initialize paragraph styles"""
        self.styles = {
            'h1': ParagraphStyle('H1', fontName=self.font_bold,
                fontSize=16, leading=20, spaceBefore=6, spaceAfter=10),
            'h2': ParagraphStyle('H2', fontName=self.font_bold,
                fontSize=13, leading=17, spaceBefore=10, spaceAfter=6),
            'normal': ParagraphStyle('Body', fontName=self.font_name,
                fontSize=11, leading=15, alignment=TA_JUSTIFY, spaceAfter=4),
            'item': ParagraphStyle('Item', fontName=self.font_name,
                fontSize=11, leading=15, leftIndent=18, bulletIndent=6, spaceAfter=2),
        }

    def convert(self, content: str, fmt: DownloadFormat, title: str = "") -> bytes:
        """Render content in the requested format."""
        try:
            fmt = DownloadFormat(fmt)
        except ValueError:
            raise ValidationError(
                f"Unsupported format '{fmt}'. Supported formats: pdf, docx", field="format"
            )

        document = parse_html(content)
        if fmt == DownloadFormat.PDF:
            data = self.to_pdf(document, title)
        else:
            data = self.to_docx(document, title)
        logger.info(f"Converted '{title}' to {fmt.value} ({len(data)} bytes)")
        return data

    # PDF

    def _pdf_inline(self, runs) -> str:
        parts = []
        for run in runs:
            text = html.escape(run.text, quote=False).replace("\n", "<br/>")
            size = font_size_points(run.font_size)
            if size:
                text = f'<font size="{size:g}">{text}</font>'
            face = pdf_font_face(run.font_family, run.text)
            if face:
                text = f'<font face="{face}">{text}</font>'
            if run.underline:
                text = f"<u>{text}</u>"
            if run.italic:
                text = f"<i>{text}</i>"
            if run.bold:
                text = f"<b>{text}</b>"
            parts.append(text)
        return "".join(parts)

    def _build_story(self, document: RichDocument) -> list:
        story = []
        for block in document.blocks:
            if block.kind == BlockKind.HEADING:
                style = self.styles['h1'] if block.level == 1 else self.styles['h2']
                story.append(Paragraph(self._pdf_inline(block.runs), style))
            elif block.kind == BlockKind.PARAGRAPH:
                if block.runs:
                    story.append(Paragraph(self._pdf_inline(block.runs), self.styles['normal']))
                else:
                    story.append(Spacer(1, 8))
            elif block.is_list:
                for number, item in enumerate(block.items, start=1):
                    bullet = "•" if block.kind == BlockKind.BULLET_LIST else f"{number}."
                    story.append(Paragraph(self._pdf_inline(item), self.styles['item'], bulletText=bullet))
                story.append(Spacer(1, 6))
            elif block.kind == BlockKind.HORIZONTAL_RULE:
                story.append(HRFlowable(width="100%", thickness=0.5, color=colors.gray,
                                        spaceBefore=6, spaceAfter=6))
        return story

    def _page_number(self, canvas, doc):
        canvas.saveState()
        canvas.setFont(self.font_name, 8)
        canvas.setFillColor(colors.gray)
        canvas.drawCentredString(A4[0] / 2, 1 * cm, f"Page {doc.page}")
        canvas.restoreState()

    def to_pdf(self, document: RichDocument, title: str = "") -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, title=title,
            rightMargin=2*cm, leftMargin=2*cm, topMargin=2*cm, bottomMargin=2*cm)
        story = self._build_story(document) or [Spacer(1, 1)]
        doc.build(story, onFirstPage=self._page_number, onLaterPages=self._page_number)
        return buffer.getvalue()

    # DOCX

    @staticmethod
    def _docx_runs(paragraph, runs) -> None:
        for run in runs:
            docx_run = paragraph.add_run(run.text)
            docx_run.bold = run.bold or None
            docx_run.italic = run.italic or None
            docx_run.underline = run.underline or None
            if run.font_family:
                docx_run.font.name = run.font_family.strip("'\"")
            size = font_size_points(run.font_size)
            if size:
                docx_run.font.size = Pt(size)

    @staticmethod
    def _docx_rule(doc) -> None:
        paragraph = doc.add_paragraph()
        p_pr = paragraph._p.get_or_add_pPr()
        border = OxmlElement("w:pBdr")
        bottom = OxmlElement("w:bottom")
        bottom.set(qn("w:val"), "single")
        bottom.set(qn("w:sz"), "6")
        bottom.set(qn("w:space"), "1")
        bottom.set(qn("w:color"), "auto")
        border.append(bottom)
        p_pr.append(border)

    def to_docx(self, document: RichDocument, title: str = "") -> bytes:
        doc = DocxDocument()
        if title:
            doc.core_properties.title = title
        for block in document.blocks:
            if block.kind == BlockKind.HEADING:
                paragraph = doc.add_heading("", level=block.level or 1)
                self._docx_runs(paragraph, block.runs)
            elif block.kind == BlockKind.PARAGRAPH:
                self._docx_runs(doc.add_paragraph(), block.runs)
            elif block.is_list:
                style = "List Bullet" if block.kind == BlockKind.BULLET_LIST else "List Number"
                for item in block.items:
                    self._docx_runs(doc.add_paragraph(style=style), item)
            elif block.kind == BlockKind.HORIZONTAL_RULE:
                self._docx_rule(doc)
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()
