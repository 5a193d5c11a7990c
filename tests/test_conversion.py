"""Tests for PDF/DOCX conversion"""

import io
import zipfile

import pytest
from docx import Document as DocxDocument

from leasedocs.errors import ValidationError
from leasedocs.models.document import DownloadFormat
from leasedocs.services.contract import ContractContentGenerator
from leasedocs.services.conversion import FormatConverter, font_size_points, pdf_font_face
from leasedocs.services.editor import TextRun

CONTENT = (
    "<h1>LEASE AGREEMENT</h1><h2>1. PARTIES</h2>"
    "<p>Between <strong>Owner</strong> and <em>Tenant</em> for <u>₦1200</u> "
    "<span style=\"font-size: 16px\">monthly</span>.</p>"
    "<ul><li>Pay rent</li><li>Keep clean</li></ul><ol><li>First</li></ol><hr><p>End</p>"
)


@pytest.fixture(scope="module")
def real_converter():
    return FormatConverter()


class TestFontSize:
    @pytest.mark.parametrize("size,points", [
        ("16px", 12.0), ("14pt", 14.0), ("11", 11.0), (None, None), ("large", None),
    ])
    def test_font_size_points(self, size, points):
        assert font_size_points(size) == points


class TestPdfFontFace:
    @pytest.mark.parametrize("family,face", [
        ("Georgia", "Times-Roman"),
        ("'Courier New', monospace", "Courier"),
        ("Arial", "Helvetica"),
        ("Comic Sans MS", None),
        (None, None),
    ])
    def test_family_mapping(self, family, face):
        assert pdf_font_face(family, "Rent due") == face

    def test_unencodable_text_keeps_default(self):
        assert pdf_font_face("Georgia", "₦1200") is None

    def test_pdf_markup_carries_face(self, real_converter):
        runs = (TextRun(text="styled", font_family="Georgia", bold=True),)
        assert real_converter._pdf_inline(runs) == '<b><font face="Times-Roman">styled</font></b>'

    def test_pdf_with_families(self, real_converter):
        content = (
            '<p><span style="font-family: Georgia">serif</span> '
            '<span style="font-family: Courier New">mono</span></p>'
        )
        assert real_converter.convert(content, DownloadFormat.PDF).startswith(b"%PDF")


class TestFormatConverter:
    def test_pdf(self, real_converter):
        data = real_converter.convert(CONTENT, DownloadFormat.PDF, title="Lease")
        assert data.startswith(b"%PDF")

    def test_docx_keeps_structure(self, real_converter):
        data = real_converter.convert(CONTENT, DownloadFormat.DOCX, title="Lease")
        assert zipfile.is_zipfile(io.BytesIO(data))

        doc = DocxDocument(io.BytesIO(data))
        texts = [p.text for p in doc.paragraphs]
        assert "LEASE AGREEMENT" in texts
        assert "Pay rent" in texts
        assert doc.core_properties.title == "Lease"

        body = next(p for p in doc.paragraphs if p.text.startswith("Between"))
        bold = [r.text for r in body.runs if r.bold]
        italic = [r.text for r in body.runs if r.italic]
        assert bold == ["Owner"]
        assert italic == ["Tenant"]

    def test_accepts_format_string(self, real_converter):
        assert real_converter.convert("<p>x</p>", "docx")[:2] == b"PK"

    def test_unknown_format(self, real_converter):
        with pytest.raises(ValidationError):
            real_converter.convert(CONTENT, "odt")

    def test_empty_content_still_renders(self, real_converter):
        assert real_converter.convert("", DownloadFormat.PDF).startswith(b"%PDF")

    def test_generated_contract(self, real_converter, clock, manager_form):
        content = ContractContentGenerator(clock=clock).generate(manager_form).content
        assert real_converter.convert(content, DownloadFormat.PDF, title="Contract").startswith(b"%PDF")
