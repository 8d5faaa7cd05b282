"""Tests for document conversion."""
import io
import zipfile

import pytest

from bilingual_archive.exceptions import UnsupportedFormatError
from bilingual_archive.importer.converter import (
    DOCX_CONTENT_TYPE,
    DocumentImporter,
    text_to_html,
    title_from_filename,
)

RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1" '
    'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" '
    'Target="word/document.xml"/>'
    "</Relationships>"
)

CONTENT_TYPES_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Override PartName="/word/document.xml" '
    'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
    "</Types>"
)

DOCUMENT_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
    "<w:body>"
    "<w:p><w:r><w:t>שלום</w:t></w:r></w:p>"
    "<w:p><w:r><w:rPr><w:b/></w:rPr><w:t>Bold</w:t></w:r></w:p>"
    "</w:body>"
    "</w:document>"
)


def make_docx() -> bytes:
    """Build a minimal two-paragraph DOCX in memory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("[Content_Types].xml", CONTENT_TYPES_XML)
        archive.writestr("_rels/.rels", RELS_XML)
        archive.writestr("word/document.xml", DOCUMENT_XML)
    return buffer.getvalue()


@pytest.fixture
def importer():
    return DocumentImporter()


def test_title_from_filename():
    """Test stripping the final extension."""
    assert title_from_filename("Redemption Notes.docx") == "Redemption Notes"
    assert title_from_filename("archive.v2.txt") == "archive.v2"
    assert title_from_filename("README") == "README"
    assert title_from_filename(".hidden") == ".hidden"


def test_text_to_html_paragraphs():
    """Test that blank lines split paragraphs and newlines become breaks."""
    text = "First line\r\nsecond line\n\n  \nSecond <para>\n"
    assert text_to_html(text) == "<p>First line<br>second line</p><p>Second &lt;para&gt;</p>"


def test_text_to_html_empty():
    assert text_to_html("\n\n  \n") == ""


def test_convert_text(importer):
    """Test plain-text uploads, with and without a BOM."""
    data = "\ufeffפסקה ראשונה\n\nפסקה שנייה".encode("utf-8")
    assert importer.convert(data, "notes.txt") == "<p>פסקה ראשונה</p><p>פסקה שנייה</p>"
    assert importer.convert(b"hello", "upload", "text/plain") == "<p>hello</p>"


def test_convert_text_bad_encoding(importer):
    with pytest.raises(UnsupportedFormatError):
        importer.convert(b"\xff\xfe\xfa", "notes.txt")


def test_convert_docx(importer):
    """Test DOCX conversion through mammoth."""
    html = importer.convert(make_docx(), "lecture.docx")
    assert "<p>שלום</p>" in html
    assert "<strong>Bold</strong>" in html


def test_convert_docx_by_content_type(importer):
    html = importer.convert(make_docx(), "upload.bin", DOCX_CONTENT_TYPE)
    assert "<strong>Bold</strong>" in html


def test_convert_corrupt_docx(importer):
    """Test that unreadable DOCX files surface as unsupported."""
    with pytest.raises(UnsupportedFormatError):
        importer.convert(b"not a zip archive", "broken.docx")


def test_convert_unsupported_format(importer):
    with pytest.raises(UnsupportedFormatError):
        importer.convert(b"%PDF-1.7", "scan.pdf", "application/pdf")
