"""Conversion of uploaded documents into HTML."""
from typing import List, Optional
import html
import io
import logging
import re
from pathlib import PurePath

import mammoth

from ..exceptions import UnsupportedFormatError

logger = logging.getLogger(__name__)

DOCX_STYLE_MAP = "\n".join([
    "p[style-name='Heading 1'] => h1:fresh",
    "p[style-name='Heading 2'] => h2:fresh",
    "p[style-name='Heading 3'] => h3:fresh",
    "p[style-name='Center'] => p.text-center:fresh",
    "p[style-name='Centered'] => p.text-center:fresh",
    "p[style-name='Normal Center'] => p.text-center:fresh",
    "p[style-name='Quote'] => blockquote:fresh",
    "r[style-name='Bold'] => strong",
    "r[style-name='Strong'] => strong",
    "r[style-name='Emphasis'] => em",
    "b => strong",
    "i => em",
])

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_EXTENSIONS = (".txt", ".md")

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def title_from_filename(filename: str) -> str:
    """File name without its final extension."""
    name = PurePath(filename).name
    stem, dot, _ = name.rpartition(".")
    return stem if dot and stem else name


def text_to_html(text: str) -> str:
    """Turn plain text into paragraphs.

    Blank lines separate paragraphs; single newlines inside a paragraph
    become ``<br>``.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    paragraphs: List[str] = []
    for block in _PARAGRAPH_BREAK.split(text):
        lines = [html.escape(line.strip()) for line in block.split("\n") if line.strip()]
        if not lines:
            continue
        paragraphs.append(f"<p>{'<br>'.join(lines)}</p>")
    return "".join(paragraphs)


class DocumentImporter:
    """Converts DOCX and plain-text uploads into HTML."""

    def __init__(self, style_map: str = DOCX_STYLE_MAP):
        self.style_map = style_map

    def convert(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """Convert a document to HTML.

        Args:
            data: Raw file bytes
            filename: Uploaded file name
            content_type: Declared MIME type, if any

        Returns:
            str: HTML markup

        Raises:
            UnsupportedFormatError: If the format is not recognized or the
                document cannot be read
        """
        lower = filename.lower()
        content_type = (content_type or "").lower()

        if lower.endswith(".docx") or content_type == DOCX_CONTENT_TYPE:
            return self._convert_docx(data, filename)
        if content_type.startswith("text/") or lower.endswith(TEXT_EXTENSIONS):
            return self._convert_text(data, filename)
        raise UnsupportedFormatError(f"Unsupported format: {filename}")

    def _convert_docx(self, data: bytes, filename: str) -> str:
        try:
            result = mammoth.convert_to_html(io.BytesIO(data), style_map=self.style_map)
        except Exception as e:
            # mammoth surfaces zip/xml errors with their own types
            raise UnsupportedFormatError(f"Could not read {filename} as DOCX: {e}") from e
        for message in result.messages:
            logger.debug(f"mammoth: {message}")
        return result.value

    def _convert_text(self, data: bytes, filename: str) -> str:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise UnsupportedFormatError(f"{filename} is not UTF-8 text") from e
        return text_to_html(text)
