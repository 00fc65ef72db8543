from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from io import BytesIO
from zipfile import BadZipFile, ZipFile

logger = logging.getLogger(__name__)

_UTF16_BOMS = (b"\xff\xfe", b"\xfe\xff")


def parse_pdf_bytes(content: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(content))
    text_parts: list[str] = []
    for page in reader.pages:
        page_text = (page.extract_text() or "").strip()
        if page_text:
            text_parts.append(page_text)
    if not text_parts:
        logger.info("pdf_text_layer_empty pages=%s", len(reader.pages))
    return "\n".join(text_parts)


def _parse_docx_xml(content: bytes) -> str:
    with ZipFile(BytesIO(content)) as archive:
        raw = archive.read("word/document.xml")
    root = ET.fromstring(raw)
    paragraphs: list[str] = []
    for paragraph in root.iter():
        if not paragraph.tag.endswith("}p"):
            continue
        texts: list[str] = []
        for node in paragraph.iter():
            if node.tag.endswith("}t") and node.text:
                value = node.text.strip()
                if value:
                    texts.append(value)
        if texts:
            paragraphs.append(" ".join(texts))
    return "\n".join(paragraphs)


def parse_docx_bytes(content: bytes) -> str:
    """Paragraph and table-cell text of a Word document.

    python-docx handles regular .docx files; when it rejects the package the
    raw ``word/document.xml`` is walked instead. Legacy binary .doc files are
    not zip packages and yield an empty string.
    """
    try:
        from docx import Document

        document = Document(BytesIO(content))
        lines = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text and cell.text.strip()]
                if cells:
                    lines.append(" | ".join(cells))
        return "\n".join(lines)
    except Exception as exc:
        logger.info("python_docx_failed, trying xml fallback: %s", exc)

    try:
        return _parse_docx_xml(content)
    except (BadZipFile, KeyError, ET.ParseError) as exc:
        logger.info("docx_xml_fallback_failed: %s", exc)
        return ""


def decode_text_bytes(content: bytes) -> str:
    if content.startswith(_UTF16_BOMS):
        try:
            return content.decode("utf-16")
        except UnicodeDecodeError:
            pass
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")
