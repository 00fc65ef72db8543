import sys
import unittest
from io import BytesIO
from pathlib import Path
from zipfile import ZipFile

from docx import Document

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from smarthr.parsing.media import detect_document_kind, media_type_for, sniff_kind  # noqa: E402
from smarthr.parsing.parse import decode_text_bytes, parse_docx_bytes  # noqa: E402


def _docx_bytes(*paragraphs: str) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class DocumentKindTests(unittest.TestCase):
    def test_declared_type_wins(self):
        self.assertEqual(detect_document_kind("application/pdf; charset=binary", "cv.txt", b"hello"), "pdf")

    def test_extension_then_magic_bytes(self):
        cases = (
            ("application/octet-stream", "scan.JPG", b"", "image"),
            ("", "resume", b"%PDF-1.7 ...", "pdf"),
            ("", "resume", b"\x89PNG\r\n\x1a\n....", "image"),
            ("", "resume", b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1rest", "doc"),
            ("", "resume", b"Plain resume text\nwith lines", "text"),
            ("", "resume", b"\x00\x01\x02\x03", "unknown"),
        )
        for media_type, filename, content, expected in cases:
            with self.subTest(filename=filename, content=content[:8]):
                self.assertEqual(detect_document_kind(media_type, filename, content), expected)

    def test_zip_is_docx_only_with_word_parts(self):
        self.assertEqual(sniff_kind(_docx_bytes("Hello")), "docx")
        buffer = BytesIO()
        with ZipFile(buffer, "w") as archive:
            archive.writestr("notes.txt", "not a word file")
        self.assertEqual(sniff_kind(buffer.getvalue()), "unknown")

    def test_media_type_for(self):
        self.assertEqual(media_type_for("pdf", "application/octet-stream"), "application/pdf")
        self.assertEqual(media_type_for("text", ""), "text/plain")
        self.assertEqual(media_type_for("image", "image/png"), "image/png")
        self.assertEqual(media_type_for("unknown", ""), "application/octet-stream")


class ParseBytesTests(unittest.TestCase):
    def test_decode_text_bytes(self):
        self.assertEqual(decode_text_bytes("Zoë Müller".encode("utf-8")), "Zoë Müller")
        self.assertEqual(decode_text_bytes("\ufeffBOM text".encode("utf-8")), "BOM text")
        self.assertEqual(decode_text_bytes("UTF16 resume".encode("utf-16")), "UTF16 resume")
        self.assertEqual(decode_text_bytes(b"caf\xe9"), "café")

    def test_docx_paragraphs(self):
        text = parse_docx_bytes(_docx_bytes("Jane Roe", "jane@example.com"))
        self.assertIn("Jane Roe", text)
        self.assertIn("jane@example.com", text)

    def test_non_zip_docx_yields_empty_text(self):
        self.assertEqual(parse_docx_bytes(b"not a zip"), "")


if __name__ == "__main__":
    unittest.main()
