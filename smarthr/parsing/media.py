from __future__ import annotations

from io import BytesIO
from zipfile import ZipFile

from smarthr.schemas import DocumentKind

CONTENT_TYPE_KINDS: dict[str, DocumentKind] = {
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/msword": "doc",
    "text/plain": "text",
    "text/markdown": "text",
    "image/png": "image",
    "image/jpeg": "image",
    "image/jpg": "image",
    "image/tiff": "image",
    "image/webp": "image",
    "image/gif": "image",
    "image/bmp": "image",
}

EXTENSION_KINDS: dict[str, DocumentKind] = {
    "pdf": "pdf",
    "docx": "docx",
    "doc": "doc",
    "txt": "text",
    "md": "text",
    "png": "image",
    "jpg": "image",
    "jpeg": "image",
    "tif": "image",
    "tiff": "image",
    "webp": "image",
    "gif": "image",
    "bmp": "image",
}

PDF_MAGIC = b"%PDF-"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"
GIF_MAGICS = (b"GIF87a", b"GIF89a")
BMP_MAGIC = b"BM"
TIFF_MAGICS = (b"II*\x00", b"MM\x00*")
WEBP_RIFF_MAGIC = b"RIFF"
WEBP_WEBP_MAGIC = b"WEBP"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def _zip_has_paths(content: bytes, prefixes: tuple[str, ...]) -> bool:
    try:
        with ZipFile(BytesIO(content)) as archive:
            names = archive.namelist()
        return any(any(name.startswith(prefix) for prefix in prefixes) for name in names)
    except Exception:
        return False


def is_probably_text_payload(content: bytes) -> bool:
    if not content:
        return False
    sample = content[:4096]
    if b"\x00" in sample:
        return False
    printable = 0
    for byte in sample:
        if byte in (9, 10, 13) or 32 <= byte <= 126 or byte >= 128:
            printable += 1
    return (printable / len(sample)) >= 0.9


def sniff_kind(content: bytes) -> DocumentKind:
    if content.startswith(PDF_MAGIC):
        return "pdf"
    if content.startswith(PNG_MAGIC) or content.startswith(JPEG_MAGIC) or content.startswith(BMP_MAGIC):
        return "image"
    if any(content.startswith(magic) for magic in GIF_MAGICS + TIFF_MAGICS):
        return "image"
    if len(content) >= 12 and content.startswith(WEBP_RIFF_MAGIC) and content[8:12] == WEBP_WEBP_MAGIC:
        return "image"
    if any(content.startswith(magic) for magic in ZIP_MAGICS) and _zip_has_paths(content, ("word/",)):
        return "docx"
    if content.startswith(OLE_MAGIC):
        return "doc"
    if is_probably_text_payload(content):
        return "text"
    return "unknown"


def extension_of(filename: str) -> str:
    if "." not in (filename or ""):
        return ""
    return filename.rsplit(".", 1)[-1].strip().lower()


def detect_document_kind(media_type: str, filename: str, content: bytes) -> DocumentKind:
    """Declared content type first, then the filename extension, then magic bytes."""
    declared = (media_type or "").split(";")[0].strip().lower()
    kind = CONTENT_TYPE_KINDS.get(declared)
    if kind:
        return kind
    kind = EXTENSION_KINDS.get(extension_of(filename))
    if kind:
        return kind
    return sniff_kind(content)


def media_type_for(kind: DocumentKind, declared: str) -> str:
    declared = (declared or "").split(";")[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared
    return {
        "pdf": "application/pdf",
        "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "doc": "application/msword",
        "text": "text/plain",
    }.get(kind, "application/octet-stream")
