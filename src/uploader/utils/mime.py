from collections.abc import Mapping

from uploader.utils.constants import (
    DEFAULT_BINARY_CONTENT_TYPE,
    EXTENSION_MIME_TYPE_MAP,
)
from uploader.utils.filenames import split_extension

MAGIC_BYTES: Mapping[bytes, str] = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
    b"RIFF": "image/webp",
    b"%PDF": "application/pdf",
}


def detect_mime_type(file_data: bytes) -> str:
    for signature, mime in MAGIC_BYTES.items():
        if file_data.startswith(signature):
            return mime

    raise ValueError("Unsupported or unknown file type")


def guess_content_type(name: str, file_data: bytes = b"") -> str:
    """Content type for a stored file, by extension first, then by signature."""
    ext = split_extension(name).lstrip(".")
    if ext in EXTENSION_MIME_TYPE_MAP:
        return EXTENSION_MIME_TYPE_MAP[ext]

    try:
        return detect_mime_type(file_data)
    except ValueError:
        return DEFAULT_BINARY_CONTENT_TYPE
