from __future__ import annotations

from hydra_ocr.hydra_client.types import MimeType
from hydra_ocr.utils.error_taxonomy import UnsupportedFileTypeError

SUPPORTED_SUFFIXES: dict[str, MimeType] = {
    ".bmp": "image/bmp",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpg",
    ".jpeg": "image/jpeg",
}

MIN_PATH_LENGTH = 4


def infer_mime_type(path: str) -> MimeType:
    """Map the trailing extension of ``path`` to a MIME type the service accepts.

    Matching is case-insensitive and purely textual: the file is not opened.
    Raises UnsupportedFileTypeError for short paths and unknown extensions.
    """
    if len(path) < MIN_PATH_LENGTH:
        raise UnsupportedFileTypeError(path)

    lowered = path.lower()
    for suffix, mime_type in SUPPORTED_SUFFIXES.items():
        if lowered.endswith(suffix):
            return mime_type

    raise UnsupportedFileTypeError(path)


def infer_mime_types(paths: list[str]) -> list[MimeType]:
    # All paths are checked before any file is read.
    return [infer_mime_type(path) for path in paths]
