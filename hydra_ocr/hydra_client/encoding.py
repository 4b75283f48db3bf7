from __future__ import annotations

import base64
import logging
from os import PathLike
from pathlib import Path

from hydra_ocr.hydra_client.mime import infer_mime_type, infer_mime_types
from hydra_ocr.hydra_client.types import (
    HydraRequest,
    HydraRequestFile,
    MimeType,
    RecognizeConfig,
)

logger = logging.getLogger(__name__)

FilePath = str | PathLike[str]


def encode_file(path: FilePath, mime_type: MimeType | None = None) -> HydraRequestFile:
    file_path = str(path)
    if mime_type is None:
        mime_type = infer_mime_type(file_path)
    content = Path(file_path).read_bytes()
    return HydraRequestFile(
        mime_type=mime_type,
        base64_file=base64.b64encode(content).decode("ascii"),
    )


def build_request(config: RecognizeConfig, file_paths: list[FilePath]) -> HydraRequest:
    """Build the single request body carrying every input file.

    MIME types are inferred for the whole batch first so that an unsupported
    extension fails before any file is read. Read errors propagate unchanged.
    """
    paths = [str(path) for path in file_paths]
    mime_types = infer_mime_types(paths)

    files = [
        encode_file(path, mime_type) for path, mime_type in zip(paths, mime_types)
    ]

    logger.debug(
        "Encoded request files",
        extra={
            "stage": "encode",
            "metrics": {
                "files": len(files),
                "base64_chars": sum(len(file.base64_file) for file in files),
            },
        },
    )
    return HydraRequest(
        files=files,
        do_faster=config.do_faster,
        return_jpgs=config.return_jpgs,
        jpg_quality=config.jpg_quality,
    )
