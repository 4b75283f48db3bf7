from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from hydra_ocr.utils.error_taxonomy import InvalidConfigError

MimeType = Literal[
    "image/bmp",
    "image/gif",
    "application/pdf",
    "image/png",
    "image/jpg",
    "image/jpeg",
]


@dataclass(frozen=True, slots=True)
class RecognizeConfig:
    """Per-call options. New options must be added with a default."""

    do_faster: bool = False
    return_jpgs: bool = False
    jpg_quality: int | None = None

    def __post_init__(self) -> None:
        if self.jpg_quality is None:
            return
        if not 1 <= self.jpg_quality <= 100:
            raise InvalidConfigError(
                f"jpg_quality must be between 1 and 100 inclusive, got {self.jpg_quality}"
            )
        if not self.return_jpgs:
            raise InvalidConfigError("jpg_quality requires return_jpgs=True")


class HydraRequestFile(BaseModel):
    mime_type: MimeType = Field(alias="MimeType")
    base64_file: str = Field(alias="Base64File")
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class HydraRequest(BaseModel):
    files: list[HydraRequestFile]
    do_faster: bool = Field(default=False, alias="DoFaster")
    return_jpgs: bool = Field(default=False, alias="ReturnJpgs")
    jpg_quality: int | None = Field(default=None, alias="JpgQuality")
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "files": [
                file.model_dump(by_alias=True) for file in self.files
            ],
            "DoFaster": self.do_faster,
        }
        if self.return_jpgs:
            payload["ReturnJpgs"] = True
        if self.jpg_quality is not None:
            payload["JpgQuality"] = self.jpg_quality
        return payload
