from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hydra_ocr.utils.error_taxonomy import (
    INTERNAL_ERROR_PREFIX,
    FieldNotFoundError,
    FieldTypeError,
    ResponseParseError,
    UnexpectedFieldShapeError,
)

Table = list[dict[str, str]]


@dataclass(frozen=True, slots=True)
class ScalarField:
    value: str


@dataclass(frozen=True, slots=True)
class TableField:
    rows: Table


@dataclass(frozen=True, slots=True)
class ImageField:
    data: bytes


FieldValue = ScalarField | TableField | ImageField


def decode_field(label: str, raw: Any) -> ScalarField | TableField:
    """Probe the dynamic wire value of one recognized field.

    Strings become scalars and lists become tables of string-to-string rows.
    Image crops travel as base64 strings and are only told apart from text
    by the accessor the caller picks, see ``RecognizedFile.get_image``.
    """
    if isinstance(raw, str):
        return ScalarField(raw)
    if isinstance(raw, list):
        return TableField(_decode_table(label, raw))
    raise _unexpected_shape(label, raw)


def _unexpected_shape(label: str, raw: Any) -> UnexpectedFieldShapeError:
    return UnexpectedFieldShapeError(
        f"{INTERNAL_ERROR_PREFIX}: field {label!r} expected a string or a table. "
        f"Got: {type(raw).__name__}"
    )


def _decode_table(label: str, raw_rows: list[Any]) -> Table:
    table: Table = []
    for raw_row in raw_rows:
        if not isinstance(raw_row, dict):
            raise UnexpectedFieldShapeError(
                f"{INTERNAL_ERROR_PREFIX}: table {label!r} expected row of type "
                f"dict[str, str]. Got: {type(raw_row).__name__}"
            )
        row: dict[str, str] = {}
        for column, cell in raw_row.items():
            if not isinstance(cell, str):
                raise UnexpectedFieldShapeError(
                    f"{INTERNAL_ERROR_PREFIX}: table {label!r} expected cell of "
                    f"type str. Got: {type(cell).__name__}"
                )
            row[str(column)] = cell
        table.append(row)
    return table


class RecognizedFile(BaseModel):
    """One result row: the recognized fields of one submitted file."""

    error: str = Field(default="", alias="Error")
    file_index: int = Field(alias="FileIndex")
    recognized_text: dict[str, Any] = Field(
        default_factory=dict, alias="RecognizedText"
    )
    base64_image: str | None = Field(default=None, alias="Base64Image")
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("error", mode="before")
    @classmethod
    def _null_error(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("recognized_text", mode="before")
    @classmethod
    def _null_recognized_text(cls, value: Any) -> Any:
        # A row that failed recognition may carry no fields at all.
        return {} if value is None else value

    @property
    def ok(self) -> bool:
        return not self.error

    def labels(self) -> list[str]:
        return list(self.recognized_text)

    def fields(self) -> dict[str, ScalarField | TableField]:
        return {
            label: decode_field(label, raw)
            for label, raw in self.recognized_text.items()
        }

    def get(self, label: str) -> str:
        """Return the string value of ``label``.

        The value may be empty. Raises FieldNotFoundError when the data source
        has no such field and FieldTypeError when the field is a table.
        """
        raw = self._lookup(label)
        if isinstance(raw, list):
            raise FieldTypeError(
                label,
                f'The field "{label}" is a table, not a string. '
                'Consider using the "get_table" method.',
            )
        if not isinstance(raw, str):
            raise _unexpected_shape(label, raw)
        return raw

    def get_table(self, label: str) -> Table:
        """Return the rows of table ``label`` in the order the service sent them.

        The table may be empty. Raises FieldNotFoundError when the data source
        has no such field and FieldTypeError when the field is a string.
        """
        raw = self._lookup(label)
        if isinstance(raw, str):
            raise FieldTypeError(
                label,
                f'The field "{label}" is a string, not a table. '
                'Consider using the "get" method.',
            )
        if not isinstance(raw, list):
            raise _unexpected_shape(label, raw)
        return _decode_table(label, raw)

    def get_image(self, label: str) -> bytes:
        raw = self._lookup(label)
        if isinstance(raw, list):
            raise FieldTypeError(
                label,
                f'The field "{label}" is a table, not an image. '
                'Consider using the "get_table" method.',
            )
        if not isinstance(raw, str):
            raise _unexpected_shape(label, raw)
        return _decode_image(label, raw).data

    def cropped_image(self) -> bytes | None:
        if not self.base64_image:
            return None
        return _decode_image("Base64Image", self.base64_image).data

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(
            by_alias=True,
            exclude={"base64_image"} if not self.base64_image else None,
        )

    def _lookup(self, label: str) -> Any:
        if label not in self.recognized_text:
            raise FieldNotFoundError(label, self.labels())
        return self.recognized_text[label]


class RecognizedFiles(BaseModel):
    rows: list[RecognizedFile] = Field(default_factory=list, alias="Rows")
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("rows", mode="before")
    @classmethod
    def _null_rows(cls, value: Any) -> Any:
        return [] if value is None else value


def _decode_image(label: str, encoded: str) -> ImageField:
    try:
        return ImageField(base64.b64decode(encoded, validate=True))
    except (binascii.Error, ValueError) as error:
        raise FieldTypeError(
            label, f'The field "{label}" does not hold base64 image data.'
        ) from error


def validate_file_indexes(rows: list[RecognizedFile], file_count: int) -> None:
    for row in rows:
        if not 0 <= row.file_index < file_count:
            raise ResponseParseError(
                f"{INTERNAL_ERROR_PREFIX}: row FileIndex {row.file_index} is outside "
                f"the {file_count} submitted file(s)"
            )
