from __future__ import annotations

import base64

import pytest

from hydra_ocr.hydra_client.results import (
    RecognizedFile,
    RecognizedFiles,
    ScalarField,
    TableField,
    validate_file_indexes,
)
from hydra_ocr.utils.error_taxonomy import (
    FieldNotFoundError,
    FieldTypeError,
    ResponseParseError,
    UnexpectedFieldShapeError,
    classify_error,
)

ITEMS = [{"qty": "2", "sku": "A1"}, {"qty": "1", "sku": "B2"}]
LOGO = base64.b64encode(b"\x89PNG fake").decode("ascii")


def _row(**fields: object) -> RecognizedFile:
    return RecognizedFile.model_validate(
        {"Error": "", "FileIndex": 0, "RecognizedText": fields}
    )


def test_get_returns_scalar_value() -> None:
    row = _row(name="Acme Corp", items=ITEMS)

    assert row.get("name") == "Acme Corp"


def test_get_allows_empty_string() -> None:
    assert _row(total="").get("total") == ""


def test_get_on_table_names_table_accessor() -> None:
    row = _row(name="Acme Corp", items=ITEMS)

    with pytest.raises(FieldTypeError, match='"get_table"'):
        row.get("items")


def test_get_table_returns_rows_in_order() -> None:
    row = _row(name="Acme Corp", items=ITEMS)

    table = row.get_table("items")

    assert table == ITEMS
    assert [sorted(r) for r in table] == [["qty", "sku"], ["qty", "sku"]]
    assert [r["sku"] for r in table] == ["A1", "B2"]


def test_get_table_on_scalar_names_scalar_accessor() -> None:
    row = _row(name="Acme Corp")

    with pytest.raises(FieldTypeError, match='"get"'):
        row.get_table("name")


def test_empty_table_is_valid() -> None:
    assert _row(items=[]).get_table("items") == []


def test_missing_label_enumerates_valid_labels() -> None:
    row = _row(name="Acme Corp", items=ITEMS)

    with pytest.raises(FieldNotFoundError) as exc_info:
        row.get("total")

    assert exc_info.value.valid_labels == ["name", "items"]
    assert "Valid fields: ['name', 'items']" in str(exc_info.value)

    with pytest.raises(KeyError):
        row.get_table("total")


def test_unexpected_cell_type_is_internal_error() -> None:
    row = _row(items=[{"qty": 2}])

    with pytest.raises(UnexpectedFieldShapeError, match="This should never happen") as exc_info:
        row.get_table("items")

    assert classify_error(exc_info.value) == "UNKNOWN_ERROR"


def test_unexpected_row_type_is_internal_error() -> None:
    row = _row(items=["not-a-row"])

    with pytest.raises(UnexpectedFieldShapeError):
        row.get_table("items")


def test_unexpected_field_type_is_internal_error() -> None:
    with pytest.raises(UnexpectedFieldShapeError):
        _row(count=3).get("count")


def test_fields_returns_tagged_variants() -> None:
    fields = _row(name="Acme Corp", items=ITEMS).fields()

    assert fields == {"name": ScalarField("Acme Corp"), "items": TableField(ITEMS)}


def test_get_image_decodes_base64_field() -> None:
    assert _row(logo=LOGO).get_image("logo") == b"\x89PNG fake"


def test_get_image_rejects_tables_and_non_base64() -> None:
    row = _row(items=ITEMS, name="Acme Corp!")

    with pytest.raises(FieldTypeError):
        row.get_image("items")
    with pytest.raises(FieldTypeError, match="base64"):
        row.get_image("name")


def test_cropped_image_and_wire_shape() -> None:
    with_image = RecognizedFile.model_validate(
        {"Error": "", "FileIndex": 1, "RecognizedText": {}, "Base64Image": LOGO}
    )
    without_image = _row(name="x")

    assert with_image.cropped_image() == b"\x89PNG fake"
    assert without_image.cropped_image() is None
    assert with_image.to_wire()["Base64Image"] == LOGO
    assert without_image.to_wire() == {
        "Error": "",
        "FileIndex": 0,
        "RecognizedText": {"name": "x"},
    }


def test_result_set_decodes_from_wire_json() -> None:
    result_set = RecognizedFiles.model_validate_json(
        '{"Rows": [{"Error": "bad scan", "FileIndex": 0, "RecognizedText": {}}]}'
    )

    assert len(result_set.rows) == 1
    assert result_set.rows[0].ok is False


def test_validate_file_indexes() -> None:
    rows = [_row(), RecognizedFile(file_index=1)]

    validate_file_indexes(rows, 2)
    with pytest.raises(ResponseParseError):
        validate_file_indexes(rows, 1)
    with pytest.raises(ResponseParseError):
        validate_file_indexes([RecognizedFile(file_index=-1)], 3)


def test_get_on_malformed_table_still_names_table_accessor() -> None:
    row = _row(items=[{"qty": 2}])

    with pytest.raises(FieldTypeError, match='"get_table"'):
        row.get("items")
    with pytest.raises(FieldTypeError, match='"get_table"'):
        row.get_image("items")


def test_null_error_and_recognized_text_decode_as_empty() -> None:
    row = RecognizedFile.model_validate(
        {"Error": None, "FileIndex": 0, "RecognizedText": None}
    )

    assert row.ok is True
    assert row.labels() == []
    with pytest.raises(FieldNotFoundError):
        row.get("name")


def test_null_rows_decode_as_empty_result_set() -> None:
    assert RecognizedFiles.model_validate_json('{"Rows": null}').rows == []
