from __future__ import annotations

from hydra_ocr.utils.error_taxonomy import (
    ERROR_FRIENDLY_MESSAGES,
    AuthenticationError,
    DataSourceNotFoundError,
    FieldNotFoundError,
    FieldTypeError,
    HydraAPIError,
    InvalidConfigError,
    ResponseParseError,
    UnexpectedFieldShapeError,
    UnsupportedFileTypeError,
    build_error_details,
    classify_error,
    extract_http_status_code,
)


def test_error_code_mapping() -> None:
    assert classify_error(UnsupportedFileTypeError("a.txt")) == "FILE_UNSUPPORTED"
    assert classify_error(FileNotFoundError("gone.png")) == "FILE_UNREADABLE"
    assert classify_error(PermissionError("denied")) == "FILE_UNREADABLE"
    assert classify_error(InvalidConfigError("x")) == "CONFIG_INVALID"
    assert classify_error(AuthenticationError("x")) == "AUTH_INVALID"
    assert classify_error(DataSourceNotFoundError("src")) == "DATA_SOURCE_NOT_FOUND"
    assert classify_error(HydraAPIError("x", status_code=500)) == "HYDRA_API_ERROR"
    assert classify_error(TimeoutError("x")) == "HYDRA_API_ERROR"
    assert classify_error(ResponseParseError("x")) == "HYDRA_PARSE_ERROR"
    assert classify_error(FieldNotFoundError("a", ["b"])) == "FIELD_NOT_FOUND"
    assert classify_error(FieldTypeError("a", "x")) == "FIELD_TYPE_MISMATCH"
    assert classify_error(UnexpectedFieldShapeError("x")) == "UNKNOWN_ERROR"

    class WeirdError(Exception):
        pass

    assert classify_error(WeirdError("boom")) == "UNKNOWN_ERROR"


def test_http_status_extraction_and_details() -> None:
    error = HydraAPIError("boom", status_code=502, body="bad gateway")

    assert extract_http_status_code(error) == 502
    assert extract_http_status_code(AuthenticationError("x")) == 401
    assert extract_http_status_code(DataSourceNotFoundError("src")) == 404
    assert extract_http_status_code(ValueError("x")) is None

    details = build_error_details(error)
    assert details.splitlines() == [
        "code=HYDRA_API_ERROR",
        "HydraAPIError: boom",
        "status_code=502",
        "body=bad gateway",
    ]


def test_error_details_include_cause_and_context() -> None:
    try:
        try:
            raise ConnectionError("connection refused")
        except ConnectionError as cause:
            raise HydraAPIError("request failed") from cause
    except HydraAPIError as error:
        details = build_error_details(error).splitlines()

    assert "status_code" not in "\n".join(details)
    assert details[-1] == "caused_by=ConnectionError: connection refused"

    not_found = build_error_details(DataSourceNotFoundError("my-src"))
    assert "code=DATA_SOURCE_NOT_FOUND" in not_found
    assert "status_code=404" in not_found
    assert "data_source_id=my-src" in not_found


def test_friendly_messages_cover_every_code() -> None:
    for code in (
        "FILE_UNSUPPORTED",
        "AUTH_INVALID",
        "DATA_SOURCE_NOT_FOUND",
        "HYDRA_API_ERROR",
        "HYDRA_PARSE_ERROR",
        "UNKNOWN_ERROR",
    ):
        assert code in ERROR_FRIENDLY_MESSAGES
