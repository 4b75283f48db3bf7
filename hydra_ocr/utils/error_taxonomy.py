from __future__ import annotations

import socket
from typing import Literal

ErrorCode = Literal[
    "FILE_UNSUPPORTED",
    "FILE_UNREADABLE",
    "CONFIG_INVALID",
    "AUTH_INVALID",
    "DATA_SOURCE_NOT_FOUND",
    "HYDRA_API_ERROR",
    "HYDRA_PARSE_ERROR",
    "FIELD_NOT_FOUND",
    "FIELD_TYPE_MISMATCH",
    "UNKNOWN_ERROR",
]

ERROR_FRIENDLY_MESSAGES: dict[ErrorCode, str] = {
    "FILE_UNSUPPORTED": "Input file format is not supported.",
    "FILE_UNREADABLE": "Input file could not be read.",
    "CONFIG_INVALID": "Recognition options are invalid.",
    "AUTH_INVALID": "Invalid API key.",
    "DATA_SOURCE_NOT_FOUND": "Data source ID was not found.",
    "HYDRA_API_ERROR": "Hydra API request failed.",
    "HYDRA_PARSE_ERROR": "Hydra API response could not be parsed.",
    "FIELD_NOT_FOUND": "Field is not defined for this data source.",
    "FIELD_TYPE_MISMATCH": "Field has a different type than requested.",
    "UNKNOWN_ERROR": "Unexpected error occurred.",
}

INTERNAL_ERROR_PREFIX = "This should never happen and is not your fault"


class HydraError(Exception):
    """Base class for all errors raised by the Hydra client."""


class UnsupportedFileTypeError(HydraError, ValueError):
    """Raised when a MIME type cannot be inferred from a file path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"failed to infer MIME type from file path: {path}")
        self.path = path


class InvalidConfigError(HydraError, ValueError):
    """Raised when recognition options are inconsistent."""


class AuthenticationError(HydraError):
    """Raised on 401 Unauthorized from the initial request."""

    status_code = 401


class DataSourceNotFoundError(HydraError):
    """Raised on 404 Not Found when the data source ID does not exist."""

    status_code = 404

    def __init__(self, data_source_id: str) -> None:
        super().__init__(
            "Received 404 Not Found --- Invalid data source ID "
            f"{data_source_id!r}. (Note that the name of the data source is NOT "
            "necessarily the ID of the data source. Spaces are usually "
            "replaced by hyphens.)"
        )
        self.data_source_id = data_source_id


class HydraAPIError(HydraError):
    """Raised when the initial request fails for any other reason."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResponseParseError(HydraError):
    """Raised when a 200 response body does not decode as a result set."""


class FieldNotFoundError(HydraError, KeyError):
    """Raised when a label is not configured for the data source."""

    def __init__(self, label: str, valid_labels: list[str]) -> None:
        message = (
            f'No such field "{label}" associated to the given data source. '
            f"Valid fields: {valid_labels}"
        )
        super().__init__(message)
        self.label = label
        self.valid_labels = valid_labels

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0])


class FieldTypeError(HydraError, TypeError):
    """Raised when a field is accessed through the wrong accessor."""

    def __init__(self, label: str, message: str) -> None:
        super().__init__(message)
        self.label = label


class UnexpectedFieldShapeError(HydraError):
    """Raised when a decoded field is neither a string nor a table of strings."""


def classify_error(error: Exception) -> ErrorCode:
    if isinstance(error, UnsupportedFileTypeError):
        return "FILE_UNSUPPORTED"
    if isinstance(error, InvalidConfigError):
        return "CONFIG_INVALID"
    if isinstance(error, AuthenticationError):
        return "AUTH_INVALID"
    if isinstance(error, DataSourceNotFoundError):
        return "DATA_SOURCE_NOT_FOUND"
    if isinstance(error, ResponseParseError):
        return "HYDRA_PARSE_ERROR"
    if isinstance(error, HydraAPIError):
        return "HYDRA_API_ERROR"
    if isinstance(error, FieldNotFoundError):
        return "FIELD_NOT_FOUND"
    if isinstance(error, FieldTypeError):
        return "FIELD_TYPE_MISMATCH"
    if isinstance(error, UnexpectedFieldShapeError):
        return "UNKNOWN_ERROR"

    if isinstance(error, (ConnectionError, TimeoutError, socket.timeout)):
        return "HYDRA_API_ERROR"
    if isinstance(error, OSError):
        return "FILE_UNREADABLE"

    return "UNKNOWN_ERROR"


def extract_http_status_code(error: Exception) -> int | None:
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    # httpx.HTTPStatusError and friends keep the status on the response.
    cause = error.__cause__
    response = getattr(cause, "response", None) if cause is not None else None
    status_code = getattr(response, "status_code", None)
    return status_code if isinstance(status_code, int) else None


def build_error_details(error: Exception) -> str:
    code = classify_error(error)
    details: list[str] = [
        f"code={code}",
        f"{error.__class__.__name__}: {error}",
    ]
    status_code = extract_http_status_code(error)
    if status_code is not None:
        details.append(f"status_code={status_code}")

    for field_name in ("data_source_id", "path", "label", "body"):
        value = getattr(error, field_name, None)
        if value:
            details.append(f"{field_name}={value}")

    if error.__cause__ is not None:
        cause = error.__cause__
        details.append(f"caused_by={cause.__class__.__name__}: {cause}")
    return "\n".join(details)
