from __future__ import annotations

import json
import logging
import time

import httpx
from pydantic import ValidationError

from hydra_ocr.config.settings import Settings, get_settings
from hydra_ocr.hydra_client.delivery import ResultChannel, start_producer
from hydra_ocr.hydra_client.encoding import FilePath, build_request
from hydra_ocr.hydra_client.results import (
    RecognizedFile,
    RecognizedFiles,
    validate_file_indexes,
)
from hydra_ocr.hydra_client.types import RecognizeConfig
from hydra_ocr.logging import clear_log_context, get_log_context, set_log_context
from hydra_ocr.utils.error_taxonomy import (
    INTERNAL_ERROR_PREFIX,
    AuthenticationError,
    DataSourceNotFoundError,
    HydraAPIError,
    ResponseParseError,
)

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> httpx.Client:
    return httpx.Client(timeout=settings.request_timeout_seconds)


class HydraClient:
    """Client for the Hydra text recognition API.

    The API key and settings are read-only after construction, so one client
    may serve concurrent calls from several threads.
    """

    def __init__(
        self,
        api_key: str,
        *,
        settings: Settings | None = None,
        http_client: httpx.Client | None = None,
        distinguish_not_found: bool | None = None,
    ) -> None:
        self._api_key = api_key
        self._settings = settings if settings is not None else get_settings()
        self._http_client = http_client
        if distinguish_not_found is None:
            distinguish_not_found = self._settings.distinguish_not_found
        self._distinguish_not_found = distinguish_not_found

    def recognize(
        self, data_source_id: str, *file_paths: FilePath
    ) -> ResultChannel[RecognizedFile]:
        """Shorthand for ``recognize_cfg`` with default options."""
        return self.recognize_cfg(RecognizeConfig(), data_source_id, *file_paths)

    def recognize_cfg(
        self,
        config: RecognizeConfig,
        data_source_id: str,
        *file_paths: FilePath,
    ) -> ResultChannel[RecognizedFile]:
        """Recognize all text in ``file_paths`` against a data source.

        Blocks until the initial HTTP exchange completes so that unreadable
        files, unsupported extensions and non-200 responses surface here as
        exceptions. Rows are then delivered on the returned channel, in the
        order the service sent them, by a background thread. Use each row's
        ``file_index`` to match it to its input path.

        All files go out in a single request.
        """
        previous_context = get_log_context()
        set_log_context(data_source_id=data_source_id)
        try:
            return self._recognize(config, data_source_id, list(file_paths))
        finally:
            if "data_source_id" in previous_context:
                set_log_context(data_source_id=previous_context["data_source_id"])
            else:
                clear_log_context(["data_source_id"])

    def _recognize(
        self,
        config: RecognizeConfig,
        data_source_id: str,
        file_paths: list[FilePath],
    ) -> ResultChannel[RecognizedFile]:
        request = build_request(config, file_paths)
        body = json.dumps(request.to_payload())
        url = self._settings.endpoint_for(data_source_id)

        logger.info(
            "Uploading files to Hydra API",
            extra={
                "stage": "request",
                "metrics": {"files": len(request.files), "bytes": len(body)},
            },
        )

        start_time = time.perf_counter()
        response = self._post(url, body)
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"Hydra API responded with status {response.status_code}",
            extra={
                "stage": "response",
                "duration_ms": round(elapsed_ms, 1),
            },
        )

        self._raise_for_status(response, data_source_id)
        rows = self._decode_rows(response, file_count=len(request.files))

        return start_producer(rows, capacity=self._settings.channel_capacity)

    def _post(self, url: str, body: str) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "authorization": f"Basic {self._api_key}",
        }
        try:
            if self._http_client is not None:
                return self._http_client.post(url, content=body, headers=headers)
            with build_client(self._settings) as client:
                return client.post(url, content=body, headers=headers)
        except httpx.TransportError as error:
            raise HydraAPIError(
                f"Initial HTTP request to the Hydra API failed: {error}"
            ) from error

    def _raise_for_status(self, response: httpx.Response, data_source_id: str) -> None:
        status_code = response.status_code
        if status_code == 200:
            return
        if status_code == 401:
            raise AuthenticationError(
                "Invalid API key; Received 401 Unauthorized from initial HTTP "
                "request to the Hydra API."
            )
        if status_code == 404 and self._distinguish_not_found:
            raise DataSourceNotFoundError(data_source_id)

        body = _read_body(response)
        if body is None:
            raise HydraAPIError(
                "Non-200 response from initial HTTP request to the Hydra API. "
                f"Status of initial HTTP response: {status_code}. Furthermore, "
                "failed to read body of initial HTTP response.",
                status_code=status_code,
            )
        raise HydraAPIError(
            "Non-200 response from initial HTTP request to the Hydra API. "
            f"Status of initial HTTP response: {status_code}. Body of initial "
            f"HTTP response:\n{body}",
            status_code=status_code,
            body=body,
        )

    def _decode_rows(
        self, response: httpx.Response, *, file_count: int
    ) -> list[RecognizedFile]:
        try:
            result_set = RecognizedFiles.model_validate_json(response.content)
        except ValidationError as error:
            raise ResponseParseError(
                f"{INTERNAL_ERROR_PREFIX}: failed to decode body of initial "
                f"HTTP response; error: {error}"
            ) from error

        validate_file_indexes(result_set.rows, file_count)
        return result_set.rows


def _read_body(response: httpx.Response) -> str | None:
    try:
        return response.text
    except (httpx.StreamError, UnicodeDecodeError):
        return None
