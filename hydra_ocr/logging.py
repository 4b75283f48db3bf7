import json
import logging
import sys
from datetime import datetime, timezone
from threading import local

_log_ctx = local()

ROOT_LOGGER_NAME = "hydra_ocr"


def set_log_context(**kwargs):
    for k, v in kwargs.items():
        setattr(_log_ctx, k, v)


def clear_log_context(keys=None):
    if keys is None:
        keys = list(get_log_context())
    for k in keys:
        if hasattr(_log_ctx, k):
            delattr(_log_ctx, k)


def get_log_context() -> dict:
    return {k: v for k, v in _log_ctx.__dict__.items() if not k.startswith("_")}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ctx = get_log_context()
        data = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%SZ"
            ),
            "level": record.levelname,
            "logger": record.name,
            "data_source_id": getattr(
                record, "data_source_id", ctx.get("data_source_id")
            ),
            "stage": getattr(record, "stage", ctx.get("stage")),
            "msg": record.getMessage(),
        }

        if hasattr(record, "duration_ms"):
            data["duration_ms"] = record.duration_ms
        if hasattr(record, "metrics"):
            data["metrics"] = record.metrics
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)

        # Clean nulls
        data = {k: v for k, v in data.items() if v is not None}
        return json.dumps(data)


def setup_logging(level=logging.INFO, log_file: str = None) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = JsonFormatter()

    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger
