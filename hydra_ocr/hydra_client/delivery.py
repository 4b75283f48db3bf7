from __future__ import annotations

import logging
import queue
import threading
from typing import Generic, Iterable, Iterator, TypeVar

from hydra_ocr.utils.error_taxonomy import HydraError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CHANNEL_CAPACITY = 16

_CLOSED = object()


class ChannelClosedError(HydraError):
    """Raised when putting onto a channel that has already been closed."""


class ResultChannel(Generic[T]):
    """Bounded, ordered, closable queue for a single producer and consumer.

    ``get`` blocks until the producer pushes a row or closes the channel and
    returns ``None`` once the channel is closed and drained. Iterating yields
    rows until closure.
    """

    def __init__(self, capacity: int = DEFAULT_CHANNEL_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"channel capacity must be positive, got {capacity}")
        self._queue: queue.Queue[object] = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self._drained = False

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def put(self, item: T) -> None:
        if self._closed.is_set():
            raise ChannelClosedError("put on closed channel")
        self._queue.put(item)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._queue.put(_CLOSED)

    def get(self, timeout: float | None = None) -> T | None:
        if self._drained:
            return None
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            self._drained = True
            return None
        return item  # type: ignore[return-value]

    def collect(self) -> list[T]:
        return list(self)

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self.get()
            if item is None:
                return
            yield item


def start_producer(
    rows: Iterable[T],
    *,
    capacity: int = DEFAULT_CHANNEL_CAPACITY,
    name: str = "hydra-result-producer",
) -> ResultChannel[T]:
    """Push already materialized ``rows`` onto a new channel from a daemon thread.

    The thread performs no I/O: it moves rows in order, then closes the channel.
    """
    channel: ResultChannel[T] = ResultChannel(capacity)
    items = list(rows)

    def _produce() -> None:
        try:
            for item in items:
                channel.put(item)
        finally:
            channel.close()
        logger.debug(
            "Result producer finished",
            extra={"stage": "deliver", "metrics": {"rows": len(items)}},
        )

    thread = threading.Thread(target=_produce, name=name, daemon=True)
    thread.start()
    return channel
