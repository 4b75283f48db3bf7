from __future__ import annotations

import json
from typing import Callable, Iterable, TextIO

from hydra_ocr.hydra_client.results import RecognizedFile


def write_rows(
    rows: Iterable[RecognizedFile],
    stream: TextIO,
    *,
    on_row: Callable[[int], None] | None = None,
) -> int:
    """Stream ``rows`` to ``stream`` as ``{"Rows":[...]}``, one row at a time.

    ``on_row`` receives the running count after each row is written.
    Returns the number of rows written.
    """
    stream.write('{"Rows":[')
    count = 0
    for row in rows:
        if count:
            stream.write(",")
        stream.write(json.dumps(row.to_wire(), ensure_ascii=False))
        stream.flush()
        count += 1
        if on_row is not None:
            on_row(count)
    stream.write("]}\n")
    stream.flush()
    return count
