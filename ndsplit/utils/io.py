from __future__ import annotations
import os
from typing import Iterator, Tuple

def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)

def iter_lines(path: str) -> Iterator[Tuple[int, bytes, int]]:
    """
    Yields (line_no, line, raw_size) for every line of `path`.
    `line` has its terminator stripped; `raw_size` counts it.
    """
    with open(path, "rb") as f:
        for line_no, raw in enumerate(f, start=1):
            yield line_no, raw.rstrip(b"\r\n"), len(raw)
