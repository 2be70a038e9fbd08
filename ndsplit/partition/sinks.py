from __future__ import annotations
import os
from dataclasses import dataclass
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple
from ..utils.logger import get_logger
from .errors import SinkError

log = get_logger("ndsplit.sinks")

@dataclass
class Sink:
    key: str
    path: str
    fh: BinaryIO
    records: int = 0

    def write(self, data: bytes) -> None:
        self.fh.write(data)
        self.records += 1

class SinkPool:
    """
    One open output file per routing key, created on first use.

    Files are opened "wb": a file left over from an earlier run is
    truncated, never appended to. Use as a context manager so every sink
    is closed on every way out of the run.
    """

    def __init__(self, out_dir: str, namer: Optional[Callable[[str], str]] = None, suffix: str = ".json"):
        self.out_dir = out_dir
        self.suffix = suffix
        self._namer = namer or (lambda key: key)
        self._sinks: Dict[str, Sink] = {}
        self._owners: Dict[str, str] = {}  # normcased path -> key
        self._files: Dict[Tuple[int, int], str] = {}  # (st_dev, st_ino) -> key
        self._closed = False

    def __enter__(self) -> "SinkPool":
        return self

    def __exit__(self, *exc) -> None:
        self.close_all()

    def __len__(self) -> int:
        return len(self._sinks)

    def __contains__(self, key: str) -> bool:
        return key in self._sinks

    def keys(self) -> List[str]:
        return list(self._sinks)

    def paths(self) -> Dict[str, str]:
        return {k: s.path for k, s in self._sinks.items()}

    def counts(self) -> Dict[str, int]:
        return {k: s.records for k, s in self._sinks.items()}

    def path_for(self, key: str) -> str:
        return os.path.join(self.out_dir, self._namer(key) + self.suffix)

    def _owner_of_file(self, path: str) -> Optional[str]:
        # case-insensitive filesystems and links can alias two names to one open file
        try:
            st = os.stat(path)
        except OSError:
            return None
        if not st.st_ino:
            return None
        return self._files.get((st.st_dev, st.st_ino))

    def get_or_create(self, key: str) -> Sink:
        sink = self._sinks.get(key)
        if sink is not None:
            return sink
        if self._closed:
            raise SinkError(f"sink pool is closed, cannot open '{key}'", key=key)
        path = self.path_for(key)
        owner = self._owners.get(os.path.normcase(path))
        if owner is None:
            owner = self._owner_of_file(path)
        if owner is not None:
            raise SinkError(f"keys {owner!r} and {key!r} both map to {path}", key=key, path=path)
        try:
            fh = open(path, "wb")
        except OSError as e:
            raise SinkError(f"cannot create {path} for key {key!r}: {e}", key=key, path=path) from e
        sink = Sink(key=key, path=path, fh=fh)
        self._sinks[key] = sink
        self._owners[os.path.normcase(path)] = key
        st = os.fstat(fh.fileno())
        if st.st_ino:
            self._files[(st.st_dev, st.st_ino)] = key
        log.debug(f"[sinks] opened {path}")
        return sink

    def write(self, key: str, data: bytes) -> Sink:
        sink = self.get_or_create(key)
        try:
            sink.write(data)
        except OSError as e:
            raise SinkError(f"cannot write {sink.path}: {e}", key=key, path=sink.path) from e
        return sink

    def close_all(self) -> None:
        """Close every sink; the first close failure is re-raised after the rest are closed."""
        if self._closed:
            return
        self._closed = True
        first: Optional[SinkError] = None
        for sink in self._sinks.values():
            try:
                sink.fh.close()
            except OSError as e:
                log.error(f"[sinks] failed to close {sink.path}: {e}")
                if first is None:
                    first = SinkError(f"cannot close {sink.path}: {e}", key=sink.key, path=sink.path)
        if first is not None:
            raise first
