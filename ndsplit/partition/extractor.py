from __future__ import annotations
import re, orjson
from typing import Any, Dict, List, Optional, Sequence
from .errors import ArgumentError, KeyExtractionError, UnsafeKeyError

# path separators, NUL and the remaining ASCII control characters
UNSAFE_CHARS = re.compile(r"[/\\\x00-\x1f\x7f]")
RESERVED_STEMS = {"", ".", ".."}

def validate_path(path: Sequence[str]) -> List[str]:
    path = list(path)
    if not path:
        raise ArgumentError("key path must name at least one field")
    for seg in path:
        if not isinstance(seg, str) or not seg:
            raise ArgumentError(f"key path has an invalid segment: {seg!r} in {path!r}")
    return path

def _key_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    # bool is an int subclass; JSON true/false are not keys
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return orjson.dumps(value).decode("utf-8")
    return None

def extract(record: Any, path: Sequence[str], line_no: Optional[int] = None) -> str:
    """
    Resolve `path` through nested objects of `record` and return the routing key.

    Strings come back unchanged; numbers come back as their compact JSON text.
    Anything else (missing segment, non-object parent, null, bool, object,
    array) raises KeyExtractionError naming the offending dotted path.
    """
    cur = record
    for depth, seg in enumerate(path):
        where = ".".join(path[: depth + 1])
        if not isinstance(cur, dict):
            parent = ".".join(path[:depth]) or "<record>"
            raise KeyExtractionError(
                f"'{parent}' is {type(cur).__name__}, expected an object holding '{seg}'",
                path=where, line_no=line_no)
        if seg not in cur:
            raise KeyExtractionError(f"missing field '{where}'", path=where, line_no=line_no)
        cur = cur[seg]
    key = _key_text(cur)
    if key is None:
        dotted = ".".join(path)
        raise KeyExtractionError(
            f"field '{dotted}' is {type(cur).__name__}, expected a string or number",
            path=dotted, line_no=line_no)
    return key

def key_filename(key: str, policy: str = "reject", line_no: Optional[int] = None) -> str:
    """Map a routing key to the stem of its output file."""
    if policy == "sanitize":
        stem = UNSAFE_CHARS.sub("_", key)
        return "_" + stem if stem in RESERVED_STEMS else stem
    if policy != "reject":
        raise ArgumentError(f"unknown key policy: {policy!r}")
    if key in RESERVED_STEMS or UNSAFE_CHARS.search(key):
        raise UnsafeKeyError(f"routing key {key!r} is not usable as a file name", path=key, line_no=line_no)
    return key

class KeyExtractor:
    """Fixed key path plus file naming policy for one run."""

    def __init__(self, path: Sequence[str], policy: str = "reject"):
        self.path = validate_path(path)
        if policy not in ("reject", "sanitize"):
            raise ArgumentError(f"unknown key policy: {policy!r}")
        self.policy = policy
        self._stems: Dict[str, str] = {}

    @property
    def dotted(self) -> str:
        return ".".join(self.path)

    def __call__(self, record: Any, line_no: Optional[int] = None) -> str:
        return extract(record, self.path, line_no=line_no)

    def filename(self, key: str, line_no: Optional[int] = None) -> str:
        stem = self._stems.get(key)
        if stem is None:
            stem = self._stems[key] = key_filename(key, self.policy, line_no=line_no)
        return stem
