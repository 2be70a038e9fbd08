from __future__ import annotations
import re, orjson
from typing import Any, Optional, Union
from .errors import DecodeError

# strings are matched first so digits inside them are skipped
_INT_TOKENS = re.compile(rb'"(?:[^"\\]|\\.)*"|(?<![\w.+-])(-?\d+)(?![\w.])')
INT_MIN, UINT_MAX = -(2 ** 63), 2 ** 64 - 1

def decode(line: Union[bytes, str], line_no: Optional[int] = None) -> Any:
    try:
        return orjson.loads(line)
    except orjson.JSONDecodeError as e:
        raise DecodeError(str(e), line_no=line_no) from e

def encode(record: Any, sort_keys: bool = False) -> bytes:
    opt = orjson.OPT_APPEND_NEWLINE
    if sort_keys:
        opt |= orjson.OPT_SORT_KEYS
    return orjson.dumps(record, option=opt)

def check_integers(line: Union[bytes, str], line_no: Optional[int] = None) -> None:
    """Raise DecodeError for integer literals orjson would widen to float."""
    if isinstance(line, str):
        line = line.encode("utf-8")
    for m in _INT_TOKENS.finditer(line):
        tok = m.group(1)
        if tok and len(tok) >= 19 and not INT_MIN <= int(tok) <= UINT_MAX:
            raise DecodeError(f"integer {tok.decode('ascii')} does not fit in 64 bits", line_no=line_no)

def render(line: bytes, record: Any, sort_keys: bool = False, line_no: Optional[int] = None) -> bytes:
    """
    Output bytes for one record. The source text is written as-is; only
    sort_keys re-encodes, and then wide integers are refused rather than
    rounded.
    """
    if not sort_keys:
        return line.strip() + b"\n"
    check_integers(line, line_no)
    return encode(record, sort_keys=True)
