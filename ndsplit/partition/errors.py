from __future__ import annotations
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..utils.schemas import RunSummary

class SplitError(Exception):
    """Base for every failure that ends a split run."""
    exit_code = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.summary: Optional["RunSummary"] = None

class ArgumentError(SplitError):
    exit_code = 2

class InputNotFoundError(SplitError):
    def __init__(self, path: str):
        super().__init__(f"Could not open file: {path}. File does not exist.")
        self.path = path

class InputNotRegularFileError(SplitError):
    def __init__(self, path: str):
        super().__init__(f"Could not open file: {path}. Not a file.")
        self.path = path

class DecodeError(SplitError):
    def __init__(self, message: str, line_no: Optional[int] = None):
        where = f"line {line_no}: " if line_no is not None else ""
        super().__init__(f"{where}invalid JSON ({message})")
        self.line_no = line_no
        self.reason = message

class KeyExtractionError(SplitError):
    def __init__(self, message: str, path: str = "", line_no: Optional[int] = None):
        where = f"line {line_no}: " if line_no is not None else ""
        super().__init__(f"{where}{message}")
        self.path = path
        self.line_no = line_no

class UnsafeKeyError(KeyExtractionError):
    pass

class SinkError(SplitError):
    def __init__(self, message: str, key: str = "", path: str = ""):
        super().__init__(message)
        self.key = key
        self.path = path
