from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, List, Literal

DEFAULT_KEY_PATH = ["inparams", "target"]
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"

class SplitSettings(BaseModel):
    out_dir: str = "."
    key_path: List[str] = Field(default_factory=lambda: list(DEFAULT_KEY_PATH))
    on_error: Literal["abort", "skip"] = "abort"
    key_policy: Literal["reject", "sanitize"] = "reject"
    sort_keys: bool = False
    progress: Literal["console", "tqdm", "none"] = "console"
    log_level: str = "INFO"

    @field_validator("key_path", mode="before")
    @classmethod
    def _split_dotted(cls, v):
        # "inparams.target" is accepted as shorthand for ["inparams", "target"]
        if isinstance(v, str):
            return v.split(".")
        if isinstance(v, list) and len(v) == 1 and isinstance(v[0], str) and "." in v[0]:
            return v[0].split(".")
        return v

    @field_validator("key_path")
    @classmethod
    def _non_empty_segments(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("key_path must name at least one field")
        if any(not seg for seg in v):
            raise ValueError(f"key_path has an empty segment: {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = str(v).upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return v

class RunSummary(BaseModel):
    state: RunState = RunState.IDLE
    input_path: str
    out_dir: str
    lines_read: int = 0
    records_written: int = 0
    records_skipped: int = 0
    bytes_done: int = 0
    bytes_total: int = 0
    files: Dict[str, int] = Field(default_factory=dict)  # routing key -> records written
    error: Optional[str] = None
