"""
Progress reporting for a split run.

The engine calls `report(bytes_done, bytes_total, started_at, current_key)`
after every input line. The ETA is a linear extrapolation from the bytes
consumed so far, computed by the pure `estimate` function so it can be
checked without a clock.
"""
from __future__ import annotations
import sys, time
from dataclasses import dataclass
from typing import Callable, IO, Optional
from tqdm import tqdm

Clock = Callable[[], float]

@dataclass(frozen=True)
class Estimate:
    percent: float
    eta_seconds: Optional[float]  # None until at least one byte is consumed

def estimate(bytes_done: int, bytes_total: int, elapsed: float) -> Estimate:
    if bytes_total <= 0:
        return Estimate(100.0, 0.0)
    percent = bytes_done / bytes_total * 100.0
    if bytes_done <= 0:
        return Estimate(percent, None)
    avg = elapsed / bytes_done
    total_expected = avg * bytes_total
    return Estimate(percent, max(total_expected - elapsed, 0.0))

class ProgressReporter:
    def report(self, bytes_done: int, bytes_total: int, started_at: float, current_key: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

class NullProgress(ProgressReporter):
    def report(self, bytes_done, bytes_total, started_at, current_key):
        pass

class ConsoleProgress(ProgressReporter):
    """One status line per input line; on a terminal the previous line is overwritten."""

    CLEAR_PREV = "\x1b[A\r\x1b[0K"

    def __init__(self, stream: Optional[IO[str]] = None, clock: Clock = time.monotonic,
                 overwrite: Optional[bool] = None):
        self.stream = stream or sys.stdout
        self.clock = clock
        if overwrite is None:
            isatty = getattr(self.stream, "isatty", None)
            overwrite = bool(isatty and isatty())
        self.overwrite = overwrite
        self._lines = 0

    def format(self, est: Estimate, current_key: str) -> str:
        eta = "     ?" if est.eta_seconds is None else f"{int(est.eta_seconds):6d}"
        return f"Processing... ({est.percent:6.2f}% ) [ETA: {eta}s] {current_key}"

    def report(self, bytes_done, bytes_total, started_at, current_key):
        est = estimate(bytes_done, bytes_total, self.clock() - started_at)
        prefix = self.CLEAR_PREV if self.overwrite and self._lines else ""
        self.stream.write(prefix + self.format(est, current_key) + "\n")
        self.stream.flush()
        self._lines += 1

class TqdmProgress(ProgressReporter):
    def __init__(self, desc: str = "split", file: Optional[IO[str]] = None):
        self.desc = desc
        self.file = file
        self._bar: Optional[tqdm] = None
        self._last = 0

    def report(self, bytes_done, bytes_total, started_at, current_key):
        if self._bar is None:
            self._bar = tqdm(total=bytes_total, unit="B", unit_scale=True, desc=self.desc,
                             file=self.file, leave=True)
        self._bar.update(bytes_done - self._last)
        self._last = bytes_done
        self._bar.set_postfix_str(current_key, refresh=False)

    def close(self):
        if self._bar is not None:
            self._bar.close()
            self._bar = None

def make_reporter(kind: str = "console", clock: Clock = time.monotonic) -> ProgressReporter:
    if kind == "console":
        return ConsoleProgress(clock=clock)
    if kind == "tqdm":
        return TqdmProgress()
    if kind == "none":
        return NullProgress()
    raise ValueError(f"unknown progress reporter: {kind!r}")
