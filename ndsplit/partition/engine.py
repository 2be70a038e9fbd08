from __future__ import annotations
import os, time
from typing import Optional
from ..utils.io import ensure_dir, iter_lines
from ..utils.logger import get_logger
from ..utils.schemas import RunState, RunSummary, SplitSettings
from .decoder import decode, render
from .errors import (DecodeError, InputNotFoundError, InputNotRegularFileError,
                     KeyExtractionError, SplitError)
from .extractor import KeyExtractor
from .progress import Clock, ProgressReporter, make_reporter
from .sinks import SinkPool

log = get_logger("ndsplit.engine")

def check_input(path: str) -> int:
    """Return the size of `path`, or raise if it is not an existing regular file."""
    if not os.path.exists(path):
        raise InputNotFoundError(path)
    if not os.path.isfile(path):
        raise InputNotRegularFileError(path)
    return os.path.getsize(path)

class PartitionEngine:
    """
    Single pass over an ndjson file, routing every record to
    `<out_dir>/<key>.json` where `key` sits at `settings.key_path`.

    IDLE -> RUNNING -> COMPLETED | ABORTED. A failing line either aborts
    the run (on_error="abort") or is counted and skipped (on_error="skip").
    Output files are always closed before run() returns or raises.
    """

    def __init__(self, input_path: str, settings: Optional[SplitSettings] = None,
                 reporter: Optional[ProgressReporter] = None, clock: Clock = time.monotonic):
        self.settings = settings or SplitSettings()
        self.input_path = str(input_path)
        self.out_dir = str(self.settings.out_dir)
        self.extractor = KeyExtractor(self.settings.key_path, self.settings.key_policy)
        self.reporter = reporter if reporter is not None else make_reporter(self.settings.progress, clock)
        self.clock = clock
        self.state = RunState.IDLE
        self.summary = RunSummary(input_path=self.input_path, out_dir=self.out_dir)
        self._reporter_failed = False

    def _set_state(self, state: RunState) -> None:
        self.state = state
        self.summary.state = state

    def run(self) -> RunSummary:
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"engine already {self.state.value}")
        self._set_state(RunState.RUNNING)
        try:
            self.summary.bytes_total = check_input(self.input_path)
            ensure_dir(self.out_dir)
            log.info(f"Processing file {self.input_path} key={self.extractor.dotted} out={self.out_dir}")
            with SinkPool(self.out_dir, namer=self.extractor.filename) as pool:
                try:
                    self._pass(pool)
                finally:
                    self.summary.files = pool.counts()
        except SplitError as e:
            self._abort(str(e))
            e.summary = self.summary
            raise
        except OSError as e:
            err = SplitError(f"I/O error: {e}")
            self._abort(str(err))
            err.summary = self.summary
            raise err from e
        except KeyboardInterrupt:
            self._abort("interrupted")
            raise
        finally:
            self._close_reporter()

        self._set_state(RunState.COMPLETED)
        s = self.summary
        log.info(f"[split] wrote={s.records_written} files={len(s.files)} skipped={s.records_skipped} to {self.out_dir}")
        return s

    def _abort(self, message: str) -> None:
        self._set_state(RunState.ABORTED)
        self.summary.error = message
        log.error(f"[split] aborted after {self.summary.lines_read} lines: {message}")

    def _pass(self, pool: SinkPool) -> None:
        s = self.summary
        abort_on_error = self.settings.on_error == "abort"
        started_at = self.clock()
        current_key = ""
        for line_no, line, size in iter_lines(self.input_path):
            s.lines_read += 1
            if line.strip():
                try:
                    record = decode(line, line_no)
                    key = self.extractor(record, line_no)
                    self.extractor.filename(key, line_no)
                    data = render(line, record, self.settings.sort_keys, line_no)
                except (DecodeError, KeyExtractionError) as e:
                    if abort_on_error:
                        raise
                    s.records_skipped += 1
                    log.warning(f"[split] skipped {e}")
                else:
                    pool.write(key, data)
                    s.records_written += 1
                    current_key = key
            s.bytes_done += size
            self._notify(started_at, current_key)

    def _notify(self, started_at: float, current_key: str) -> None:
        if self._reporter_failed:
            return
        try:
            self.reporter.report(self.summary.bytes_done, self.summary.bytes_total, started_at, current_key)
        except Exception as e:
            # progress output must never end the run
            self._reporter_failed = True
            log.warning(f"[split] progress reporting disabled: {e}")

    def _close_reporter(self) -> None:
        try:
            self.reporter.close()
        except Exception as e:
            log.warning(f"[split] progress reporter failed to close: {e}")

def split_file(input_path: str, settings: Optional[SplitSettings] = None,
               reporter: Optional[ProgressReporter] = None) -> RunSummary:
    return PartitionEngine(input_path, settings, reporter=reporter).run()
