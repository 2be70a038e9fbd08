import logging
from pathlib import Path

import orjson
import pytest

from ndsplit.partition.progress import ProgressReporter

NDSPLIT_LOGGERS = ("ndsplit.engine", "ndsplit.sinks", "ndsplit.run")


@pytest.fixture
def write_ndjson(tmp_path):
    """Write raw lines (str) to an input file, each followed by a newline."""

    def _write(lines, name="input.ndjson", terminate=True):
        path = tmp_path / name
        text = "\n".join(lines)
        if lines and terminate:
            text += "\n"
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


def _read_jsonl(path):
    with open(path, "rb") as f:
        return [orjson.loads(line) for line in f if line.strip()]


def _write_jsonl(path, rows):
    with open(path, "wb") as f:
        for r in rows:
            f.write(orjson.dumps(r, option=orjson.OPT_APPEND_NEWLINE))


@pytest.fixture
def read_jsonl():
    return _read_jsonl


@pytest.fixture
def write_jsonl():
    return _write_jsonl


@pytest.fixture
def out_dir(tmp_path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def split_logs(caplog):
    # ndsplit loggers do not propagate; hang the capture handler on them directly
    loggers = [logging.getLogger(name) for name in NDSPLIT_LOGGERS]
    for lg in loggers:
        lg.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG)
    yield caplog
    for lg in loggers:
        lg.removeHandler(caplog.handler)


class RecordingReporter(ProgressReporter):
    def __init__(self):
        self.calls = []
        self.closed = False

    def report(self, bytes_done, bytes_total, started_at, current_key):
        self.calls.append((bytes_done, bytes_total, started_at, current_key))

    def close(self):
        self.closed = True


@pytest.fixture
def recorder():
    return RecordingReporter()
