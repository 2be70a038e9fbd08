import os

import pytest

from ndsplit.partition.errors import SinkError
from ndsplit.partition.sinks import SinkPool


def test_get_or_create_reuses_sink(tmp_path):
    with SinkPool(str(tmp_path)) as pool:
        first = pool.get_or_create("a")
        assert pool.get_or_create("a") is first
        assert len(pool) == 1
        assert "a" in pool
        assert first.path == str(tmp_path / "a.json")


def test_existing_file_is_truncated(tmp_path):
    (tmp_path / "a.json").write_bytes(b"stale line from an earlier run\n")
    with SinkPool(str(tmp_path)) as pool:
        pool.write("a", b'{"n":1}\n')
    assert (tmp_path / "a.json").read_bytes() == b'{"n":1}\n'


def test_diagnostics_keep_insertion_order(tmp_path):
    with SinkPool(str(tmp_path)) as pool:
        for key in ["b", "a", "b", "c", "a", "b"]:
            pool.write(key, b"{}\n")
        assert pool.keys() == ["b", "a", "c"]
        assert pool.counts() == {"b": 3, "a": 2, "c": 1}
        assert list(pool.paths()) == ["b", "a", "c"]


def test_close_all_closes_every_sink_and_is_idempotent(tmp_path):
    pool = SinkPool(str(tmp_path))
    sinks = [pool.get_or_create(k) for k in ("a", "b")]
    pool.close_all()
    pool.close_all()
    assert all(s.fh.closed for s in sinks)
    with pytest.raises(SinkError):
        pool.get_or_create("c")


def test_context_manager_closes_on_error(tmp_path):
    with pytest.raises(RuntimeError):
        with SinkPool(str(tmp_path)) as pool:
            sink = pool.write("a", b'{"n":1}\n')
            raise RuntimeError("boom")
    assert sink.fh.closed
    assert (tmp_path / "a.json").read_bytes() == b'{"n":1}\n'


def test_unopenable_path_raises_sink_error(tmp_path):
    pool = SinkPool(str(tmp_path / "missing" / "dir"))
    with pytest.raises(SinkError) as exc:
        pool.get_or_create("a")
    assert exc.value.key == "a"
    assert isinstance(exc.value.__cause__, OSError)
    assert len(pool) == 0


def test_two_keys_on_one_file_is_an_error(tmp_path):
    with SinkPool(str(tmp_path), namer=lambda key: key.replace("/", "_")) as pool:
        pool.get_or_create("x/y")
        with pytest.raises(SinkError) as exc:
            pool.get_or_create("x_y")
    assert "x/y" in str(exc.value)
    assert exc.value.path == str(tmp_path / "x_y.json")


def test_second_name_for_an_open_file_is_an_error(tmp_path):
    # a symlink stands in for a case-insensitive filesystem folding "Red" onto "red"
    with SinkPool(str(tmp_path)) as pool:
        pool.write("red", b'{"n":1}\n')
        os.symlink(tmp_path / "red.json", tmp_path / "Red.json")
        with pytest.raises(SinkError) as exc:
            pool.get_or_create("Red")
        assert pool.keys() == ["red"]
    assert "'red'" in str(exc.value)
    assert (tmp_path / "red.json").read_bytes() == b'{"n":1}\n'


def test_leftover_file_from_earlier_run_is_not_a_collision(tmp_path):
    (tmp_path / "b.json").write_bytes(b"old\n")
    with SinkPool(str(tmp_path)) as pool:
        pool.write("a", b"{}\n")
        pool.write("b", b"{}\n")
    assert (tmp_path / "b.json").read_bytes() == b"{}\n"
