import pytest

from fanout.config import RunConfig


@pytest.fixture
def make_config(tmp_path):
    def _make(command, **kw):
        kw.setdefault("input_file", tmp_path / "input.txt")
        kw.setdefault("output_dir", tmp_path / "out")
        kw.setdefault("threads", 2)
        return RunConfig(command=tuple(command), **kw)
    return _make
