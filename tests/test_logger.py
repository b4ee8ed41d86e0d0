"""Test Suite - Logging wrapper."""

import pytest
from loguru import logger

from crosschain_testing.utils import LogConfig, Logging, logs


@pytest.fixture
def restore_logging():
    yield
    logs.configure(LogConfig(level="WARNING"))


@pytest.mark.case("XC-LOG-001")
def test_file_sink_receives_messages(tmp_path, restore_logging):
    wrapper = Logging()
    wrapper.configure(LogConfig(level="DEBUG", dir=str(tmp_path / "logs")))

    wrapper.info("[Test] hello from the harness")
    logger.complete()

    files = list((tmp_path / "logs").glob("*.log"))
    assert len(files) == 1
    assert "[Test] hello from the harness" in files[0].read_text()


@pytest.mark.case("XC-LOG-002")
def test_timed_reraises(restore_logging):
    @logs.timed("boom")
    def boom():
        raise KeyError("x")

    @logs.timed()
    def fine():
        return 42

    with pytest.raises(KeyError):
        boom()
    assert fine() == 42
