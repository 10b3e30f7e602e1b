import logging

from rich.logging import RichHandler

from chip8py.logger import Chip8FileHandler, log, setup_logging


def test_setup_logging_console_only():
    logger = setup_logging(debug=False)
    assert logger is log
    assert logger.level == logging.INFO
    assert [type(h) for h in logger.handlers] == [RichHandler]


def test_setup_logging_writes_file(tmp_path):
    logger = setup_logging(debug=True, log_dir=tmp_path / "log")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logger.debug("hello from the test")
    files = list((tmp_path / "log").glob("chip8py_*.log"))
    assert len(files) == 1
    assert "hello from the test" in files[0].read_text()

    setup_logging()
    assert len(logger.handlers) == 1


def test_file_handler_holds_failed_entries(tmp_path):
    handler = Chip8FileHandler(tmp_path / "missing_dir" / "x.log")
    record = logging.LogRecord("chip8py", logging.INFO, __file__, 1, "held", None, None)
    handler.emit(record)
    assert handler.pending == 1

    (tmp_path / "missing_dir").mkdir()
    handler.emit(record)
    assert handler.pending == 0
    assert (tmp_path / "missing_dir" / "x.log").read_text().count("held") == 2
