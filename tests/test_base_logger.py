import logging

from commons.base_logger import BaseLogger


def test_level_string_and_single_handler():
    first = BaseLogger(name="axevent.test_logger", level="debug").logger
    second = BaseLogger(name="axevent.test_logger", level="DEBUG").logger
    assert first is second
    assert first.level == logging.DEBUG
    assert len(first.handlers) == 1      # 同名 logger 不重复挂 handler
    assert first.propagate is False


def test_unknown_level_falls_back_to_info():
    logger = BaseLogger(name="axevent.test_logger_unknown", level="chatty").logger
    assert logger.level == logging.INFO


def test_file_handler(tmp_path):
    path = tmp_path / "events.log"
    logger = BaseLogger(name="axevent.test_logger_file", to_file=True, file_path=str(path)).logger
    logger.error("declaration failed")
    for h in logger.handlers:
        h.flush()
    assert "declaration failed" in path.read_text(encoding="utf-8")
