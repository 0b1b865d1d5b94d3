import logging

from rayburst.logging_config import setup_logging


def test_setup_logging_is_repeatable(tmp_path):
    log_file = tmp_path / "run.log"
    setup_logging(logging.DEBUG, log_file=str(log_file))
    setup_logging(logging.DEBUG, log_file=str(log_file))
    logger = logging.getLogger("rayburst")
    assert len(logger.handlers) == 2

    logging.getLogger("rayburst.tests").info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "rayburst.tests - INFO - hello" in log_file.read_text(encoding="utf-8")
    setup_logging(logging.WARNING)
    assert len(logger.handlers) == 1
