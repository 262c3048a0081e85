"""Tests for :mod:`pathmonitor.utils.logger`."""
import json
import logging

import pytest

from pathmonitor.utils.logger import ColorFormatter, JsonFormatter, log_exception, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def make_record(level=logging.INFO, msg="hello", **attrs):
    record = logging.LogRecord("pathmonitor.test", level, __file__, 10, msg, None, None)
    record.__dict__.update(attrs)
    return record


def test_json_formatter_includes_context():
    output = json.loads(JsonFormatter().format(make_record(context={'path': '/tmp/a'})))

    assert output['message'] == "hello"
    assert output['level'] == "INFO"
    assert output['path'] == "/tmp/a"


def test_color_formatter_leaves_record_untouched():
    record = make_record(level=logging.ERROR, msg="broken")

    formatted = ColorFormatter(fmt="%(levelname)s %(message)s").format(record)

    assert "\033[" in formatted
    assert record.levelname == "ERROR"
    assert record.msg == "broken"


def test_setup_logging_writes_json_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "monitor.log"

    setup_logging("DEBUG", str(log_file), "json")
    logging.getLogger("pathmonitor.test").debug("watching")
    for handler in restore_root_logger.handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert lines[-1]['message'] == "watching"
    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("watchdog").level == logging.WARNING


def test_setup_logging_replaces_handlers(restore_root_logger):
    setup_logging()
    setup_logging()

    assert len(restore_root_logger.handlers) == 1


def test_log_exception_attaches_context(caplog):
    logger = logging.getLogger("pathmonitor.test")
    try:
        raise OSError("gone")
    except OSError as e:
        error = e

    with caplog.at_level(logging.ERROR):
        log_exception(logger, error, "callback failed", extra={'path': '/tmp/a'})

    record = caplog.records[-1]
    assert record.getMessage() == "callback failed"
    assert record.exc_info[1] is error
    assert record.context == {'path': '/tmp/a'}
