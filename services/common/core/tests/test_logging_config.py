import json
import logging
import sys

from services.common.core import logging_config, request_context


def _record(msg="Test message", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test_logger",
        level=logging.INFO,
        pathname="test_path.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_custom_json_formatter_includes_request_id_from_context():
    """Ensure the formatter picks up the Request ID of the current context."""
    request_context.clear_request_id()
    req_id = request_context.generate_request_id()

    log_json = json.loads(logging_config.CustomJsonFormatter().format(_record()))

    assert log_json["message"] == "Test message"
    assert log_json["level"] == "INFO"
    assert log_json["logger"] == "test_logger"
    assert log_json["request_id"] == req_id
    request_context.clear_request_id()


def test_custom_json_formatter_omits_request_id_outside_requests():
    request_context.clear_request_id()

    log_json = json.loads(logging_config.CustomJsonFormatter().format(_record()))

    assert "request_id" not in log_json


def test_custom_json_formatter_copies_extra_fields():
    log_json = json.loads(
        logging_config.CustomJsonFormatter().format(_record(token="abc", status=401))
    )

    assert log_json["token"] == "abc"
    assert log_json["status"] == 401
    assert "lineno" not in log_json


def test_custom_json_formatter_includes_exception():
    try:
        raise ValueError("bad body")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    log_json = json.loads(logging_config.CustomJsonFormatter().format(record))

    assert "ValueError: bad body" in log_json["exception"]


def test_setup_logging_without_file_falls_back_to_basic_config(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    logging_config.setup_logging(str(tmp_path / "missing.yaml"), log_level="debug")

    assert calls == [{"level": "DEBUG"}]


def test_setup_logging_substitutes_environment(monkeypatch, tmp_path):
    config_file = tmp_path / "log.yaml"
    config_file.write_text(
        "version: 1\n"
        "disable_existing_loggers: false\n"
        "loggers:\n"
        "  echo.test:\n"
        "    level: ${LOG_LEVEL}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    logging_config.setup_logging(str(config_file))

    assert logging.getLogger("echo.test").level == logging.WARNING
