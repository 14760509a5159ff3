"""Test log level filtering, especially spew level."""

import pytest

from mergemend.core.log import (
    LEVELS,
    ConsoleSink,
    FileSink,
    LogfireSink,
    NullLogger,
    OTLPSink,
    level_name,
    setup_logger,
)


def file_logger(tmp_path, **file_kwargs):
    log_file = tmp_path / "test.log"
    logger = setup_logger(
        log_root=tmp_path,
        session="test",
        console=ConsoleSink(enabled=False),
        otlp=OTLPSink(enabled=False),
        file=FileSink(enabled=True, path=str(log_file), **file_kwargs),
        logfire=LogfireSink(enabled=False),
    )
    return logger, log_file


def test_spew_level_includes_all(tmp_path):
    logger, log_file = file_logger(tmp_path, level="spew")

    logger.spew("SPEW message")
    logger.trace("TRACE message")
    logger.debug("DEBUG message")
    logger.info("INFO message")
    logger.close()

    content = log_file.read_text()
    for name in ("SPEW", "TRACE", "DEBUG", "INFO"):
        assert f"{name} message" in content


def test_trace_level_filters_spew(tmp_path):
    logger, log_file = file_logger(tmp_path, level="trace")

    logger.spew("SPEW message")
    logger.trace("TRACE message")
    logger.close()

    content = log_file.read_text()
    assert "SPEW message" not in content
    assert "TRACE message" in content


def test_info_level_filters_debug(tmp_path):
    logger, log_file = file_logger(tmp_path, level="info")

    logger.debug("DEBUG message")
    logger.info("INFO message")
    logger.warn("WARN message")
    logger.error("ERROR message")
    logger.close()

    content = log_file.read_text()
    assert "DEBUG message" not in content
    assert "INFO message" in content
    assert "WARN message" in content
    assert "ERROR message" in content


def test_text_template_and_attributes(tmp_path):
    logger, log_file = file_logger(
        tmp_path, level="info", format_template="[{level}] {message}"
    )

    logger.info("Conflict resolved", file="a.py")
    logger.close()

    line = log_file.read_text().splitlines()[0]
    assert line.startswith("[info] Conflict resolved")
    assert "file='a.py'" in line


def test_escape_special_characters(tmp_path):
    logger, log_file = file_logger(
        tmp_path,
        level="info",
        format_template="{message}",
        escape_special_characters=True,
    )

    logger.info("line one\nline two")
    logger.close()

    assert "line one\\nline two" in log_file.read_text()


def test_default_path_uses_session(tmp_path):
    logger = setup_logger(
        log_root=tmp_path,
        session="sess",
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True),
    )
    logger.info("hello")
    logger.close()

    assert "hello" in (tmp_path / "sess" / "mergemend.log").read_text()


@pytest.mark.parametrize("name", list(LEVELS))
def test_level_name_round_trip(name):
    assert level_name(LEVELS[name]) == name


def test_null_logger_discards():
    logger = NullLogger()

    logger.info("x", a=1)
    logger.warning("y")
    with logger.span("z"):
        pass
    logger.close()
