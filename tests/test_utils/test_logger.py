from __future__ import annotations

import io
import logging
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest

from depsolve.utils.logger import (
    SEARCH_LOGGER_NAME,
    ColoredFormatter,
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)


@pytest.fixture
def clean_logger_state(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Reset the depsolve logger hierarchy and force plain output."""
    import depsolve.utils.logger as logger_module

    monkeypatch.setenv("NO_COLOR", "1")
    for name in ("depsolve", SEARCH_LOGGER_NAME):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).setLevel(logging.NOTSET)
    logger_module._logging_configured = False
    yield


@pytest.fixture
def captured_stream() -> io.StringIO:
    return io.StringIO()


def _record(level: int = logging.INFO, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("depsolve.test", level, __file__, 1, msg, None, None)


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_plain_when_color_disabled(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=False)

        assert formatter.format(_record()) == "INFO: hello"

    def test_colors_level_name_on_tty(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s")

        with patch.object(ColoredFormatter, "_should_use_color", return_value=True):
            output = formatter.format(_record(logging.ERROR))

        assert output == "\033[31mERROR\033[0m: hello"

    def test_format_preserves_original_record(self) -> None:
        """Test the record's level name is restored for other handlers."""
        formatter = ColoredFormatter("%(levelname)s")
        record = _record(logging.WARNING)

        with patch.object(ColoredFormatter, "_should_use_color", return_value=True):
            formatter.format(record)

        assert record.levelname == "WARNING"

    @pytest.mark.parametrize("env", ["NO_COLOR", "CI"])
    def test_should_use_color_respects_env(self, env: str) -> None:
        with patch.dict("os.environ", {env: "1"}):
            assert ColoredFormatter._should_use_color() is False

    def test_should_use_color_tty(self) -> None:
        fake_stderr = MagicMock()
        fake_stderr.isatty.return_value = True

        with patch.dict("os.environ", {}, clear=True), patch("sys.stderr", fake_stderr):
            assert ColoredFormatter._should_use_color() is True

    def test_should_use_color_isatty_raises(self) -> None:
        fake_stderr = MagicMock()
        fake_stderr.isatty.side_effect = OSError("closed")

        with patch.dict("os.environ", {}, clear=True), patch("sys.stderr", fake_stderr):
            assert ColoredFormatter._should_use_color() is False


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_writes_to_stream(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.INFO, stream=captured_stream)

        get_logger("resolver").info("resolved %d", 3)

        assert captured_stream.getvalue() == "INFO: resolved 3\n"
        assert is_logging_configured()

    def test_filters_below_level(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.WARNING, stream=captured_stream)

        get_logger("resolver").info("hidden")

        assert captured_stream.getvalue() == ""

    def test_verbose_format(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.DEBUG, verbose=True, stream=captured_stream)

        get_logger("catalog").debug("sealed")

        assert " - depsolve.catalog - DEBUG - sealed" in captured_stream.getvalue()

    def test_replaces_previous_handler(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(stream=io.StringIO())
        setup_logging(stream=captured_stream)

        assert len(logging.getLogger("depsolve").handlers) == 1

    def test_search_trace_capped_without_flag(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        """Test per-state search records need trace_search even at DEBUG."""
        setup_logging(level=logging.DEBUG, stream=captured_stream)

        get_logger("search").debug("pop #1")
        get_logger("resolver").debug("other debug")

        output = captured_stream.getvalue()
        assert "pop #1" not in output
        assert "other debug" in output

    def test_search_trace_enabled(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.DEBUG, trace_search=True, stream=captured_stream)

        get_logger("search").debug("pop #1")

        assert "pop #1" in captured_stream.getvalue()

    def test_does_not_propagate_to_root(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(stream=captured_stream)

        assert logging.getLogger("depsolve").propagate is False


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            (None, "depsolve"),
            ("", "depsolve"),
            ("depsolve", "depsolve"),
            ("resolver", "depsolve.resolver"),
            ("depsolve.core", "depsolve.core"),
            ("commands.resolve", "depsolve.commands.resolve"),
        ],
    )
    def test_qualified_names(
        self, clean_logger_state: None, name: object, expected: str
    ) -> None:
        assert get_logger(name).name == expected  # type: ignore[arg-type]

    def test_adds_null_handler_when_unconfigured(self, clean_logger_state: None) -> None:
        get_logger("x")

        handlers = logging.getLogger("depsolve").handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.NullHandler)

    def test_same_instance(self, clean_logger_state: None) -> None:
        assert get_logger("x") is get_logger("depsolve.x")


@pytest.mark.unit
class TestDisableLogging:
    """Tests for disable_logging."""

    def test_silences_output(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(stream=captured_stream)
        disable_logging()

        get_logger("x").warning("quiet")

        assert captured_stream.getvalue() == ""
        assert not is_logging_configured()
