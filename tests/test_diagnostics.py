from __future__ import annotations

import logging

import pytest

from mathtiles.core.diagnostics import LoggingEmitter, NullEmitter, format_event_message
from mathtiles.core.exceptions import (
    InputError,
    RenderError,
    TypesetError,
    exception_hint,
    exception_messages,
)
from mathtiles.ui.cli.diagnostics import CliEmitter
from mathtiles.ui.cli.state import set_cli_state


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.DEBUG):
        emitter.warning("nothing to see")
        emitter.error("still quiet")
        emitter.event("ignored", {"value": 1})
    assert not caplog.records
    assert emitter.debug_enabled is False


def test_logging_emitter_logs_messages(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(debug_enabled=True)
    with caplog.at_level(logging.INFO, logger="mathtiles"):
        emitter.error("boom")
        emitter.event("cache_hit", {"fingerprint": "0123456789abcdef"})
    messages = [record.message for record in caplog.records]
    assert "boom" in messages
    assert "Reusing cached render 0123456789ab" in messages
    assert emitter.debug_enabled is True


def test_logging_emitter_demotes_unknown_events(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter()
    with caplog.at_level(logging.DEBUG, logger="mathtiles"):
        emitter.event("custom", {"flag": True})
    assert [record.levelno for record in caplog.records] == [logging.DEBUG]


def test_format_render_complete_details() -> None:
    message = format_event_message(
        "render_complete",
        {"width": 5, "height": 3, "tiles": 1, "resized": True, "empty": True},
    )
    assert message == "Rendered 5x3 image into 1 tile(s) (resized, no visible content)"
    assert format_event_message("unknown", {}) is None


def test_cli_emitter_bridges_state(capsys: pytest.CaptureFixture[str]) -> None:
    state = set_cli_state(verbosity=1, debug=False)
    emitter = CliEmitter(state=state)

    emitter.warning("Heads up", exc=None)
    emitter.error("Boom", exc=None)
    emitter.event("custom", {"flag": True})

    captured = capsys.readouterr()
    combined_output = f"{captured.out}\n{captured.err}"
    assert "Heads up" in combined_output
    assert "Boom" in combined_output
    assert state.consume_events("custom") == [{"flag": True}]


def test_exception_hint_reports_root_cause() -> None:
    try:
        try:
            raise ValueError("Unknown symbol: \\foo")
        except ValueError as exc:
            raise TypesetError("Invalid math markup") from exc
    except RenderError as error:
        assert exception_messages(error) == ["Invalid math markup", "Unknown symbol: \\foo"]
        assert exception_hint(error) == "Unknown symbol: \\foo"

    assert exception_hint(InputError()) is None
