from __future__ import annotations

import logging

import pytest

from ampsmith.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    format_event_message,
)
from ampsmith.core.exceptions import (
    AmpsmithError,
    ResolutionError,
    exception_hint,
    exception_messages,
)


def _raise_missing_asset() -> None:
    raise ResolutionError("static file 'a.png' does not exist")


def _raise_nested_render_error() -> None:
    try:
        _raise_missing_asset()
    except ResolutionError as exc:
        raise AmpsmithError("page rendering failed") from exc


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("nothing to see")
        emitter.error("still quiet")
    assert not caplog.records
    emitter.event("ignored", {"value": 1})
    assert emitter.debug_enabled is False
    assert isinstance(emitter, DiagnosticEmitter)


def test_logging_emitter_logs_messages(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(debug_enabled=True)
    with caplog.at_level(logging.ERROR):
        emitter.error("boom")
    assert any(record.message == "boom" for record in caplog.records)
    assert emitter.debug_enabled is True


def test_logging_emitter_formats_known_events(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter()
    with caplog.at_level(logging.INFO):
        emitter.event("box_opened", {"id": "summit", "label": "B"})
    assert [record.message for record in caplog.records] == ["Opened box summit [B]"]


@pytest.mark.parametrize(
    ("name", "payload", "expected"),
    [
        (
            "image_resolved",
            {"src": "a.webp", "width": 400, "height": 300, "widths": [400, 800]},
            "Resolved image: a.webp (400x300, 2 sizes)",
        ),
        (
            "thumbnail_skipped",
            {"path": "a.webp"},
            "Skipped thumbnail for a.webp (unsupported)",
        ),
        ("box_opened", {"id": ""}, "Opened box <anonymous>"),
        ("csp_finalized", {"page": "hiking", "hashes": 3}, "Finalized CSP for hiking (3 hashes)"),
        ("unknown", {}, None),
    ],
)
def test_format_event_message(name: str, payload: dict, expected: str | None) -> None:
    assert format_event_message(name, payload) == expected


def test_exception_chain_reports_root_cause() -> None:
    try:
        _raise_nested_render_error()
    except AmpsmithError as error:
        messages = exception_messages(error)
        hint = exception_hint(error)
    assert messages == ["page rendering failed", "static file 'a.png' does not exist"]
    assert hint == "static file 'a.png' does not exist"
