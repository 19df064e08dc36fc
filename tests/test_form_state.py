from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from qr_export import Artifact, ExportError
from qr_form import (
    EXPORT_FAILED,
    MODE_PAYMENT,
    MODE_TEXT,
    TEXT_REQUIRED_FOR_EXPORT,
    EditPaymentField,
    EditText,
    ExportFinished,
    ExportRequested,
    FormState,
    Generate,
    Reset,
    SwitchMode,
    run_export,
    update,
)
from qr_payloads import PAYEE_REQUIRED, TEXT_REQUIRED, FreeForm, Payment


def _apply(state: FormState, *actions) -> FormState:
    for action in actions:
        state = update(state, action)
    return state


def test_default_state_is_empty_text_mode() -> None:
    state = FormState()
    assert state.mode == MODE_TEXT
    assert state.content == FreeForm("")
    assert state.payload == ""
    assert not state.is_generating


def test_generate_with_empty_text_sets_inline_error() -> None:
    state = _apply(FormState(), EditText("   "), Generate())
    assert state.error == TEXT_REQUIRED


def test_editing_clears_error() -> None:
    state = _apply(FormState(), Generate(), EditText("h"))
    assert state.error == ""
    assert state.text == "h"


def test_payment_mode_builds_uri_payload() -> None:
    state = _apply(
        FormState(),
        SwitchMode(MODE_PAYMENT),
        EditPaymentField("payee_id", "alice@bank"),
        EditPaymentField("payee_name", "Alice"),
        EditPaymentField("amount", "100"),
        EditPaymentField("note", "Lunch"),
    )
    assert isinstance(state.content, Payment)
    assert state.payload == "upi://pay?pa=alice%40bank&pn=Alice&am=100.00&cu=INR&tn=Lunch"


def test_payment_mode_without_payee_reports_missing_id() -> None:
    state = _apply(FormState(), SwitchMode(MODE_PAYMENT), EditPaymentField("payee_name", "Alice"), Generate())
    assert state.error == PAYEE_REQUIRED
    assert state.payload == ""


def test_amount_keystrokes_are_filtered() -> None:
    state = _apply(
        FormState(),
        EditPaymentField("amount", "12"),
        EditPaymentField("amount", "12."),
        EditPaymentField("amount", "12.."),
        EditPaymentField("amount", "12.x"),
    )
    assert state.payment.amount == "12."


def test_switching_mode_keeps_field_values() -> None:
    state = _apply(
        FormState(),
        EditText("hello"),
        SwitchMode(MODE_PAYMENT),
        EditPaymentField("payee_id", "bob@bank"),
        SwitchMode(MODE_TEXT),
    )
    assert state.payload == "hello"
    assert state.payment.payee_id == "bob@bank"


def test_update_does_not_mutate_input_state() -> None:
    before = FormState()
    after = update(before, EditText("x"))
    assert before.text == ""
    assert after.text == "x"


def test_unknown_field_and_mode_are_programming_errors() -> None:
    with pytest.raises(ValueError):
        update(FormState(), EditPaymentField("upi_pin", "1234"))
    with pytest.raises(ValueError):
        update(FormState(), SwitchMode("wifi"))
    with pytest.raises(ValueError):
        update(FormState(), object())


def test_export_requested_validates_before_starting() -> None:
    state = update(FormState(), ExportRequested("png"))
    assert state.error == TEXT_REQUIRED_FOR_EXPORT
    assert not state.is_generating

    state = update(FormState(mode=MODE_PAYMENT), ExportRequested("svg"))
    assert state.error == PAYEE_REQUIRED
    assert not state.is_generating

    state = _apply(FormState(), EditText("hello"), ExportRequested("png"))
    assert state.error == ""
    assert state.is_generating


def test_export_finished_settles_flag_and_error() -> None:
    busy = FormState(text="hello", is_generating=True)
    assert update(busy, ExportFinished()) == FormState(text="hello")
    failed = update(busy, ExportFinished(failed=True))
    assert failed.error == EXPORT_FAILED
    assert not failed.is_generating


def test_reset_returns_fresh_state() -> None:
    state = _apply(FormState(), SwitchMode(MODE_PAYMENT), EditPaymentField("payee_id", "a@b"), Generate(), Reset())
    assert state == FormState()


def test_run_export_success_uses_current_payload() -> None:
    calls = []
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _fake_exporter(payload: str, fmt: str, now=None) -> Artifact:
        calls.append((payload, fmt, now))
        return Artifact(filename=f"qrcode-1.{fmt}", data=b"data", mime="image/png")

    state = _apply(FormState(), SwitchMode(MODE_PAYMENT), EditPaymentField("payee_id", "bob@bank"))
    state, artifact = run_export(state, "png", exporter=_fake_exporter, now=now)
    assert calls == [("upi://pay?pa=bob%40bank", "png", now)]
    assert artifact is not None and artifact.filename == "qrcode-1.png"
    assert state.error == ""
    assert not state.is_generating


def test_run_export_skips_exporter_when_invalid() -> None:
    def _never(*args, **kwargs):
        raise AssertionError("exporter must not run")

    state, artifact = run_export(FormState(), "svg", exporter=_never)
    assert artifact is None
    assert state.error == TEXT_REQUIRED_FOR_EXPORT


def test_run_export_failure_reports_generic_message(caplog) -> None:
    def _broken(*args, **kwargs):
        raise ExportError("renderer exploded")

    state = FormState(text="hello")
    with caplog.at_level(logging.ERROR, logger="qr_form"):
        new_state, artifact = run_export(state, "png", exporter=_broken)
    assert artifact is None
    assert new_state.error == EXPORT_FAILED
    assert not new_state.is_generating
    assert new_state.text == "hello"
    assert "Error generating QR code" in caplog.text


def test_run_export_with_real_renderer() -> None:
    state, artifact = run_export(FormState(text="hello"), "svg")
    assert state.error == ""
    assert artifact is not None
    assert artifact.filename.startswith("qrcode-") and artifact.filename.endswith(".svg")
