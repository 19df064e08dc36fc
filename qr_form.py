#!/usr/bin/env python3
# qr_form.py

"""Form state for the generator page.

Every user action is applied through ``update(state, action)``, which returns a
new ``FormState`` and never touches streamlit, so the validation rules can be
exercised without a UI.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Optional, Tuple, Union

from qr_export import Artifact, ExportError, export_artifact
from qr_payloads import (
    PAYEE_REQUIRED,
    Content,
    FreeForm,
    Payment,
    PaymentRequest,
    filter_amount_input,
    payload_for,
    validate,
)

logger = logging.getLogger(__name__)

MODE_TEXT = "text"
MODE_PAYMENT = "payment"
MODES = (MODE_TEXT, MODE_PAYMENT)

PAYMENT_FIELDS = ("payee_id", "payee_name", "amount", "note")

TEXT_REQUIRED_FOR_EXPORT = "Please enter some text, URL, or number first"
EXPORT_FAILED = "Failed to generate QR code. Please try again."


@dataclass(frozen=True)
class FormState:
    mode: str = MODE_TEXT
    text: str = ""
    payment: PaymentRequest = field(default_factory=PaymentRequest)
    error: str = ""
    is_generating: bool = False

    @property
    def content(self) -> Content:
        if self.mode == MODE_PAYMENT:
            return Payment(self.payment)
        return FreeForm(self.text)

    @property
    def payload(self) -> str:
        return payload_for(self.content)


# ---------------------------
# Actions
# ---------------------------
@dataclass(frozen=True)
class EditText:
    value: str


@dataclass(frozen=True)
class EditPaymentField:
    name: str
    value: str


@dataclass(frozen=True)
class SwitchMode:
    mode: str


@dataclass(frozen=True)
class Generate:
    pass


@dataclass(frozen=True)
class ExportRequested:
    fmt: str


@dataclass(frozen=True)
class ExportFinished:
    failed: bool = False


@dataclass(frozen=True)
class Reset:
    pass


Action = Union[EditText, EditPaymentField, SwitchMode, Generate, ExportRequested, ExportFinished, Reset]


def _export_error(content: Content) -> str:
    if not validate(content):
        return ""
    if isinstance(content, Payment):
        return PAYEE_REQUIRED
    return TEXT_REQUIRED_FOR_EXPORT


def update(state: FormState, action: Action) -> FormState:
    if isinstance(action, EditText):
        return replace(state, text=action.value, error="")

    if isinstance(action, EditPaymentField):
        if action.name not in PAYMENT_FIELDS:
            raise ValueError(f"unknown payment field: {action.name!r}")
        value = action.value or ""
        if action.name == "amount":
            value = filter_amount_input(state.payment.amount, value)
        payment = replace(state.payment, **{action.name: value})
        return replace(state, payment=payment, error="")

    if isinstance(action, SwitchMode):
        if action.mode not in MODES:
            raise ValueError(f"unknown mode: {action.mode!r}")
        return replace(state, mode=action.mode, error="")

    if isinstance(action, Generate):
        return replace(state, error=validate(state.content))

    if isinstance(action, ExportRequested):
        error = _export_error(state.content)
        if error:
            return replace(state, error=error, is_generating=False)
        return replace(state, error="", is_generating=True)

    if isinstance(action, ExportFinished):
        return replace(state, is_generating=False, error=EXPORT_FAILED if action.failed else state.error)

    if isinstance(action, Reset):
        return FormState()

    raise ValueError(f"unknown action: {action!r}")


def run_export(
    state: FormState,
    fmt: str,
    exporter: Callable[..., Artifact] = export_artifact,
    now: Optional[datetime] = None,
) -> Tuple[FormState, Optional[Artifact]]:
    """Validate, export and settle the state; failures end up in ``state.error``."""
    state = update(state, ExportRequested(fmt))
    if not state.is_generating:
        return state, None
    try:
        artifact = exporter(state.payload, fmt, now=now)
    except ExportError:
        logger.exception("Error generating QR code")
        return update(state, ExportFinished(failed=True)), None
    return update(state, ExportFinished()), artifact
