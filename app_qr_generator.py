#!/usr/bin/env python3
# app_qr_generator.py

import logging

import streamlit as st

from qr_export import ExportError, render_png
from qr_form import (
    MODE_PAYMENT,
    MODE_TEXT,
    EditPaymentField,
    EditText,
    FormState,
    Generate,
    Reset,
    SwitchMode,
    run_export,
    update,
)

APP_TITLE = "🔳 QR Code Generator"

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger("qr_generator")

st.set_page_config(page_title="QR Code Generator", page_icon="🔳", layout="centered")

# --- Light styling ---
st.markdown(
    """
    <style>
    .app-title { font-size: 2rem; font-weight: 700; }
    .subtitle { color: #667085; margin-bottom: 0.75rem; }
    .hint { font-size: .9rem; color: #667085; }
    .footnotes { font-size: .85rem; color: #6b7280; }
    .stButton > button { border-radius: 12px; padding: .6rem 1rem; }
    .stDownloadButton > button { border-radius: 12px; padding: .6rem 1rem; }
    </style>
    """,
    unsafe_allow_html=True,
)

st.markdown(f'<div class="app-title">{APP_TITLE}</div>', unsafe_allow_html=True)
st.markdown('<div class="subtitle">Generate QR codes for text, URLs, numbers or UPI payments.</div>',
            unsafe_allow_html=True)

MODE_LABELS = {MODE_TEXT: "Text / URL", MODE_PAYMENT: "UPI payment"}
FIELD_KEYS = {
    "payee_id": "pay_payee_id",
    "payee_name": "pay_payee_name",
    "amount": "pay_amount",
    "note": "pay_note",
}


# ---------------------------
# State plumbing
# ---------------------------
def _state() -> FormState:
    if "form" not in st.session_state:
        st.session_state["form"] = FormState()
    return st.session_state["form"]


def dispatch(action) -> FormState:
    st.session_state["form"] = update(_state(), action)
    return st.session_state["form"]


def _on_mode():
    dispatch(SwitchMode(st.session_state["mode_input"]))
    st.session_state.pop("artifact", None)


def _on_text():
    dispatch(EditText(st.session_state["text_input"]))
    st.session_state.pop("artifact", None)


def _on_field(name: str):
    form = dispatch(EditPaymentField(name, st.session_state[FIELD_KEYS[name]]))
    # the amount filter may refuse the keystroke; show what was kept
    st.session_state[FIELD_KEYS[name]] = getattr(form.payment, name)
    st.session_state.pop("artifact", None)


def _on_export(fmt: str):
    form, artifact = run_export(_state(), fmt)
    st.session_state["form"] = form
    if artifact is None:
        st.session_state.pop("artifact", None)
    else:
        logger.info("prepared %s", artifact.filename)
        st.session_state["artifact"] = artifact


def _on_reset():
    dispatch(Reset())
    for key in ["text_input", "artifact", *FIELD_KEYS.values()]:
        st.session_state.pop(key, None)
    st.session_state["mode_input"] = MODE_TEXT


# ---------------------------
# UI: Content input
# ---------------------------
form = _state()

st.radio(
    "QR content type",
    list(MODE_LABELS),
    format_func=MODE_LABELS.get,
    key="mode_input",
    horizontal=True,
    on_change=_on_mode,
)

# widgets that were not drawn last run lose their keyed state; reseed from the form
if form.mode == MODE_TEXT:
    st.session_state.setdefault("text_input", form.text)
    st.text_input("Enter text, URL, or number", key="text_input", on_change=_on_text,
                  placeholder="e.g., https://example.com or Hello World")
else:
    for name, key in FIELD_KEYS.items():
        st.session_state.setdefault(key, getattr(form.payment, name))
    c1, c2 = st.columns(2)
    with c1:
        st.text_input("Payee UPI ID *", key=FIELD_KEYS["payee_id"], on_change=_on_field, args=("payee_id",),
                      placeholder="name@bank")
        st.text_input("Amount (INR)", key=FIELD_KEYS["amount"], on_change=_on_field, args=("amount",),
                      placeholder="100.00")
    with c2:
        st.text_input("Payee name", key=FIELD_KEYS["payee_name"], on_change=_on_field, args=("payee_name",))
        st.text_input("Note", key=FIELD_KEYS["note"], on_change=_on_field, args=("note",))

col_left, col_right = st.columns([1, 1], vertical_alignment="center")
with col_left:
    st.button("Generate", use_container_width=True, type="primary", disabled=form.is_generating,
              on_click=dispatch, args=(Generate(),))
with col_right:
    st.button("Reset", use_container_width=True, on_click=_on_reset)

form = _state()
if form.error:
    st.error(f"⚠️ {form.error}")

# ---------------------------
# Preview & export
# ---------------------------
payload = form.payload
if payload.strip():
    try:
        st.image(render_png(payload), caption="Preview", use_container_width=True)
    except ExportError:
        logger.exception("Error rendering preview")
        st.info("Preview unavailable; try a shorter payload.")

    if form.mode == MODE_PAYMENT:
        st.code(payload, language=None)

    dl_cols = st.columns(2)
    with dl_cols[0]:
        st.button("⬇️ Prepare PNG", use_container_width=True, disabled=form.is_generating,
                  on_click=_on_export, args=("png",))
    with dl_cols[1]:
        st.button("⬇️ Prepare SVG", use_container_width=True, disabled=form.is_generating,
                  on_click=_on_export, args=("svg",))

    artifact = st.session_state.get("artifact")
    if artifact is not None:
        st.download_button(f"Save {artifact.filename}", data=artifact.data, file_name=artifact.filename,
                           mime=artifact.mime, use_container_width=True)
else:
    hint = ("Enter the payee UPI ID to generate a payment QR code." if form.mode == MODE_PAYMENT
            else "Enter any text, URL, or number above to generate a QR code.")
    st.markdown(f'<div class="hint">{hint}</div>', unsafe_allow_html=True)

st.markdown(
    """
    <div class="footnotes">
    • QR codes are generated instantly and can be downloaded in PNG or SVG format.<br/>
    • UPI mode only formats a <code>upi://pay</code> link; the payment itself happens in the scanning wallet app.
    </div>
    """,
    unsafe_allow_html=True,
)
