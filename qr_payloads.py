#!/usr/bin/env python3
# qr_payloads.py

import math
import re
from dataclasses import dataclass, field
from typing import Optional, Union
from urllib.parse import quote, urlencode

UPI_SCHEME = "upi://pay"
CURRENCY = "INR"

TEXT_REQUIRED = "Please enter some text, URL, or number"
PAYEE_REQUIRED = "Please enter the payee UPI ID"

_AMOUNT_ENTRY = re.compile(r"^\d*\.?\d*$")
_AMOUNT_NOISE = re.compile(r"[^0-9.]")


# ---------------------------
# Content variants
# ---------------------------
@dataclass(frozen=True)
class PaymentRequest:
    payee_id: str = ""
    payee_name: str = ""
    amount: str = ""
    note: str = ""


@dataclass(frozen=True)
class FreeForm:
    text: str = ""


@dataclass(frozen=True)
class Payment:
    request: PaymentRequest = field(default_factory=PaymentRequest)


Content = Union[FreeForm, Payment]


# ---------------------------
# Amount handling
# ---------------------------
def filter_amount_input(previous: str, candidate: str) -> str:
    # keystroke filter: digits and at most one '.'
    if _AMOUNT_ENTRY.match(candidate or ""):
        return candidate or ""
    return previous or ""


def clean_amount(amount: str) -> Optional[str]:
    """Return the amount formatted with two decimals, or None when it must be omitted.

    Characters outside 0-9 and '.' are stripped before parsing, so "Rs 100" is
    accepted as 100.00. A minus sign anywhere marks the input negative. Negative,
    zero, non-finite and malformed residues (".", "1.2.3") are rejected.
    """
    raw = (amount or "").strip()
    if "-" in raw:
        return None
    cleaned = _AMOUNT_NOISE.sub("", raw)
    if not cleaned or cleaned.count(".") > 1 or not any(c.isdigit() for c in cleaned):
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return f"{value:.2f}"


# ---------------------------
# Payload builders
# ---------------------------
def build_upi_uri(payee_id: str = "", payee_name: str = "", amount: str = "", note: str = "") -> str:
    # upi://pay?pa=...&pn=...&am=...&cu=INR&tn=...
    pa = (payee_id or "").strip()
    if not pa:
        return ""
    params = [("pa", pa)]
    pn = (payee_name or "").strip()
    if pn:
        params.append(("pn", pn))
    am = clean_amount(amount)
    if am is not None:
        params.append(("am", am))
        params.append(("cu", CURRENCY))
    tn = (note or "").strip()
    if tn:
        params.append(("tn", tn))
    return f"{UPI_SCHEME}?{urlencode(params, quote_via=quote)}"


def payload_for(content: Content) -> str:
    """Map either content variant to the string handed to the QR renderer."""
    if isinstance(content, FreeForm):
        return content.text
    if isinstance(content, Payment):
        req = content.request
        return build_upi_uri(req.payee_id, req.payee_name, req.amount, req.note)
    raise TypeError(f"unsupported content: {content!r}")


def validate(content: Content) -> str:
    if isinstance(content, FreeForm):
        return "" if content.text.strip() else TEXT_REQUIRED
    if isinstance(content, Payment):
        return "" if content.request.payee_id.strip() else PAYEE_REQUIRED
    raise TypeError(f"unsupported content: {content!r}")
