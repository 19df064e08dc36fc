#!/usr/bin/env python3
# qr_export.py

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import segno
from PIL import Image

logger = logging.getLogger(__name__)

MIME_TYPES = {"png": "image/png", "svg": "image/svg+xml"}


class ExportError(Exception):
    """Rendering or serializing a QR artifact failed."""


@dataclass(frozen=True)
class ExportOptions:
    width: int = 512        # PNG pixels, quiet zone included
    border: int = 2         # quiet zone (modules)
    dark: str = "#000000"
    light: str = "#FFFFFF"
    error: str = "m"


@dataclass(frozen=True)
class Artifact:
    filename: str
    data: bytes
    mime: str


def artifact_filename(fmt: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"qrcode-{int(now.timestamp() * 1000)}.{fmt}"


def _make(payload: str, options: ExportOptions) -> segno.QRCode:
    if not payload:
        raise ExportError("nothing to encode")
    try:
        # make_qr: never fall back to Micro QR, which most phone readers reject
        return segno.make_qr(payload, error=options.error)
    except segno.DataOverflowError as exc:
        raise ExportError(f"payload too large for a QR code ({len(payload)} chars)") from exc
    except ValueError as exc:
        raise ExportError(f"invalid QR options: {exc}") from exc


def render_png(payload: str, options: ExportOptions = ExportOptions()) -> bytes:
    qr = _make(payload, options)
    try:
        # one pixel per module, then scale to the fixed output width
        raw = io.BytesIO()
        qr.save(raw, kind="png", scale=1, border=options.border, dark=options.dark, light=options.light)
        raw.seek(0)
        img = Image.open(raw).convert("RGB")
        img = img.resize((options.width, options.width), Image.NEAREST)
        out = io.BytesIO()
        img.save(out, format="PNG")
    except (OSError, ValueError) as exc:
        raise ExportError("PNG rendering failed") from exc
    return out.getvalue()


def render_svg(payload: str, options: ExportOptions = ExportOptions()) -> bytes:
    qr = _make(payload, options)
    svg = io.BytesIO()
    try:
        qr.save(svg, kind="svg", border=options.border, dark=options.dark, light=options.light)
    except (OSError, ValueError) as exc:
        raise ExportError("SVG rendering failed") from exc
    return svg.getvalue()


_RENDERERS = {"png": render_png, "svg": render_svg}


def export_artifact(payload: str, fmt: str, now: Optional[datetime] = None,
                    options: ExportOptions = ExportOptions()) -> Artifact:
    """Render ``payload`` as a downloadable PNG or SVG.

    Raises ExportError for an empty payload, an unknown format, or any
    renderer failure; the caller reports all of them the same way.
    """
    renderer = _RENDERERS.get(fmt)
    if renderer is None:
        raise ExportError(f"unsupported export format: {fmt!r}")
    data = renderer(payload, options)
    artifact = Artifact(filename=artifact_filename(fmt, now), data=data, mime=MIME_TYPES[fmt])
    logger.debug("exported %s (%d bytes)", artifact.filename, len(artifact.data))
    return artifact
