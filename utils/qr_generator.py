# =============================================================================
# 🧠 QR-Code Generator – QR Studio
# -----------------------------------------------------------------------------
# Erzeugt aus einem fertigen Inhalt + aufgelöstem Stil ein PNG oder SVG.
# Die Bitmatrix hängt nur von Inhalt und Fehlerkorrektur ab; Punktform,
# Ecken, Verlauf und Logo sind reine Darstellung.
# =============================================================================

from __future__ import annotations
from typing import Optional, Dict, Union
from io import BytesIO
from pathlib import Path
import base64
import logging
import os

import qrcode
import qrcode.image.styledpil
import qrcode.image.styles.moduledrawers as mod
import qrcode.image.styles.colormasks as mask
from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q, ERROR_CORRECT_H
from qrcode.exceptions import DataOverflowError
from PIL import Image, ImageColor

from utils.qr_style import QRStyle, default_style

# ---------------------------------------------------------------------------
# ⚙️ Logging konfigurieren
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)

ERROR_CORRECTION = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

BOX_SIZE = 10

BASE_DIR = Path(__file__).resolve().parent.parent


def logo_dir() -> Path:
    """Einziges Verzeichnis, aus dem Logos geladen werden dürfen."""
    return Path(os.getenv("QR_LOGO_DIR", BASE_DIR / "static" / "logos")).resolve()


class QRGenerationError(RuntimeError):
    """Der Encoder konnte aus Inhalt + Optionen kein Symbol erzeugen."""


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _build_matrix(payload: str, style: QRStyle) -> qrcode.QRCode:
    if not payload or not payload.strip():
        raise QRGenerationError("QR content is empty – nothing to encode")

    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION.get(style.error_correction, ERROR_CORRECT_M),
        box_size=BOX_SIZE,
        border=style.margin,
    )
    try:
        qr.add_data(payload)
        qr.make(fit=True)
    except DataOverflowError as e:
        raise QRGenerationError(
            f"QR content too long for error correction level {style.error_correction} "
            f"({len(payload)} characters)"
        ) from e
    except ValueError as e:
        raise QRGenerationError(f"Invalid QR options: {e}") from e
    return qr


def _module_drawer(dot_style: str):
    return {
        "square": mod.SquareModuleDrawer(),
        "rounded": mod.RoundedModuleDrawer(),
        "dots": mod.CircleModuleDrawer(),
    }.get(dot_style, mod.SquareModuleDrawer())


def _eye_drawer(corner_style: str):
    return {
        "square": mod.SquareModuleDrawer(),
        "rounded": mod.RoundedModuleDrawer(radius_ratio=0.5),
        "extra-rounded": mod.RoundedModuleDrawer(radius_ratio=1),
    }.get(corner_style, mod.SquareModuleDrawer())


def _color_mask(style: QRStyle):
    back = ImageColor.getrgb(style.background_color)
    front = ImageColor.getrgb(style.foreground_color)

    if style.gradient_type != "none" and style.gradient_color:
        end = ImageColor.getrgb(style.gradient_color)
        if style.gradient_type == "radial":
            return mask.RadialGradiantColorMask(back_color=back, center_color=front, edge_color=end)
        return mask.HorizontalGradiantColorMask(back_color=back, left_color=front, right_color=end)

    return mask.SolidFillColorMask(back_color=back, front_color=front)


def _resolve_logo(logo_path: str) -> Optional[Path]:
    root = logo_dir()
    candidate = Path(logo_path)
    if not candidate.is_absolute():
        candidate = BASE_DIR / candidate
    candidate = candidate.resolve()

    if not candidate.is_relative_to(root):
        logger.warning(f"⚠️ Logo außerhalb von {root}, wird übersprungen: {logo_path}")
        return None
    if not candidate.is_file():
        logger.warning(f"⚠️ Logo nicht gefunden, wird übersprungen: {logo_path}")
        return None
    return candidate


def _paste_logo(img: Image.Image, logo_path: str, style: QRStyle) -> Image.Image:
    path = _resolve_logo(logo_path)
    if path is None:
        return img

    try:
        logo = Image.open(path).convert("RGBA")
    except OSError as e:
        logger.warning(f"⚠️ Logo konnte nicht eingebettet werden: {e}")
        return img

    # logo_size = Prozent der Kantenlänge, Standard 20 %
    ratio = (style.logo_size or 20) / 100
    logo_px = max(1, int(img.width * ratio))
    logo = logo.resize((logo_px, logo_px), Image.Resampling.LANCZOS)
    pos = ((img.width - logo_px) // 2, (img.height - logo_px) // 2)
    img.alpha_composite(logo, dest=pos)
    return img


# ---------------------------------------------------------------------------
# 🧩 PNG
# ---------------------------------------------------------------------------
def generate_qr_png(
    payload: str,
    style: Optional[QRStyle] = None,
    logo_path: Optional[str] = None,
) -> Dict[str, Union[str, bytes, int]]:
    """
    Generiert einen QR-Code als PNG.
    Gibt {'bytes': bytes, 'mime_type': str, 'data_url': str, 'width': int} zurück.
    """
    style = style or default_style()
    qr = _build_matrix(payload, style)

    img = qr.make_image(
        image_factory=qrcode.image.styledpil.StyledPilImage,
        module_drawer=_module_drawer(style.dot_style),
        eye_drawer=_eye_drawer(style.corner_style),
        color_mask=_color_mask(style),
    ).convert("RGBA")

    logo_path = logo_path or style.logo_url
    if logo_path:
        img = _paste_logo(img, logo_path, style)

    img = img.resize((style.size, style.size), Image.Resampling.LANCZOS)

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    data = buffer.getvalue()

    logger.info(f"✅ PNG erzeugt: version={qr.version}, ec={style.error_correction}, {style.size}px")
    return {
        "bytes": data,
        "mime_type": "image/png",
        "data_url": to_data_url(data, "image/png"),
        "width": style.size,
    }


# ---------------------------------------------------------------------------
# 🧩 SVG (Vektor-Export)
# ---------------------------------------------------------------------------
def generate_qr_svg(payload: str, style: Optional[QRStyle] = None) -> Dict[str, Union[str, bytes, int]]:
    """
    Generiert den QR-Code als SVG mit Vorder- und Hintergrundfarbe.
    Verläufe und Logos werden im Vektor-Export nicht abgebildet.
    """
    style = style or default_style()
    qr = _build_matrix(payload, style)

    matrix = qr.get_matrix()  # enthält bereits den Rand (border)
    total = len(matrix)
    parts = []
    for y, row in enumerate(matrix):
        for x, dark in enumerate(row):
            if dark:
                parts.append(f"M{x},{y}h1v1h-1z")

    svg = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg xmlns="http://www.w3.org/2000/svg" version="1.1" viewBox="0 0 {total} {total}" '
        f'width="{style.size}" height="{style.size}" shape-rendering="crispEdges" stroke="none">\n'
        f'  <rect width="100%" height="100%" fill="{style.background_color}"/>\n'
        f'  <path d="{" ".join(parts)}" fill="{style.foreground_color}"/>\n'
        "</svg>\n"
    )
    data = svg.encode("utf-8")

    logger.info(f"✅ SVG erzeugt: version={qr.version}, {total}x{total} Module")
    return {
        "bytes": data,
        "mime_type": "image/svg+xml",
        "data_url": to_data_url(data, "image/svg+xml"),
        "width": style.size,
    }
