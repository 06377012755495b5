"""
utils/qr_style.py
────────────────────────────────────────────
Stil-Auflösung für QR Studio.

Macht aus einem unvollständigen Stil-Dictionary (z. B. aus dem Formular
oder der JSON-API) eine vollständige, geprüfte QRStyle-Konfiguration,
die direkt an den Encoder übergeben werden kann.

Grenzwerte werden geklemmt, ungültige Werte fallen auf den Standard
zurück. Jede Korrektur wird geloggt und in `warnings` vermerkt.
────────────────────────────────────────────
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from utils.qr_config import (
    QR_DEFAULT_STYLE,
    SIZE_BOUNDS,
    MARGIN_BOUNDS,
    ERROR_CORRECTION_LEVELS,
    DOT_STYLES,
    CORNER_STYLES,
    GRADIENT_TYPES,
)

logger = logging.getLogger(__name__)

HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# Frontend-Schlüssel (camelCase) → interne Feldnamen
_KEY_ALIASES: Dict[str, str] = {
    "foregroundColor": "foreground_color",
    "backgroundColor": "background_color",
    "fg": "foreground_color",
    "bg": "background_color",
    "errorCorrectionLevel": "error_correction",
    "error_correction_level": "error_correction",
    "dotStyle": "dot_style",
    "cornerStyle": "corner_style",
    "gradientType": "gradient_type",
    "gradientColor": "gradient_color",
    "logoUrl": "logo_url",
    "logoSize": "logo_size",
}


@dataclass(frozen=True)
class QRStyle:
    foreground_color: str = "#000000"
    background_color: str = "#ffffff"
    size: int = 256
    margin: int = 4
    error_correction: str = "M"

    # Kosmetik – ändert die Bitmatrix nicht
    dot_style: str = "square"
    corner_style: str = "square"
    gradient_type: str = "none"
    gradient_color: Optional[str] = None
    logo_url: Optional[str] = None
    logo_size: Optional[int] = None

    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["warnings"] = list(self.warnings)
        return data

    def encoder_options(self) -> Dict[str, Any]:
        """Optionen im Format des Symbol-Encoders."""
        return {
            "width": self.size,
            "margin": self.margin,
            "darkColor": self.foreground_color,
            "lightColor": self.background_color,
            "errorCorrectionLevel": self.error_correction,
        }


def default_style() -> QRStyle:
    """Erzeugt bei jedem Aufruf eine frische Standard-Konfiguration."""
    return QRStyle(**QR_DEFAULT_STYLE)


def _normalize_keys(partial: Mapping[str, Any]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in partial.items():
        normalized[_KEY_ALIASES.get(key, key)] = value
    return normalized


def _is_unset(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _resolve_color(name: str, value: Any, fallback: str, warnings: list) -> str:
    if _is_unset(value):
        return fallback
    text = str(value).strip()
    if HEX_COLOR_RE.match(text):
        return text.lower()
    warnings.append(f"{name}: invalid color {text!r}, using {fallback}")
    return fallback


def _resolve_int(name: str, value: Any, fallback: int, bounds: Tuple[int, int], warnings: list) -> int:
    if _is_unset(value) or isinstance(value, bool):
        return fallback
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        warnings.append(f"{name}: not a number {value!r}, using {fallback}")
        return fallback

    low, high = bounds
    if number < low or number > high:
        clamped = max(low, min(high, number))
        warnings.append(f"{name}: {number} outside {low}-{high}, clamped to {clamped}")
        return clamped
    return number


def _resolve_choice(name: str, value: Any, fallback: str, allowed, warnings: list, upper: bool = False) -> str:
    if _is_unset(value):
        return fallback
    text = str(value).strip()
    text = text.upper() if upper else text.lower()
    if text in allowed:
        return text
    warnings.append(f"{name}: unsupported value {value!r}, using {fallback}")
    return fallback


# ─────────────────────────────────────────────
# 🧠 FUNKTION: Stil auflösen
# ─────────────────────────────────────────────
def resolve_style(partial: Optional[Mapping[str, Any]] = None, defaults: Optional[QRStyle] = None) -> QRStyle:
    """
    Füllt alle fehlenden Felder mit Standardwerten und prüft den Rest.

    `defaults` erlaubt eine eigene Basis (z. B. ein Theme); ohne Angabe
    wird `default_style()` verwendet. Die Funktion wirft nie.
    """
    base = defaults or default_style()
    values = _normalize_keys(partial or {})
    warnings: list = []

    logo_size = values.get("logo_size", base.logo_size)
    if not _is_unset(logo_size):
        logo_size = _resolve_int("logo_size", logo_size, 0, (0, 100), warnings) or None
    else:
        logo_size = None

    gradient_color = values.get("gradient_color", base.gradient_color)
    if not _is_unset(gradient_color):
        gradient_color = _resolve_color("gradient_color", gradient_color, "", warnings) or None
    else:
        gradient_color = None

    logo_url = values.get("logo_url", base.logo_url)

    style = replace(
        base,
        foreground_color=_resolve_color(
            "foreground_color", values.get("foreground_color"), base.foreground_color, warnings
        ),
        background_color=_resolve_color(
            "background_color", values.get("background_color"), base.background_color, warnings
        ),
        size=_resolve_int("size", values.get("size"), base.size, SIZE_BOUNDS, warnings),
        margin=_resolve_int("margin", values.get("margin"), base.margin, MARGIN_BOUNDS, warnings),
        error_correction=_resolve_choice(
            "error_correction", values.get("error_correction"), base.error_correction,
            ERROR_CORRECTION_LEVELS, warnings, upper=True,
        ),
        dot_style=_resolve_choice("dot_style", values.get("dot_style"), base.dot_style, DOT_STYLES, warnings),
        corner_style=_resolve_choice(
            "corner_style", values.get("corner_style"), base.corner_style, CORNER_STYLES, warnings
        ),
        gradient_type=_resolve_choice(
            "gradient_type", values.get("gradient_type"), base.gradient_type, GRADIENT_TYPES, warnings
        ),
        gradient_color=gradient_color,
        logo_url=None if _is_unset(logo_url) else str(logo_url).strip(),
        logo_size=logo_size,
        warnings=tuple(warnings),
    )

    for message in warnings:
        logger.warning(f"⚠️ Stil korrigiert – {message}")

    return style
