"""
utils/qr_config.py
────────────────────────────────────────────
Globale QR-Code-Design- und Stilkonfiguration
für QR Studio.

Definiert Standardwerte, erlaubte Grenzen und
die benannten Themes (Farben, Formen, Gradients).
────────────────────────────────────────────
"""

from typing import Dict, Any, Tuple, FrozenSet

# ─────────────────────────────────────────────
# 📏 GRENZEN & ERLAUBTE WERTE
# ─────────────────────────────────────────────
SIZE_BOUNDS: Tuple[int, int] = (128, 512)
MARGIN_BOUNDS: Tuple[int, int] = (0, 10)

ERROR_CORRECTION_LEVELS: FrozenSet[str] = frozenset({"L", "M", "Q", "H"})
DOT_STYLES: FrozenSet[str] = frozenset({"square", "rounded", "dots"})
CORNER_STYLES: FrozenSet[str] = frozenset({"square", "rounded", "extra-rounded"})
GRADIENT_TYPES: FrozenSet[str] = frozenset({"none", "linear", "radial"})

# ─────────────────────────────────────────────
# 🎨 STANDARDDESIGN (Basis)
# ─────────────────────────────────────────────
QR_DEFAULT_STYLE: Dict[str, Any] = {
    "foreground_color": "#000000",
    "background_color": "#ffffff",
    "size": 256,
    "margin": 4,
    "error_correction": "M",
    "dot_style": "square",
    "corner_style": "square",
    "gradient_type": "none",
    "gradient_color": None,
    "logo_url": None,
    "logo_size": None,
}

# ─────────────────────────────────────────────
# 🪄 THEMES – Designvarianten (nur Teilwerte)
# ─────────────────────────────────────────────
QR_THEMES: Dict[str, Dict[str, Any]] = {
    "classic": {
        "foreground_color": "#000000",
        "background_color": "#ffffff",
    },
    "modern": {
        "foreground_color": "#0d2a78",
        "background_color": "#ffffff",
        "dot_style": "rounded",
        "corner_style": "rounded",
        "gradient_type": "radial",
        "gradient_color": "#f472b6",
    },
    "dark": {
        "foreground_color": "#ffffff",
        "background_color": "#0d0d0d",
    },
    "ocean": {
        "foreground_color": "#0ea5e9",
        "background_color": "#e0f2fe",
        "dot_style": "dots",
        "gradient_type": "linear",
        "gradient_color": "#22d3ee",
    },
    "sunset": {
        "foreground_color": "#f97316",
        "background_color": "#fff7ed",
        "dot_style": "rounded",
        "corner_style": "rounded",
        "gradient_type": "linear",
        "gradient_color": "#fb7185",
    },
    "forest": {
        "foreground_color": "#15803d",
        "background_color": "#ecfdf5",
        "dot_style": "rounded",
        "corner_style": "extra-rounded",
    },
    "rose": {
        "foreground_color": "#be185d",
        "background_color": "#fff1f2",
        "dot_style": "rounded",
        "gradient_type": "radial",
        "gradient_color": "#f472b6",
    },
    "neon": {
        "foreground_color": "#22d3ee",
        "background_color": "#0f172a",
        "dot_style": "dots",
        "error_correction": "H",
    },
}


# ─────────────────────────────────────────────
# 🧠 FUNKTION: Design abrufen
# ─────────────────────────────────────────────
def get_qr_style(style_name: str = "classic") -> Dict[str, Any]:
    """
    Gibt das gewünschte QR-Design als neues Dictionary zurück.
    Wenn das angegebene Theme nicht existiert, wird automatisch
    das Standard-Design verwendet.
    """
    theme = QR_THEMES.get((style_name or "").lower(), {})
    return {**QR_DEFAULT_STYLE, **theme}
