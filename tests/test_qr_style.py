import logging

import pytest

from utils.qr_config import QR_DEFAULT_STYLE, get_qr_style
from utils.qr_style import QRStyle, default_style, resolve_style


def test_empty_partial_gives_documented_defaults():
    style = resolve_style({})
    assert style == default_style()
    assert style.foreground_color == "#000000"
    assert style.background_color == "#ffffff"
    assert style.size == 256
    assert style.margin == 4
    assert style.error_correction == "M"
    assert style.dot_style == "square"
    assert style.corner_style == "square"
    assert style.gradient_type == "none"
    assert style.logo_url is None
    assert style.warnings == ()


def test_none_is_treated_like_empty():
    assert resolve_style(None) == resolve_style({})


def test_size_is_preserved_and_rest_defaulted():
    style = resolve_style({"size": 300})
    assert style.size == 300
    assert style.margin == 4
    assert style.foreground_color == "#000000"
    assert style.error_correction == "M"


def test_out_of_range_numbers_are_clamped(caplog):
    with caplog.at_level(logging.WARNING, logger="utils.qr_style"):
        style = resolve_style({"size": 2000, "margin": -3})
    assert style.size == 512
    assert style.margin == 0
    assert len(style.warnings) == 2
    assert "clamped" in caplog.text


def test_numeric_strings_are_accepted():
    style = resolve_style({"size": "200", "margin": "2"})
    assert (style.size, style.margin) == (200, 2)


def test_invalid_values_fall_back_to_defaults():
    style = resolve_style(
        {
            "foreground_color": "red",
            "size": "big",
            "error_correction": "X",
            "dot_style": "stars",
        }
    )
    assert style.foreground_color == "#000000"
    assert style.size == 256
    assert style.error_correction == "M"
    assert style.dot_style == "square"
    assert len(style.warnings) == 4


def test_camel_case_keys_from_the_frontend():
    style = resolve_style(
        {
            "foregroundColor": "#FF0000",
            "backgroundColor": "#00ff00",
            "errorCorrectionLevel": "h",
            "dotStyle": "dots",
            "cornerStyle": "extra-rounded",
            "gradientType": "linear",
            "gradientColor": "#0000ff",
        }
    )
    assert style.foreground_color == "#ff0000"
    assert style.background_color == "#00ff00"
    assert style.error_correction == "H"
    assert style.dot_style == "dots"
    assert style.corner_style == "extra-rounded"
    assert style.gradient_type == "linear"
    assert style.gradient_color == "#0000ff"


def test_cosmetic_fields_pass_through():
    style = resolve_style({"logo_url": "static/logo.png", "logo_size": 25, "corner_style": "rounded"})
    assert style.logo_url == "static/logo.png"
    assert style.logo_size == 25
    assert style.corner_style == "rounded"


def test_explicit_defaults_are_used_as_base():
    base = QRStyle(foreground_color="#123456", size=400)
    style = resolve_style({"margin": 1}, defaults=base)
    assert style.foreground_color == "#123456"
    assert style.size == 400
    assert style.margin == 1


def test_resolve_is_idempotent():
    partial = {"size": 320, "foregroundColor": "#abcdef", "dot_style": "rounded"}
    first = resolve_style(partial)
    assert resolve_style(partial) == first
    assert resolve_style(first.to_dict()) == first


def test_default_style_is_a_fresh_value():
    assert default_style() == default_style()
    assert QR_DEFAULT_STYLE["size"] == 256


def test_encoder_options():
    options = resolve_style({"size": 200, "errorCorrectionLevel": "Q"}).encoder_options()
    assert options == {
        "width": 200,
        "margin": 4,
        "darkColor": "#000000",
        "lightColor": "#ffffff",
        "errorCorrectionLevel": "Q",
    }


def test_theme_presets_resolve():
    style = resolve_style(get_qr_style("neon"))
    assert style.background_color == "#0f172a"
    assert style.error_correction == "H"
    assert resolve_style(get_qr_style("does-not-exist")) == default_style()


@pytest.mark.parametrize("value", ["inf", "-inf", "1e999", "nan", float("inf")])
def test_non_finite_numbers_fall_back(value):
    style = resolve_style({"size": value, "margin": value})
    assert style.size == 256
    assert style.margin == 4
    assert len(style.warnings) == 2
