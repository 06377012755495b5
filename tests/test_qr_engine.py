import logging
from pathlib import Path

import pytest

from utils.qr_content import ContentKind
from utils.qr_engine import EmptyContentError, build_qr_code
from utils.qr_generator import QRGenerationError
from utils.qr_store import SqlQRStore


class BrokenStore:
    def create(self, record, user_id=None):
        raise RuntimeError("database is down")


def test_build_without_store():
    result = build_qr_code("URL", {"url": "https://example.com"}, {"size": 200})

    assert result.kind is ContentKind.URL
    assert result.payload == "https://example.com"
    assert result.mime_type == "image/png"
    assert result.image.startswith(b"\x89PNG")
    assert result.style.size == 200
    assert result.record_id is None
    assert result.image_path is None


def test_build_persists_snapshot(db):
    store = SqlQRStore(db)
    result = build_qr_code(
        ContentKind.SMS,
        {"phone": "+1234567890", "message": "Hi there"},
        {"foregroundColor": "#112233"},
        store=store,
        user_id="alice",
    )

    assert result.record_id is not None
    stored = store.get(result.record_id, user_id="alice")
    assert stored["type"] == "SMS"
    assert stored["content"] == "sms:+1234567890?body=Hi%20there"
    assert stored["data"] == {"phone": "+1234567890", "message": "Hi there"}
    assert stored["style"]["foreground_color"] == "#112233"
    assert stored["user_id"] == "alice"


def test_store_failure_still_returns_image(caplog):
    with caplog.at_level(logging.ERROR, logger="utils.qr_engine"):
        result = build_qr_code("TEXT", {"text": "hello"}, store=BrokenStore())

    assert result.image.startswith(b"\x89PNG")
    assert result.record_id is None
    assert "konnte nicht gespeichert werden" in caplog.text


@pytest.mark.parametrize(
    "kind, fields",
    [
        ("TEXT", {}),
        ("TEXT", {"text": "   "}),
        ("URL", {"url": ""}),
    ],
)
def test_empty_content_is_rejected(kind, fields, db):
    store = SqlQRStore(db)
    with pytest.raises(EmptyContentError):
        build_qr_code(kind, fields, store=store)
    assert store.list() == []


def test_unknown_export_format():
    with pytest.raises(ValueError):
        build_qr_code("TEXT", {"text": "x"}, export_format="gif")


def test_encoder_failure_propagates():
    with pytest.raises(QRGenerationError):
        build_qr_code("TEXT", {"text": "x" * 5000}, {"error_correction": "H"})


def test_svg_export_and_saved_file(tmp_path, monkeypatch):
    monkeypatch.setenv("QR_OUTPUT_DIR", str(tmp_path / "out"))
    result = build_qr_code("PHONE", {"phone": "+49301234"}, export_format="svg", save_file=True)

    assert result.mime_type == "image/svg+xml"
    assert result.data_url.startswith("data:image/svg+xml;base64,")
    path = Path(result.image_path)
    assert path.parent == tmp_path / "out"
    assert path.suffix == ".svg"
    assert path.read_bytes() == result.image


def test_to_dict_is_json_friendly():
    data = build_qr_code("WIFI", {"ssid": "Net", "hidden": True}).to_dict()
    assert data["kind"] == "WIFI"
    assert data["payload"] == "WIFI:T:WPA;S:Net;P:;H:true;;"
    assert data["fields"]["hidden"] is True
    assert data["style"]["warnings"] == []
