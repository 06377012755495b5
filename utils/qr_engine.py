"""
utils/qr_engine.py
────────────────────────────────────────────
Zentrale QR-Engine für QR Studio.
- Formatiert den Inhalt (utils/qr_content)
- Löst den Stil auf (utils/qr_style)
- Erzeugt das Bild (utils/qr_generator)
- Speichert best effort (utils/qr_store)
────────────────────────────────────────────
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from utils.qr_content import ContentKind, FieldMap, fields_for, fields_to_dict, format_content
from utils.qr_generator import generate_qr_png, generate_qr_svg
from utils.qr_store import QRStore
from utils.qr_style import QRStyle, resolve_style

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("png", "svg")


def qr_output_dir() -> Path:
    return Path(os.getenv("QR_OUTPUT_DIR", "static/generated_qr"))


class EmptyContentError(ValueError):
    """Der formatierte Inhalt ist leer – es gibt nichts zu kodieren."""


@dataclass
class QRBuildResult:
    kind: ContentKind
    payload: str
    fields: Dict[str, Any]
    style: QRStyle
    image: bytes
    mime_type: str
    data_url: str
    image_path: Optional[str] = None
    record_id: Optional[str] = None
    record: Optional[Dict[str, Any]] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "payload": self.payload,
            "fields": self.fields,
            "style": self.style.to_dict(),
            "mime_type": self.mime_type,
            "data_url": self.data_url,
            "image_path": self.image_path,
            "record_id": self.record_id,
        }


def _save_image(data: bytes, extension: str) -> str:
    output_dir = qr_output_dir()
    output_dir.mkdir(parents=True, exist_ok=True)
    file_path = output_dir / f"qr_{uuid.uuid4().hex[:12]}.{extension}"
    file_path.write_bytes(data)
    logger.info(f"💾 QR-Bild gespeichert unter: {file_path}")
    return str(file_path)


def build_qr_code(
    kind: Union[ContentKind, str],
    fields: Optional[FieldMap] = None,
    style: Optional[Mapping[str, Any]] = None,
    *,
    store: Optional[QRStore] = None,
    user_id: Optional[str] = None,
    export_format: str = "png",
    save_file: bool = False,
    escape: bool = False,
) -> QRBuildResult:
    """
    Erstellt einen QR-Code aus Typ + Formularfeldern + (teilweisem) Stil.

    Wirft EmptyContentError bei leerem Inhalt und QRGenerationError, wenn
    der Encoder scheitert. Fehler beim Speichern werden nur geloggt.
    """
    kind = ContentKind.from_value(kind)
    if export_format not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {export_format}")

    # 1️⃣ Inhalt formatieren
    record_fields = fields_for(kind, fields)
    payload = format_content(kind, record_fields, escape=escape)
    if not payload.strip():
        raise EmptyContentError(f"No content to encode for {kind.value}")

    # 2️⃣ Stil auflösen
    resolved = resolve_style(style)

    # 3️⃣ Bild erzeugen
    if export_format == "svg":
        image = generate_qr_svg(payload, resolved)
    else:
        image = generate_qr_png(payload, resolved)

    result = QRBuildResult(
        kind=kind,
        payload=payload,
        fields=fields_to_dict(record_fields),
        style=resolved,
        image=image["bytes"],
        mime_type=image["mime_type"],
        data_url=image["data_url"],
    )

    if save_file:
        result.image_path = _save_image(result.image, export_format)

    # 4️⃣ Speichern (best effort)
    if store is not None:
        try:
            result.record = store.create(
                {
                    "type": kind.value,
                    "content": payload,
                    "data": result.fields,
                    "style": resolved.to_dict(),
                    "image_url": result.image_path,
                },
                user_id=user_id,
            )
            result.record_id = result.record.get("id") if result.record else None
        except Exception:
            logger.exception(f"⚠️ QR-Code konnte nicht gespeichert werden (type={kind.value})")

    logger.info(f"✅ QR-Code erfolgreich erstellt: type={kind.value}, format={export_format}")
    return result
