"""
utils/qr_content.py
────────────────────────────────────────────
Inhalts-Formatierung für alle QR-Typen.

Wandelt Formularfelder in den exakten Text um, der im QR-Code landet
(`format_content`), und zurück (`parse_content`). Die Präfixe und
Feldreihenfolgen (mailto:, tel:, sms:, WIFI:, BEGIN:VCARD) müssen exakt
stimmen, sonst erkennen Scanner-Apps den Inhalt nicht.

Beide Funktionen werfen nie: fehlende Felder werden zu "" bzw. False.
────────────────────────────────────────────
"""

from __future__ import annotations

import re
from dataclasses import dataclass, asdict, fields as dataclass_fields
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Type, Union
from urllib.parse import quote, unquote

FieldValue = Union[str, bool]
FieldMap = Mapping[str, FieldValue]


class ContentKind(str, Enum):
    TEXT = "TEXT"
    URL = "URL"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    SMS = "SMS"
    WIFI = "WIFI"
    VCARD = "VCARD"

    @classmethod
    def from_value(cls, value: Union[str, "ContentKind"]) -> "ContentKind":
        """Akzeptiert 'wifi', 'WIFI' oder ContentKind.WIFI. Wirft ValueError bei unbekannten Typen."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


# =============================================================================
# 🧩 Feld-Records pro Typ
# =============================================================================
@dataclass(frozen=True)
class TextFields:
    text: str = ""


@dataclass(frozen=True)
class UrlFields:
    url: str = ""


@dataclass(frozen=True)
class EmailFields:
    email: str = ""
    subject: str = ""
    body: str = ""


@dataclass(frozen=True)
class PhoneFields:
    phone: str = ""


@dataclass(frozen=True)
class SmsFields:
    phone: str = ""
    message: str = ""


@dataclass(frozen=True)
class WifiFields:
    ssid: str = ""
    password: str = ""
    security: str = ""
    hidden: bool = False


@dataclass(frozen=True)
class VCardFields:
    name: str = ""
    organization: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    note: str = ""


FIELD_RECORDS: Dict[ContentKind, Type[Any]] = {
    ContentKind.TEXT: TextFields,
    ContentKind.URL: UrlFields,
    ContentKind.EMAIL: EmailFields,
    ContentKind.PHONE: PhoneFields,
    ContentKind.SMS: SmsFields,
    ContentKind.WIFI: WifiFields,
    ContentKind.VCARD: VCardFields,
}

WIFI_SECURITY_TYPES = ("WPA", "WEP", "nopass")
DEFAULT_WIFI_SECURITY = "WPA"


def field_names(kind: ContentKind) -> list[str]:
    return [f.name for f in dataclass_fields(FIELD_RECORDS[kind])]


def _as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "true"
    return str(value)


def _as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return bool(value)


def fields_for(kind: ContentKind, data: Optional[FieldMap]):
    """Baut den typisierten Feld-Record aus einer losen Map (unbekannte Schlüssel werden ignoriert)."""
    data = data or {}
    record_cls = FIELD_RECORDS[kind]
    values: Dict[str, Any] = {}
    for f in dataclass_fields(record_cls):
        raw = data.get(f.name)
        values[f.name] = _as_flag(raw) if f.type in ("bool", bool) else _as_text(raw)
    return record_cls(**values)


# =============================================================================
# 🔐 Prozent-Kodierung wie encodeURIComponent
# =============================================================================
def encode_component(value: str) -> str:
    return quote(value, safe="!~*'()")


def _decode_component(value: str) -> str:
    return unquote(value)


# Escaping nach WIFI-/vCard-Konvention (nur auf Wunsch)
_WIFI_SPECIAL = re.compile(r'([\\;,:"])')
_VCARD_SPECIAL = re.compile(r"([\\;,])")


def _escape_wifi(value: str) -> str:
    return _WIFI_SPECIAL.sub(r"\\\1", value)


def _escape_vcard(value: str) -> str:
    return _VCARD_SPECIAL.sub(r"\\\1", value).replace("\r\n", "\\n").replace("\n", "\\n")


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", lambda m: "\n" if m.group(1) in "nN" else m.group(1), value)


# =============================================================================
# ✅ Formatierung
# =============================================================================
def _format_text(f: TextFields, escape: bool) -> str:
    return f.text


def _format_url(f: UrlFields, escape: bool) -> str:
    return f.url


def _format_email(f: EmailFields, escape: bool) -> str:
    params = []
    if f.subject:
        params.append(f"subject={encode_component(f.subject)}")
    if f.body:
        params.append(f"body={encode_component(f.body)}")

    mailto = f"mailto:{f.email}"
    if params:
        mailto += "?" + "&".join(params)
    return mailto


def _format_phone(f: PhoneFields, escape: bool) -> str:
    return f"tel:{f.phone}"


def _format_sms(f: SmsFields, escape: bool) -> str:
    sms = f"sms:{f.phone}"
    if f.message:
        sms += f"?body={encode_component(f.message)}"
    return sms


def _format_wifi(f: WifiFields, escape: bool) -> str:
    esc = _escape_wifi if escape else (lambda v: v)
    security = f.security or DEFAULT_WIFI_SECURITY
    hidden = "true" if f.hidden else "false"
    return f"WIFI:T:{esc(security)};S:{esc(f.ssid)};P:{esc(f.password)};H:{hidden};;"


def _format_vcard(f: VCardFields, escape: bool) -> str:
    esc = _escape_vcard if escape else (lambda v: v)
    lines = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"FN:{esc(f.name)}",
    ]
    if f.organization:
        lines.append(f"ORG:{esc(f.organization)}")
    if f.phone:
        lines.append(f"TEL:{esc(f.phone)}")
    if f.email:
        lines.append(f"EMAIL:{esc(f.email)}")
    if f.website:
        lines.append(f"URL:{esc(f.website)}")
    if f.note:
        lines.append(f"NOTE:{esc(f.note)}")
    lines.append("END:VCARD")
    return "\n".join(lines)


_FORMATTERS: Dict[ContentKind, Callable[[Any, bool], str]] = {
    ContentKind.TEXT: _format_text,
    ContentKind.URL: _format_url,
    ContentKind.EMAIL: _format_email,
    ContentKind.PHONE: _format_phone,
    ContentKind.SMS: _format_sms,
    ContentKind.WIFI: _format_wifi,
    ContentKind.VCARD: _format_vcard,
}


def format_content(kind: ContentKind, fields: Optional[FieldMap] = None, *, escape: bool = False) -> str:
    """
    Erzeugt den QR-Inhalt für `kind` aus den Formularfeldern.

    Standardmäßig werden Trennzeichen (`;`, `:`, `,`) in WIFI-/vCard-Werten
    unverändert übernommen; `escape=True` maskiert sie mit Backslash.
    """
    kind = ContentKind.from_value(kind)
    record = fields if isinstance(fields, FIELD_RECORDS[kind]) else fields_for(kind, fields)
    return _FORMATTERS[kind](record, escape)


# =============================================================================
# 🔍 Parsing (best effort)
# =============================================================================
_EMAIL_RE = re.compile(r"^mailto:([^?]*)(?:\?(.*))?$", re.DOTALL)
_SMS_RE = re.compile(r"^sms:([^?]*)(?:\?(.*))?$", re.DOTALL)
_WIFI_FIELD_RE = re.compile(r"([TSPH]):([^;]*);")
_WIFI_ESCAPED_FIELD_RE = re.compile(r"([TSPH]):((?:\\.|[^;\\])*);")


def _parse_text(payload: str, unescape: bool) -> Dict[str, FieldValue]:
    return {"text": payload}


def _parse_url(payload: str, unescape: bool) -> Dict[str, FieldValue]:
    return {"url": payload}


def _parse_email(payload: str, unescape: bool) -> Dict[str, FieldValue]:
    result: Dict[str, FieldValue] = {"email": "", "subject": "", "body": ""}
    match = _EMAIL_RE.match(payload)
    if not match:
        return result

    result["email"] = match.group(1)
    for part in (match.group(2) or "").split("&"):
        name, sep, value = part.partition("=")
        if sep and name.lower() in ("subject", "body"):
            result[name.lower()] = _decode_component(value)
    return result


def _parse_phone(payload: str, unescape: bool) -> Dict[str, FieldValue]:
    return {"phone": payload[4:] if payload.startswith("tel:") else payload}


def _parse_sms(payload: str, unescape: bool) -> Dict[str, FieldValue]:
    match = _SMS_RE.match(payload)
    if not match:
        return {"phone": "", "message": ""}

    # unbekannte Parameter ignorieren, die Nummer bleibt erhalten
    message = ""
    for part in (match.group(2) or "").split("&"):
        name, sep, value = part.partition("=")
        if sep and name.lower() == "body":
            message = _decode_component(value)
            break
    return {"phone": match.group(1), "message": message}


def _parse_wifi(payload: str, unescape: bool) -> Dict[str, FieldValue]:
    result: Dict[str, FieldValue] = {"ssid": "", "password": "", "security": "", "hidden": False}
    if not payload.startswith("WIFI:"):
        return result

    # Backslash ist nur bei unescape=True ein Escape-Zeichen
    values: Dict[str, str] = {}
    if unescape:
        for key, value in _WIFI_ESCAPED_FIELD_RE.findall(payload[5:]):
            values.setdefault(key, _unescape(value))
    else:
        for key, value in _WIFI_FIELD_RE.findall(payload[5:]):
            values.setdefault(key, value)

    result["security"] = values.get("T", "")
    result["ssid"] = values.get("S", "")
    result["password"] = values.get("P", "")
    result["hidden"] = values.get("H", "").lower() == "true"
    return result


_VCARD_PROPERTIES = (
    ("FN:", "name"),
    ("ORG:", "organization"),
    ("TEL:", "phone"),
    ("EMAIL:", "email"),
    ("URL:", "website"),
    ("NOTE:", "note"),
)


def _parse_vcard(payload: str, unescape: bool) -> Dict[str, FieldValue]:
    result: Dict[str, FieldValue] = {name: "" for name in field_names(ContentKind.VCARD)}
    for line in payload.splitlines():
        for prefix, name in _VCARD_PROPERTIES:
            if line.startswith(prefix):
                value = line[len(prefix):]
                result[name] = _unescape(value) if unescape else value
                break
    return result


_PARSERS: Dict[ContentKind, Callable[[str, bool], Dict[str, FieldValue]]] = {
    ContentKind.TEXT: _parse_text,
    ContentKind.URL: _parse_url,
    ContentKind.EMAIL: _parse_email,
    ContentKind.PHONE: _parse_phone,
    ContentKind.SMS: _parse_sms,
    ContentKind.WIFI: _parse_wifi,
    ContentKind.VCARD: _parse_vcard,
}


def parse_content(kind: ContentKind, payload: Optional[str], *, unescape: bool = False) -> Dict[str, FieldValue]:
    """Liest die Felder wieder aus einem QR-Inhalt. Was nicht erkannt wird, bleibt leer."""
    kind = ContentKind.from_value(kind)
    return _PARSERS[kind](payload or "", unescape)


def fields_to_dict(record: Any) -> Dict[str, FieldValue]:
    return asdict(record)
