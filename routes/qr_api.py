from __future__ import annotations

import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from auth_utils import get_current_user_id
from utils.qr_content import ContentKind, field_names, format_content, parse_content
from utils.qr_engine import EmptyContentError, build_qr_code
from utils.qr_generator import QRGenerationError
from utils.qr_store import QRStore, get_qr_store
from utils.qr_style import resolve_style

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qr", tags=["QR API"])


class FormatIn(BaseModel):
    kind: str = Field(..., description="TEXT, URL, EMAIL, PHONE, SMS, WIFI or VCARD")
    fields: dict[str, Union[bool, str]] = Field(default_factory=dict)
    escape: bool = False


class ParseIn(BaseModel):
    kind: str
    payload: str = ""
    unescape: bool = False


class GenerateIn(FormatIn):
    style: dict[str, Any] = Field(default_factory=dict)
    format: str = Field(default="png", description="png or svg")
    save: bool = True


class UpdateQRIn(BaseModel):
    data: Optional[dict[str, Union[bool, str]]] = None
    style: Optional[dict[str, Any]] = None


class ScanIn(BaseModel):
    user_agent: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    device_type: Optional[str] = None


def _kind(value: str) -> ContentKind:
    try:
        return ContentKind.from_value(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unsupported QR kind: {value}")


@router.get("/kinds")
def list_kinds():
    return {"kinds": [{"kind": k.value, "fields": field_names(k)} for k in ContentKind]}


@router.post("/format")
def format_payload(body: FormatIn):
    kind = _kind(body.kind)
    return {"kind": kind.value, "payload": format_content(kind, body.fields, escape=body.escape)}


@router.post("/parse")
def parse_payload(body: ParseIn):
    kind = _kind(body.kind)
    return {"kind": kind.value, "fields": parse_content(kind, body.payload, unescape=body.unescape)}


@router.post("/style")
def resolve_style_options(partial: dict[str, Any]):
    style = resolve_style(partial)
    return {"style": style.to_dict(), "encoder_options": style.encoder_options()}


@router.post("/generate", status_code=201)
def generate_qr(
    body: GenerateIn,
    request: Request,
    store: QRStore = Depends(get_qr_store),
):
    kind = _kind(body.kind)
    try:
        result = build_qr_code(
            kind,
            body.fields,
            body.style,
            store=store if body.save else None,
            user_id=get_current_user_id(request),
            export_format=body.format.lower(),
            escape=body.escape,
        )
    except EmptyContentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except QRGenerationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return result.to_dict()


@router.get("/history")
def history(
    request: Request,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: QRStore = Depends(get_qr_store),
):
    user_id = get_current_user_id(request)
    try:
        items = store.list(limit=limit, offset=offset, user_id=user_id)
    except Exception:
        logger.exception("⚠️ Verlauf konnte nicht geladen werden")
        items = []
    return {"items": items, "count": len(items), "limit": limit, "offset": offset}


@router.get("/analytics/summary")
def analytics_summary(request: Request, store: QRStore = Depends(get_qr_store)):
    return {"items": store.summary(user_id=get_current_user_id(request))}


@router.get("/{qr_id}")
def get_qr(qr_id: str, request: Request, store: QRStore = Depends(get_qr_store)):
    record = store.get(qr_id, user_id=get_current_user_id(request))
    if not record:
        raise HTTPException(status_code=404, detail="QR code not found")
    return record


@router.patch("/{qr_id}")
def update_qr(
    qr_id: str,
    body: UpdateQRIn,
    request: Request,
    store: QRStore = Depends(get_qr_store),
):
    user_id = get_current_user_id(request)
    current = store.get(qr_id, user_id=user_id)
    if not current:
        raise HTTPException(status_code=404, detail="QR code not found")

    # Inhalt wird aus den neuen Feldern neu formatiert
    kind = ContentKind.from_value(current["type"])
    data = body.data if body.data is not None else current.get("data") or {}
    payload = format_content(kind, data)
    if not payload.strip():
        raise HTTPException(status_code=400, detail=f"No content to encode for {kind.value}")

    style = resolve_style(body.style if body.style is not None else current.get("style"))
    updated = store.update(
        qr_id,
        {"data": dict(data), "content": payload, "style": style.to_dict()},
        user_id=user_id,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="QR code not found")
    return updated


@router.delete("/{qr_id}", status_code=204)
def delete_qr(qr_id: str, request: Request, store: QRStore = Depends(get_qr_store)):
    if not store.delete(qr_id, user_id=get_current_user_id(request)):
        raise HTTPException(status_code=404, detail="QR code not found")


@router.post("/{qr_id}/scan", status_code=201)
def record_scan(
    qr_id: str,
    request: Request,
    body: Optional[ScanIn] = None,
    store: QRStore = Depends(get_qr_store),
):
    scan_data = body.model_dump(exclude_none=True) if body else {}
    scan_data.setdefault("user_agent", request.headers.get("user-agent"))
    if request.client:
        scan_data["ip_address"] = request.client.host

    scan = store.record_scan(qr_id, scan_data)
    if scan is None:
        raise HTTPException(status_code=404, detail="QR code not found")
    return scan


@router.get("/{qr_id}/analytics")
def qr_analytics(
    qr_id: str,
    request: Request,
    days: int = Query(30, ge=1, le=365),
    store: QRStore = Depends(get_qr_store),
):
    if not store.get(qr_id, user_id=get_current_user_id(request)):
        raise HTTPException(status_code=404, detail="QR code not found")
    items = store.analytics(qr_id, days=days)
    return {"items": items, "count": len(items), "days": days}
