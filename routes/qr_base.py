# routes/qr_base.py
# =============================================================================
# 🚀 Zentrale QR-Builder-Routen (QR Studio)
# - 1 Formular (/qr/new)
# - 1 Create-Route (/qr/create)
# - Downloads gespeicherter Codes (/qr/{id}/download.png|svg)
# =============================================================================

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from auth_utils import get_current_user_id
from utils.qr_config import QR_THEMES, get_qr_style
from utils.qr_content import ContentKind, field_names
from utils.qr_engine import EmptyContentError, build_qr_code
from utils.qr_generator import QRGenerationError, generate_qr_png, generate_qr_svg
from utils.qr_store import QRStore, get_qr_store
from utils.qr_style import resolve_style

router = APIRouter(prefix="/qr", tags=["QR-Builder"])

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

STYLE_FORM_FIELDS = (
    "foreground_color",
    "background_color",
    "size",
    "margin",
    "error_correction",
    "dot_style",
    "corner_style",
    "gradient_type",
    "gradient_color",
)

KIND_LABELS = {
    ContentKind.TEXT: "Text",
    ContentKind.URL: "Website URL",
    ContentKind.EMAIL: "Email",
    ContentKind.PHONE: "Phone Number",
    ContentKind.SMS: "SMS Message",
    ContentKind.WIFI: "WiFi Network",
    ContentKind.VCARD: "Contact Card",
}


def _context(request: Request, **extra: Any) -> Dict[str, Any]:
    return {
        "request": request,
        "kinds": [(k.value, KIND_LABELS[k], field_names(k)) for k in ContentKind],
        "themes": sorted(QR_THEMES),
        **extra,
    }


# =============================================================================
# ✅ FORMULAR
# =============================================================================
@router.get("/new", response_class=HTMLResponse)
def new_form(request: Request) -> HTMLResponse:
    """Zeigt das universelle QR-Erstellformular."""
    return templates.TemplateResponse(request, "qr_builder.html", _context(request))


# =============================================================================
# ✅ CREATE
# =============================================================================
@router.post("/create", response_class=HTMLResponse)
async def create_qr(request: Request, store: QRStore = Depends(get_qr_store)) -> HTMLResponse:
    """Erstellt den QR-Code aus dem Formular und zeigt das Ergebnis an."""
    form = await request.form()

    kind_value = str(form.get("kind") or ContentKind.TEXT.value)
    try:
        kind = ContentKind.from_value(kind_value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unsupported QR kind: {kind_value}")

    fields: Dict[str, Any] = {}
    for name in field_names(kind):
        value = form.get(f"{kind.value.lower()}_{name}", form.get(name))
        if name == "hidden":
            fields[name] = value in ("on", "true", "1")
        elif value is not None:
            fields[name] = str(value)

    # Theme als Basis, einzelne Formularwerte überschreiben es
    style: Dict[str, Any] = {}
    theme = form.get("theme")
    if theme:
        style.update(get_qr_style(str(theme)))
    for name in STYLE_FORM_FIELDS:
        value = form.get(name)
        if value not in (None, ""):
            style[name] = value

    try:
        result = build_qr_code(
            kind,
            fields,
            style,
            store=store,
            user_id=get_current_user_id(request),
        )
    except EmptyContentError:
        return templates.TemplateResponse(
            request,
            "qr_builder.html",
            _context(request, error="Please fill in the required data", selected=kind.value),
            status_code=400,
        )
    except QRGenerationError as e:
        return templates.TemplateResponse(
            request,
            "qr_builder.html",
            _context(request, error=f"Failed to generate QR code: {e}", selected=kind.value),
            status_code=422,
        )

    return templates.TemplateResponse(
        request,
        "qr_builder.html",
        _context(request, result=result, selected=kind.value),
    )


# =============================================================================
# ⬇️ DOWNLOADS
# =============================================================================
def _load_record(qr_id: str, request: Request, store: QRStore) -> Dict[str, Any]:
    record = store.get(qr_id, user_id=get_current_user_id(request))
    if not record:
        raise HTTPException(404, "QR-Code nicht gefunden")
    return record


@router.get("/{qr_id}/download.png")
def download_png(qr_id: str, request: Request, store: QRStore = Depends(get_qr_store)) -> Response:
    record = _load_record(qr_id, request, store)
    image = generate_qr_png(record["content"], resolve_style(record.get("style")))
    return Response(
        content=image["bytes"],
        media_type="image/png",
        headers={"Content-Disposition": 'attachment; filename="qr-code.png"'},
    )


@router.get("/{qr_id}/download.svg")
def download_svg(qr_id: str, request: Request, store: QRStore = Depends(get_qr_store)) -> Response:
    record = _load_record(qr_id, request, store)
    image = generate_qr_svg(record["content"], resolve_style(record.get("style")))
    return Response(
        content=image["bytes"],
        media_type="image/svg+xml",
        headers={"Content-Disposition": 'attachment; filename="qr-code.svg"'},
    )
