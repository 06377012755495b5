# auth_utils.py
# =============================================================================
# 🔐 Identität für QR Studio
# Supabase ist optional: ohne SUPABASE_URL / SUPABASE_KEY gibt es keinen
# Login, und alle QR-Codes werden ohne Besitzer gespeichert.
# =============================================================================

import os
import logging
from typing import Any, Optional

from fastapi import Request
from supabase import create_client, Client
from dotenv import load_dotenv

# 🔧 Umgebungsvariablen laden
load_dotenv()

logger = logging.getLogger(__name__)

_supabase: Optional[Client] = None
_supabase_checked = False


def _is_configured(url: Optional[str], key: Optional[str]) -> bool:
    return bool(
        url
        and key
        and url != "YOUR_SUPABASE_URL"
        and key != "YOUR_SUPABASE_ANON_KEY"
        and url.startswith("https://")
    )


# ---------------------------------------------------------------------
# ⚙️ Supabase-Client (lazy, einmal pro Prozess)
# ---------------------------------------------------------------------
def get_supabase() -> Optional[Client]:
    """Gibt den Supabase-Client zurück oder None, falls nicht konfiguriert."""
    global _supabase, _supabase_checked
    if _supabase_checked:
        return _supabase

    _supabase_checked = True
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_KEY")
    if not _is_configured(url, key):
        logger.info("ℹ️ Supabase wird nicht verwendet (lokale Datenbank aktiv).")
        return None

    _supabase = create_client(url, key)
    logger.info("✅ Supabase-Client initialisiert.")
    return _supabase


def reset_supabase() -> None:
    """Vergisst den Client (z. B. nach Änderung der Umgebung in Tests)."""
    global _supabase, _supabase_checked
    _supabase = None
    _supabase_checked = False


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def _user_id_from_token(token: str) -> Optional[str]:
    client = get_supabase()
    if client is None:
        return None
    try:
        res = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"⚠️ Supabase-Token ungültig: {e}")
        return None
    user: Any = getattr(res, "user", None)
    return str(user.id) if user is not None else None


# ---------------------------------------------------------------------
# 👤 Aktueller Benutzer (aus Session oder Bearer-Token)
# ---------------------------------------------------------------------
def get_current_user_id(request: Request) -> Optional[str]:
    """
    Liefert eine undurchsichtige Benutzer-ID oder None.
    Reihenfolge: Session-Cookie, dann Supabase-Access-Token.
    """
    uid = request.session.get("user_id") if "session" in request.scope else None
    if uid:
        return str(uid)

    token = _bearer_token(request)
    if token:
        return _user_id_from_token(token)
    return None
