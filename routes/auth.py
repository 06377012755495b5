# routes/auth.py
from fastapi import APIRouter, Request, HTTPException
from pydantic import BaseModel, Field
import logging

from auth_utils import get_supabase, get_current_user_id

# ─────────────────────────────────────────────
# 🔐 Authentifizierungs-Router (Supabase)
# ─────────────────────────────────────────────
router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = logging.getLogger(__name__)


class CredentialsIn(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


def _require_supabase():
    client = get_supabase()
    if client is None:
        raise HTTPException(status_code=503, detail="Authentication is not configured")
    return client


def _start_session(request: Request, res) -> dict:
    user = getattr(res, "user", None)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    request.session["user_id"] = str(user.id)
    request.session["email"] = getattr(user, "email", None)
    session = getattr(res, "session", None)
    return {
        "user_id": str(user.id),
        "email": getattr(user, "email", None),
        "access_token": getattr(session, "access_token", None),
    }


@router.post("/login")
def login_user(body: CredentialsIn, request: Request):
    client = _require_supabase()
    try:
        res = client.auth.sign_in_with_password({"email": body.email, "password": body.password})
    except Exception as e:
        logger.warning(f"⚠️ Login fehlgeschlagen für {body.email}: {e}")
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _start_session(request, res)


@router.post("/signup", status_code=201)
def signup_user(body: CredentialsIn, request: Request):
    client = _require_supabase()
    try:
        res = client.auth.sign_up({"email": body.email, "password": body.password})
    except Exception as e:
        logger.warning(f"⚠️ Registrierung fehlgeschlagen für {body.email}: {e}")
        raise HTTPException(status_code=400, detail="Sign up failed")
    return _start_session(request, res)


@router.post("/logout")
def logout_user(request: Request):
    client = get_supabase()
    if client is not None:
        try:
            client.auth.sign_out()
        except Exception as e:
            logger.warning(f"⚠️ Supabase-Logout fehlgeschlagen: {e}")
    request.session.clear()
    return {"ok": True}


@router.get("/me")
def me(request: Request):
    return {"user_id": get_current_user_id(request)}
