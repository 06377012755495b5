# =============================================================================
# 🚀 QR Studio – Hauptapplikation (main.py)
# =============================================================================

from __future__ import annotations
import os
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import RedirectResponse, Response
from starlette.middleware.sessions import SessionMiddleware

from dotenv import load_dotenv

# -------------------------------------------------------------------------
# 1️⃣ .env laden (muss ganz oben sein!)
# -------------------------------------------------------------------------
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from database import init_db  # noqa: E402
from routes import auth, qr_api, qr_base  # noqa: E402


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    yield


# -------------------------------------------------------------------------
# 2️⃣ FastAPI App
# -------------------------------------------------------------------------
app = FastAPI(title="QR Studio", version="1.0", lifespan=lifespan)

# -------------------------------------------------------------------------
# 3️⃣ Static
# -------------------------------------------------------------------------
STATIC_DIR = Path(__file__).resolve().parent / "static"
STATIC_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# -------------------------------------------------------------------------
# 4️⃣ Session Middleware
# -------------------------------------------------------------------------
app.add_middleware(
    SessionMiddleware,
    secret_key=os.getenv("SESSION_SECRET", "qr-studio-secret-key"),
    max_age=60 * 60 * 24 * 7,
    session_cookie=os.getenv("SESSION_COOKIE_NAME", "qr_studio_session"),
    same_site=os.getenv("SESSION_SAME_SITE", "lax"),
    https_only=os.getenv("SESSION_HTTPS_ONLY", "0") in {"1", "true", "yes"},
)

# -------------------------------------------------------------------------
# 5️⃣ Routen
# -------------------------------------------------------------------------
app.include_router(auth.router)
app.include_router(qr_api.router)
app.include_router(qr_base.router)


# -------------------------------------------------------------------------
# 6️⃣ Home & Health
# -------------------------------------------------------------------------
@app.get("/")
def home() -> RedirectResponse:
    return RedirectResponse(url="/qr/new", status_code=303)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/.well-known/appspecific/com.chrome.devtools.json", include_in_schema=False)
def chrome_devtools_probe() -> Response:
    # Chrome fragt das lokal ab; 204 hält die Logs sauber.
    return Response(status_code=204)
