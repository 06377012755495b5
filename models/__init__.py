# =============================================================================
# 📦 models/__init__.py
# -----------------------------------------------------------------------------
# Registriert alle Modelle an Base.metadata
# =============================================================================

from .qrcode import QRCodeRecord
from .qr_analytics import QRAnalytics

__all__ = [
    "QRCodeRecord",
    "QRAnalytics",
]
