# =============================================================================
# 📊 models/qr_analytics.py
# -----------------------------------------------------------------------------
# Ein Datensatz pro Scan eines gespeicherten QR-Codes (Gerät, Zeit, Standort).
# =============================================================================

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from database import Base


def utc_now():
    """Gibt aktuelle UTC-Zeit (timezone-aware) zurück."""
    return datetime.now(timezone.utc)


class QRAnalytics(Base):
    __tablename__ = "qr_analytics"

    # ---------------------------------------------------------------------
    # 🔹 Primär- & Fremdschlüssel
    # ---------------------------------------------------------------------
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    qr_code_id = Column(String(32), ForeignKey("qr_codes.id", ondelete="CASCADE"), nullable=False, index=True)

    # ---------------------------------------------------------------------
    # 🔹 Scan-Informationen
    # ---------------------------------------------------------------------
    scan_date = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    user_agent = Column(String(255), nullable=True)
    ip_address = Column(String(45), nullable=True)
    country = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    device_type = Column(String(50), nullable=True)    # z. B. "mobile", "desktop"

    qr = relationship("QRCodeRecord", back_populates="scans")

    def to_dict(self):
        return {
            "id": self.id,
            "qr_code_id": self.qr_code_id,
            "scan_date": self.scan_date.isoformat() if self.scan_date else None,
            "user_agent": self.user_agent,
            "ip_address": self.ip_address,
            "country": self.country,
            "city": self.city,
            "device_type": self.device_type,
        }

    def __repr__(self):
        return (
            f"<QRAnalytics(id={self.id}, qr_code_id={self.qr_code_id}, "
            f"device='{self.device_type}', scan_date={self.scan_date})>"
        )
