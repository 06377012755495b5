# =============================================================================
# 📦 QRCodeRecord Model – gespeicherter QR-Code (SQLAlchemy 2.0)
# =============================================================================

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TYPE_CHECKING

from sqlalchemy import String, Text, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from database import Base

if TYPE_CHECKING:
    from models.qr_analytics import QRAnalytics


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QRCodeRecord(Base):
    """
    Momentaufnahme einer erfolgreichen Generierung:
    Typ, fertiger Inhalt, Formularfelder, Stil und Bildreferenz.
    Nach dem Anlegen ändert sich normalerweise nur noch der Scan-Zähler.
    """
    __tablename__ = "qr_codes"

    # ---------------------------------------------------------------------
    # 🧾 Basisattribute
    # ---------------------------------------------------------------------
    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # TEXT, URL, WIFI, …
    content: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    style: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    image_url: Mapped[Optional[str]] = mapped_column(String(255))

    user_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)

    # ---------------------------------------------------------------------
    # 📊 Scans
    # ---------------------------------------------------------------------
    scan_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_scanned: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    scans: Mapped[list["QRAnalytics"]] = relationship(
        "QRAnalytics",
        back_populates="qr",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # ---------------------------------------------------------------------
    # 🕒 Zeitstempel
    # ---------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=utc_now
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "data": self.data or {},
            "style": self.style or {},
            "image_url": self.image_url,
            "user_id": self.user_id,
            "scan_count": self.scan_count or 0,
            "last_scanned": self.last_scanned.isoformat() if self.last_scanned else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<QRCodeRecord(id={self.id}, type='{self.type}', scans={self.scan_count})>"
