# utils/qr_store.py
# =============================================================================
# ✅ Speicherlogik für generierte QR-Codes
# - SqlQRStore:      lokale Datenbank (SQLAlchemy)
# - SupabaseQRStore: gehostete Supabase-Datenbank (falls konfiguriert)
# Beide liefern einfache Dictionaries zurück, damit Routen und Engine
# nicht wissen müssen, welches Backend aktiv ist.
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Protocol

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth_utils import get_supabase
from database import get_db
from models.qrcode import QRCodeRecord
from models.qr_analytics import QRAnalytics

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("type", "content", "data", "style", "image_url")
SCAN_FIELDS = ("user_agent", "ip_address", "country", "city", "device_type")
SUMMARY_LIMIT = 10


class QRStore(Protocol):
    def create(self, record: Dict[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]: ...

    def list(self, limit: int = 10, offset: int = 0, user_id: Optional[str] = None) -> List[Dict[str, Any]]: ...

    def get(self, qr_id: str, user_id: Optional[str] = None) -> Optional[Dict[str, Any]]: ...

    def update(self, qr_id: str, updates: Dict[str, Any], user_id: Optional[str] = None) -> Optional[Dict[str, Any]]: ...

    def delete(self, qr_id: str, user_id: Optional[str] = None) -> bool: ...

    def record_scan(self, qr_id: str, scan_data: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]: ...

    def analytics(self, qr_id: str, days: int = 30) -> List[Dict[str, Any]]: ...

    def summary(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]: ...


def _pick(data: Dict[str, Any], keys) -> Dict[str, Any]:
    return {k: data[k] for k in keys if k in data}


def _summary_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return _pick(row, ("id", "type", "scan_count", "created_at", "last_scanned"))


# =============================================================================
# 🗄️ SQLAlchemy
# =============================================================================
class SqlQRStore:
    def __init__(self, db: Session):
        self.db = db

    def _query(self, user_id: Optional[str] = None):
        # ohne Anmeldung nur Codes ohne Besitzer
        query = self.db.query(QRCodeRecord)
        if user_id:
            return query.filter(QRCodeRecord.user_id == user_id)
        return query.filter(QRCodeRecord.user_id.is_(None))

    def _find(self, qr_id: str, user_id: Optional[str] = None) -> Optional[QRCodeRecord]:
        return self._query(user_id).filter(QRCodeRecord.id == qr_id).first()

    def create(self, record: Dict[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]:
        qr = QRCodeRecord(**_pick(record, RECORD_FIELDS), user_id=user_id)
        self.db.add(qr)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(qr)
        logger.info(f"✅ QR-Code gespeichert (ID {qr.id}, type={qr.type}, user={user_id})")
        return qr.to_dict()

    def list(self, limit: int = 10, offset: int = 0, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        rows = (
            self._query(user_id)
            .order_by(QRCodeRecord.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [r.to_dict() for r in rows]

    def get(self, qr_id: str, user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        qr = self._find(qr_id, user_id)
        return qr.to_dict() if qr else None

    def update(self, qr_id: str, updates: Dict[str, Any], user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        qr = self._find(qr_id, user_id)
        if not qr:
            return None
        for key, value in _pick(updates, RECORD_FIELDS).items():
            setattr(qr, key, value)
        qr.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(qr)
        logger.info(f"✏️ QR-Code aktualisiert (ID {qr.id})")
        return qr.to_dict()

    def delete(self, qr_id: str, user_id: Optional[str] = None) -> bool:
        qr = self._find(qr_id, user_id)
        if not qr:
            return False
        self.db.delete(qr)
        self.db.commit()
        logger.info(f"🗑️ QR-Code gelöscht (ID {qr_id})")
        return True

    def record_scan(self, qr_id: str, scan_data: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        # Scans zählen unabhängig vom Besitzer
        qr = self.db.query(QRCodeRecord).filter(QRCodeRecord.id == qr_id).first()
        if not qr:
            return None

        now = datetime.now(timezone.utc)
        scan = QRAnalytics(qr_code_id=qr.id, scan_date=now, **_pick(scan_data or {}, SCAN_FIELDS))
        self.db.add(scan)
        qr.scan_count = (qr.scan_count or 0) + 1
        qr.last_scanned = now
        self.db.commit()
        self.db.refresh(scan)
        return scan.to_dict()

    def analytics(self, qr_id: str, days: int = 30) -> List[Dict[str, Any]]:
        since = datetime.now(timezone.utc) - timedelta(days=days)
        rows = (
            self.db.query(QRAnalytics)
            .filter(QRAnalytics.qr_code_id == qr_id, QRAnalytics.scan_date >= since)
            .order_by(QRAnalytics.scan_date.desc())
            .all()
        )
        return [r.to_dict() for r in rows]

    def summary(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        rows = (
            self._query(user_id)
            .order_by(QRCodeRecord.scan_count.desc(), QRCodeRecord.created_at.desc())
            .limit(SUMMARY_LIMIT)
            .all()
        )
        return [_summary_row(r.to_dict()) for r in rows]


# =============================================================================
# ☁️ Supabase
# =============================================================================
class SupabaseQRStore:
    """Gleiche Operationen gegen die Supabase-Tabellen qr_codes / qr_analytics."""

    def __init__(self, client: Any):
        self.client = client

    def _codes(self):
        return self.client.table("qr_codes")

    @staticmethod
    def _scoped(query, user_id: Optional[str]):
        if user_id:
            return query.eq("user_id", user_id)
        return query.is_("user_id", "null")

    def create(self, record: Dict[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]:
        row = {**_pick(record, RECORD_FIELDS), "user_id": user_id}
        res = self._codes().insert(row).execute()
        stored = res.data[0] if res.data else row
        logger.info(f"✅ QR-Code in Supabase gespeichert (ID {stored.get('id')})")
        return stored

    def list(self, limit: int = 10, offset: int = 0, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = (
            self._codes()
            .select("*")
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
        )
        query = self._scoped(query, user_id)
        return query.execute().data or []

    def get(self, qr_id: str, user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        query = self._codes().select("*").eq("id", qr_id)
        query = self._scoped(query, user_id)
        rows = query.limit(1).execute().data or []
        return rows[0] if rows else None

    def update(self, qr_id: str, updates: Dict[str, Any], user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        changes = {**_pick(updates, RECORD_FIELDS), "updated_at": datetime.now(timezone.utc).isoformat()}
        query = self._codes().update(changes).eq("id", qr_id)
        query = self._scoped(query, user_id)
        rows = query.execute().data or []
        return rows[0] if rows else None

    def delete(self, qr_id: str, user_id: Optional[str] = None) -> bool:
        query = self._codes().delete().eq("id", qr_id)
        query = self._scoped(query, user_id)
        return bool(query.execute().data)

    def record_scan(self, qr_id: str, scan_data: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        known = self._codes().select("id").eq("id", qr_id).limit(1).execute().data
        if not known:
            return None

        row = {
            "qr_code_id": qr_id,
            "scan_date": datetime.now(timezone.utc).isoformat(),
            **_pick(scan_data or {}, SCAN_FIELDS),
        }
        res = self.client.table("qr_analytics").insert(row).execute()
        self.client.rpc("increment_scan_count", {"qr_id": qr_id}).execute()
        return res.data[0] if res.data else row

    def analytics(self, qr_id: str, days: int = 30) -> List[Dict[str, Any]]:
        since = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        res = (
            self.client.table("qr_analytics")
            .select("*")
            .eq("qr_code_id", qr_id)
            .gte("scan_date", since)
            .order("scan_date", desc=True)
            .execute()
        )
        return res.data or []

    def summary(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = (
            self._codes()
            .select("id, type, scan_count, created_at, last_scanned")
            .order("scan_count", desc=True)
            .limit(SUMMARY_LIMIT)
        )
        query = self._scoped(query, user_id)
        return query.execute().data or []


# 🔹 Dependency für FastAPI
def get_qr_store(db: Session = Depends(get_db)) -> QRStore:
    """Supabase, falls konfiguriert – sonst die lokale Datenbank."""
    client = get_supabase()
    if client is not None:
        return SupabaseQRStore(client)
    return SqlQRStore(db)
