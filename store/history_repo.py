from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from .database import SessionLocal
from .models import IsochroneRecord


def _summary(record: IsochroneRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "kind": record.kind,
        "description": record.description,
        "created_at": record.created_at.isoformat(),
        "params": record.params,
    }


class HistoryRepo:
    def create_record(self,
                      polygon: Dict[str, Any],
                      params: Optional[Dict[str, Any]] = None,
                      kind: str = "isochrone",
                      description: str = "") -> int:
        """
        Store an isochrone result (or an imported layer) and return its id.
        """
        session: Session = SessionLocal()
        try:
            record = IsochroneRecord(
                kind=kind,
                params=params,
                polygon=polygon,
                description=description,
                created_at=datetime.utcnow()
            )
            session.add(record)
            session.commit()
            return record.id
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_list(self, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Latest records first (metadata only).
        """
        session: Session = SessionLocal()
        try:
            records = session.query(IsochroneRecord)\
                .order_by(desc(IsochroneRecord.created_at), desc(IsochroneRecord.id))\
                .limit(limit)\
                .all()
            return [_summary(r) for r in records]
        finally:
            session.close()

    def get_detail(self, record_id: int) -> Optional[Dict[str, Any]]:
        session: Session = SessionLocal()
        try:
            record = session.query(IsochroneRecord).filter_by(id=record_id).first()
            if not record:
                return None
            detail = _summary(record)
            detail["polygon"] = record.polygon
            detail["narrative"] = record.narrative
            return detail
        finally:
            session.close()

    def attach_narrative(self, record_id: int, narrative: str) -> bool:
        session: Session = SessionLocal()
        try:
            rows = session.query(IsochroneRecord)\
                .filter_by(id=record_id)\
                .update({"narrative": narrative})
            session.commit()
            return rows > 0
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def delete_record(self, record_id: int) -> bool:
        session: Session = SessionLocal()
        try:
            rows = session.query(IsochroneRecord).filter_by(id=record_id).delete()
            session.commit()
            return rows > 0
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def clear_all(self) -> int:
        session: Session = SessionLocal()
        try:
            rows = session.query(IsochroneRecord).delete()
            session.commit()
            return rows
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

history_repo = HistoryRepo()
