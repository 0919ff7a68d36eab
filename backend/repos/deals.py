# backend/repos/deals.py
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Deal, Transcript


def find_deal_by_id_and_user_id(db: Session, deal_id: int, user_id: int) -> Optional[int]:
    """Ownership probe. Returns the deal id only, not the record."""
    row = (
        db.query(Deal.id)
        .filter(Deal.id == deal_id, Deal.user_id == user_id)
        .first()
    )
    return row[0] if row else None


def get_deal_by_id(db: Session, deal_id: int) -> Optional[Deal]:
    return db.get(Deal, deal_id)


def get_owned_deal(db: Session, deal_id: int, user_id: int) -> Optional[Deal]:
    deal = db.get(Deal, deal_id)
    if not deal or deal.user_id != user_id:
        return None
    return deal


def get_deals_by_user_id(db: Session, user_id: int) -> List[Tuple[Deal, int]]:
    counts = (
        db.query(Transcript.deal_id.label("deal_id"), func.count(Transcript.id).label("n"))
        .group_by(Transcript.deal_id)
        .subquery()
    )
    rows = (
        db.query(Deal, func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.deal_id == Deal.id)
        .filter(Deal.user_id == user_id)
        .order_by(Deal.created_at.desc(), Deal.id.desc())
        .all()
    )
    return [(deal, int(n)) for deal, n in rows]


def create_deal(db: Session, name: str, user_id: int) -> Deal:
    now = datetime.utcnow()
    deal = Deal(name=name, user_id=user_id, created_at=now, updated_at=now)
    try:
        db.add(deal)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(deal)
    return deal


def update_deal_name(db: Session, deal: Deal, name: str) -> Deal:
    deal.name = name
    deal.updated_at = datetime.utcnow()
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(deal)
    return deal


def delete_deal(db: Session, deal: Deal) -> None:
    # transcripts, contact links and action items go with it (ORM cascade)
    try:
        db.delete(deal)
        db.commit()
    except Exception:
        db.rollback()
        raise
