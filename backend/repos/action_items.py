# backend/repos/action_items.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models import ActionItem, Deal


def get_action_items_by_deal_id(db: Session, deal_id: int, user_id: int) -> List[ActionItem]:
    return (
        db.query(ActionItem)
        .filter(ActionItem.deal_id == deal_id, ActionItem.user_id == user_id)
        .order_by(ActionItem.created_at.asc(), ActionItem.id.asc())
        .all()
    )


def get_action_items_by_transcript_id(db: Session, transcript_id: int, user_id: int) -> List[ActionItem]:
    return (
        db.query(ActionItem)
        .join(Deal, Deal.id == ActionItem.deal_id)
        .filter(ActionItem.transcript_id == transcript_id, Deal.user_id == user_id)
        .order_by(ActionItem.created_at.asc(), ActionItem.id.asc())
        .all()
    )


def get_owned_action_item(db: Session, item_id: int, user_id: int) -> Optional[ActionItem]:
    """Ownership goes through the deal the item belongs to."""
    return (
        db.query(ActionItem)
        .join(Deal, Deal.id == ActionItem.deal_id)
        .filter(ActionItem.id == item_id, Deal.user_id == user_id)
        .first()
    )


def create_action_items(db: Session, items: List[Dict[str, Any]]) -> List[ActionItem]:
    """Bulk insert in one transaction. Each dict carries the column values."""
    now = datetime.utcnow()
    rows = [ActionItem(created_at=now, updated_at=now, **it) for it in items]
    try:
        db.add_all(rows)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for r in rows:
        db.refresh(r)
    return rows


def create_action_item(
    db: Session,
    *,
    deal_id: int,
    user_id: int,
    description: str,
    transcript_id: Optional[int] = None,
    is_ai_suggested: bool = False,
) -> ActionItem:
    return create_action_items(db, [{
        "deal_id": deal_id,
        "user_id": user_id,
        "description": description,
        "transcript_id": transcript_id,
        "is_ai_suggested": is_ai_suggested,
    }])[0]


def update_action_item(
    db: Session,
    item: ActionItem,
    *,
    description: Optional[str] = None,
    is_completed: Optional[bool] = None,
) -> ActionItem:
    if description is not None:
        item.description = description
    if is_completed is not None:
        item.is_completed = is_completed
    item.updated_at = datetime.utcnow()
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(item)
    return item


def delete_action_item(db: Session, item: ActionItem) -> None:
    try:
        db.delete(item)
        db.commit()
    except Exception:
        db.rollback()
        raise
