# backend/repos/contacts.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models import Contact, DealContact
from ..schemas import ContactWithRole


def get_contacts_for_deal(db: Session, deal_id: int) -> List[ContactWithRole]:
    """
    Contacts linked to a deal, with the deal-specific role joined in.
    Callers are expected to have checked deal ownership already.
    """
    rows = (
        db.query(Contact, DealContact.role_in_deal)
        .join(DealContact, DealContact.contact_id == Contact.id)
        .filter(DealContact.deal_id == deal_id)
        .order_by(Contact.last_name, Contact.first_name, Contact.id)
        .all()
    )
    return [
        ContactWithRole(
            id=c.id,
            first_name=c.first_name,
            last_name=c.last_name,
            email=c.email,
            job_title=c.job_title,
            role_in_deal=role,
        )
        for c, role in rows
    ]


def find_contact_by_email_and_user_id(db: Session, email: str, user_id: int) -> Optional[Contact]:
    return (
        db.query(Contact)
        .filter(Contact.email == email, Contact.user_id == user_id)
        .first()
    )


def create_contact(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    job_title: Optional[str],
    user_id: int,
) -> Contact:
    now = datetime.utcnow()
    c = Contact(
        first_name=first_name,
        last_name=last_name,
        email=email,
        job_title=job_title,
        user_id=user_id,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(c)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(c)
    return c


def find_deal_contact(db: Session, deal_id: int, contact_id: int) -> Optional[DealContact]:
    return db.get(DealContact, (deal_id, contact_id))


def link_contact_to_deal(db: Session, deal_id: int, contact_id: int, role_in_deal: Optional[str]) -> DealContact:
    """Create the association, or update its role if it already exists."""
    link = find_deal_contact(db, deal_id, contact_id)
    try:
        if link is None:
            link = DealContact(deal_id=deal_id, contact_id=contact_id, role_in_deal=role_in_deal)
            db.add(link)
        elif link.role_in_deal != role_in_deal:
            link.role_in_deal = role_in_deal
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(link)
    return link


def remove_contact_from_deal(db: Session, deal_id: int, contact_id: int) -> bool:
    link = find_deal_contact(db, deal_id, contact_id)
    if link is None:
        return False
    try:
        db.delete(link)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return True
