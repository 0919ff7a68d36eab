# backend/routes/contacts.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..db import get_db
from ..models import User
from ..repos import contacts as contact_repo
from ..schemas import ContactLinkOut, ContactToDealIn, ContactWithRole
from .deals import owned_deal_or_404

router = APIRouter(prefix="/api/deals/{deal_id}/contacts", tags=["contacts"])


@router.post("", response_model=ContactLinkOut)
def add_contact_to_deal(
    deal_id: int,
    body: ContactToDealIn,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    """
    Reuses the user's existing contact with the same email (otherwise creates
    it), then links it to the deal. An existing link just gets its role updated.
    """
    owned_deal_or_404(db, deal_id, current)
    email = body.email.strip().lower()
    role = (body.role_in_deal or "").strip() or None

    contact = contact_repo.find_contact_by_email_and_user_id(db, email, current.id)
    if contact is None:
        try:
            contact = contact_repo.create_contact(
                db,
                first_name=body.first_name.strip(),
                last_name=body.last_name.strip(),
                email=email,
                job_title=(body.job_title or "").strip() or None,
                user_id=current.id,
            )
        except IntegrityError:
            raise HTTPException(409, "A contact with this email already exists.")

    link = contact_repo.link_contact_to_deal(db, deal_id, contact.id, role)
    return ContactLinkOut(contact_id=contact.id, deal_id=deal_id, role_in_deal=link.role_in_deal)


@router.get("", response_model=List[ContactWithRole])
def list_contacts_for_deal(deal_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    owned_deal_or_404(db, deal_id, current)
    return contact_repo.get_contacts_for_deal(db, deal_id)


@router.delete("/{contact_id}", status_code=204)
def remove_contact_from_deal(
    deal_id: int,
    contact_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    owned_deal_or_404(db, deal_id, current)
    if not contact_repo.remove_contact_from_deal(db, deal_id, contact_id):
        raise HTTPException(404, "Association not found or already removed.")
    return Response(status_code=204)
