# backend/routes/action_items.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..db import get_db
from ..models import User
from ..repos import action_items as action_item_repo
from ..repos import transcripts as transcript_repo
from ..schemas import ActionItemCreate, ActionItemOut, ActionItemUpdate
from .deals import owned_deal_or_404

router = APIRouter(prefix="/api", tags=["action-items"])


@router.get("/deals/{deal_id}/action-items", response_model=List[ActionItemOut])
def list_deal_action_items(deal_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    owned_deal_or_404(db, deal_id, current)
    return action_item_repo.get_action_items_by_deal_id(db, deal_id, current.id)


@router.get("/transcripts/{transcript_id}/action-items", response_model=List[ActionItemOut])
def list_transcript_action_items(
    transcript_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    t = transcript_repo.get_transcript_by_id(db, transcript_id)
    if not t:
        raise HTTPException(404, "Transcript not found")
    # unowned looks the same as missing
    owned_deal_or_404(db, t.deal_id, current)
    return action_item_repo.get_action_items_by_transcript_id(db, transcript_id, current.id)


@router.post("/deals/{deal_id}/action-items", response_model=ActionItemOut, status_code=201)
def add_action_item(
    deal_id: int,
    body: ActionItemCreate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    owned_deal_or_404(db, deal_id, current)
    description = body.description.strip()
    if not description:
        raise HTTPException(400, "Description cannot be empty.")

    if body.transcript_id is not None:
        t = transcript_repo.get_transcript_by_id(db, body.transcript_id)
        if not t or t.deal_id != deal_id:
            raise HTTPException(400, "Transcript does not belong to this deal.")

    return action_item_repo.create_action_item(
        db,
        deal_id=deal_id,
        user_id=current.id,
        description=description,
        transcript_id=body.transcript_id,
        is_ai_suggested=False,
    )


@router.patch("/action-items/{item_id}", response_model=ActionItemOut)
def update_action_item(
    item_id: int,
    body: ActionItemUpdate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    if body.description is None and body.is_completed is None:
        raise HTTPException(400, "Nothing to update.")
    description = body.description.strip() if body.description is not None else None
    if description is not None and not description:
        raise HTTPException(400, "Description cannot be empty.")

    item = action_item_repo.get_owned_action_item(db, item_id, current.id)
    if not item:
        raise HTTPException(404, "Action item not found")
    return action_item_repo.update_action_item(db, item, description=description, is_completed=body.is_completed)


@router.delete("/action-items/{item_id}", status_code=204)
def delete_action_item(item_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    item = action_item_repo.get_owned_action_item(db, item_id, current.id)
    if not item:
        raise HTTPException(404, "Action item not found")
    action_item_repo.delete_action_item(db, item)
    return Response(status_code=204)
