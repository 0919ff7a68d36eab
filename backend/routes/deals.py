# backend/routes/deals.py
from __future__ import annotations

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..config import settings
from ..db import get_db
from ..models import User
from ..repos import deals as deal_repo
from ..repos import transcripts as transcript_repo
from ..schemas import DealCreate, DealOut, DealRename, DealWithCountOut, TranscriptOut
from ..utils.io import decode_transcript_bytes, is_text_upload

logger = logging.getLogger("routes.deals")

router = APIRouter(prefix="/api/deals", tags=["deals"])


# ---------- Helpers ----------
def owned_deal_or_404(db: Session, deal_id: int, user: User):
    deal = deal_repo.get_owned_deal(db, deal_id, user.id)
    if not deal:
        # same answer for "missing" and "not yours"
        raise HTTPException(404, "Deal not found")
    return deal


# ---------- Deals ----------
@router.post("", response_model=DealOut, status_code=201)
def create_deal(body: DealCreate, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    name = body.name.strip()
    if not name:
        raise HTTPException(400, "Deal name cannot be empty.")
    return deal_repo.create_deal(db, name=name, user_id=current.id)


@router.get("", response_model=List[DealWithCountOut])
def list_deals(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return [
        DealWithCountOut(**DealOut.model_validate(d).model_dump(), transcript_count=n)
        for d, n in deal_repo.get_deals_by_user_id(db, current.id)
    ]


@router.get("/{deal_id}", response_model=DealOut)
def get_deal(deal_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return owned_deal_or_404(db, deal_id, current)


@router.patch("/{deal_id}", response_model=DealOut)
def rename_deal(
    deal_id: int,
    body: DealRename,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    name = body.name.strip()
    if not name:
        raise HTTPException(400, "Deal name cannot be empty.")
    if len(name) > 255:
        raise HTTPException(400, "Deal name cannot exceed 255 characters.")
    deal = owned_deal_or_404(db, deal_id, current)
    return deal_repo.update_deal_name(db, deal, name)


@router.delete("/{deal_id}", status_code=204)
def delete_deal(deal_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    deal = owned_deal_or_404(db, deal_id, current)
    deal_repo.delete_deal(db, deal)
    return Response(status_code=204)


# ---------- Transcripts ----------
@router.post("/{deal_id}/transcripts", response_model=TranscriptOut, status_code=201)
async def upload_transcript(
    deal_id: int,
    file: UploadFile = File(...),
    call_date: date = Form(...),
    call_time: str = Form(..., pattern=r"^\d{2}:\d{2}$"),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    owned_deal_or_404(db, deal_id, current)

    if not is_text_upload(file.filename, file.content_type):
        raise HTTPException(400, "Please upload a .txt or .vtt file")

    data = await file.read()
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(400, f"File too large (>{settings.MAX_UPLOAD_BYTES} bytes)")

    content = decode_transcript_bytes(data)
    if not content.strip():
        raise HTTPException(400, "File appears to be empty")

    rec = transcript_repo.create_transcript(
        db,
        deal_id=deal_id,
        file_name=file.filename or "transcript.txt",
        content=content,
        call_date=call_date,
        call_time=call_time,
    )
    logger.info("[upload_transcript] saved t.id=%s deal_id=%s file=%s", rec.id, deal_id, rec.file_name)
    return rec


@router.get("/{deal_id}/transcripts", response_model=List[TranscriptOut])
def list_transcripts(deal_id: int, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    owned_deal_or_404(db, deal_id, current)
    return transcript_repo.get_transcripts_by_deal_id(db, deal_id)


@router.get("/{deal_id}/transcripts/{transcript_id}", response_model=TranscriptOut)
def get_transcript(
    deal_id: int,
    transcript_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    owned_deal_or_404(db, deal_id, current)
    t = transcript_repo.get_transcript_by_id(db, transcript_id)
    if not t or t.deal_id != deal_id:
        raise HTTPException(404, "Transcript not found")
    return t


@router.delete("/{deal_id}/transcripts/{transcript_id}", status_code=204)
def delete_transcript(
    deal_id: int,
    transcript_id: int,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    owned_deal_or_404(db, deal_id, current)
    t = transcript_repo.get_transcript_by_id(db, transcript_id)
    if not t or t.deal_id != deal_id:
        raise HTTPException(404, "Transcript not found")
    transcript_repo.delete_transcript(db, t)
    return Response(status_code=204)
