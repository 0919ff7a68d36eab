# backend/routes/deal_ai.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..db import get_db
from ..models import User
from ..schemas import ActionItemScanOut, DealAnswerOut, DealQuestionIn, EmailDraftOut
from ..services.deal_ai import answer_deal_question, draft_follow_up_email, scan_transcript_for_action_items
from ..services.llm import LLMClient, get_llm

router = APIRouter(prefix="/api", tags=["ai"])


@router.post("/deals/{deal_id}/transcripts/{transcript_id}/scan-action-items", response_model=ActionItemScanOut)
def scan_action_items(
    deal_id: int,
    transcript_id: int,
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
    current: User = Depends(get_current_user),
):
    return scan_transcript_for_action_items(db, llm, current.id, deal_id, transcript_id)


@router.post("/transcripts/{transcript_id}/follow-up-email", response_model=EmailDraftOut)
def follow_up_email(
    transcript_id: int,
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
    current: User = Depends(get_current_user),
):
    return draft_follow_up_email(db, llm, current.id, transcript_id)


@router.post("/deals/{deal_id}/ask", response_model=DealAnswerOut)
def ask_deal(
    deal_id: int,
    body: DealQuestionIn,
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
    current: User = Depends(get_current_user),
):
    return answer_deal_question(db, llm, current.id, deal_id, body.question)
