# backend/repos/transcripts.py
from datetime import date, datetime
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..models import ActionItem, Transcript


def _newest_first(q):
    return q.order_by(Transcript.created_at.desc(), Transcript.id.desc())


def get_transcripts_by_deal_id(db: Session, deal_id: int) -> List[Transcript]:
    return _newest_first(db.query(Transcript).filter(Transcript.deal_id == deal_id)).all()


def get_transcripts_by_deal_id_and_ids(db: Session, deal_id: int, transcript_ids: Sequence[int]) -> List[Transcript]:
    # ids that belong to another deal are silently dropped
    return _newest_first(
        db.query(Transcript).filter(
            Transcript.deal_id == deal_id,
            Transcript.id.in_(list(transcript_ids)),
        )
    ).all()


def get_transcript_by_id(db: Session, transcript_id: int) -> Optional[Transcript]:
    return db.get(Transcript, transcript_id)


def create_transcript(
    db: Session,
    deal_id: int,
    file_name: str,
    content: str,
    call_date: date,
    call_time: str,
) -> Transcript:
    now = datetime.utcnow()
    rec = Transcript(
        deal_id=deal_id,
        file_name=file_name,
        content=content,
        call_date=call_date,
        call_time=call_time,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(rec)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(rec)
    return rec


def delete_transcript(db: Session, transcript: Transcript) -> None:
    try:
        # action items outlive their source transcript
        (
            db.query(ActionItem)
            .filter(ActionItem.transcript_id == transcript.id)
            .update({ActionItem.transcript_id: None}, synchronize_session="fetch")
        )
        db.delete(transcript)
        db.commit()
    except Exception:
        db.rollback()
        raise
