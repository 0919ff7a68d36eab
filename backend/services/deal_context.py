# backend/services/deal_context.py
"""
Deal AI context: gather a deal's related records for one user and render
them as a plain-text block for an LLM prompt.

    ctx = assemble_deal_context(db, deal_id, user_id, DealContextOptions(limit_transcripts=3))
    if ctx is None:
        ...  # deal missing or not owned; the two are not told apart
    text = format_deal_context_for_llm(ctx, FormatOptions(include_sections=["deal", "transcripts"]))

A context is a throwaway snapshot: built per task, never cached, never
mutated after construction.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ContextFormatError, DealContextConsistencyError, DealContextFetchError
from ..repos import action_items as action_item_repo
from ..repos import contacts as contact_repo
from ..repos import deals as deal_repo
from ..repos import transcripts as transcript_repo
from ..schemas import ActionItemOut, ContactWithRole, DealOut, TranscriptOut

logger = logging.getLogger("deal_context")

ContextSection = Literal["deal", "contacts", "transcripts", "action_items"]
TranscriptFormat = Literal["full", "summary", "titles_only"]

# render order is fixed, whatever order the caller lists sections in
ALL_SECTIONS: tuple = ("deal", "contacts", "transcripts", "action_items")

CONTEXT_HEADER = "--- DEAL CONTEXT ---\n\n"
NO_SECTIONS_TEXT = "No relevant context sections were included or available for formatting."
NO_CONTEXT_ERROR = "Error: No deal context provided."
MISSING_DEAL_ERROR = "Error: Deal details missing from context."


# -------------------- Types --------------------
class DealContextOptions(BaseModel):
    include_transcripts: bool = True
    include_contacts: bool = True
    include_action_items: bool = True
    # non-empty -> only these transcripts (still limited to the deal's own)
    transcript_ids: Optional[List[int]] = None
    # applied after newest-first ordering; None or <= 0 means no cap
    limit_transcripts: Optional[int] = None


class DealAIContext(BaseModel):
    deal: Optional[DealOut] = None
    # tuples, so the snapshot cannot be changed in place either
    transcripts: Tuple[TranscriptOut, ...] = ()
    contacts: Tuple[ContactWithRole, ...] = ()
    action_items: Tuple[ActionItemOut, ...] = ()

    class Config:
        frozen = True


class FormatOptions(BaseModel):
    # None -> every section
    include_sections: Optional[List[ContextSection]] = None
    transcript_format: TranscriptFormat = "full"


# -------------------- Assembler --------------------
def assemble_deal_context(
    db: Session,
    deal_id: int,
    user_id: int,
    options: Optional[DealContextOptions] = None,
) -> Optional[DealAIContext]:
    """
    Returns None when the deal does not exist or is not owned by `user_id`.
    Ownership is checked once, here, before any section is read; the section
    accessors below trust that check.

    Raises DealContextConsistencyError if the deal vanishes between the
    ownership probe and the full read, DealContextFetchError for storage
    failures. Neither is retried.
    """
    opts = options or DealContextOptions()

    try:
        if deal_repo.find_deal_by_id_and_user_id(db, deal_id, user_id) is None:
            return None

        deal = deal_repo.get_deal_by_id(db, deal_id)
        if deal is None:
            logger.error("Deal details not found for deal_id=%s even after authorization.", deal_id)
            raise DealContextConsistencyError(f"Deal {deal_id} disappeared after authorization")

        transcripts: List[TranscriptOut] = []
        if opts.include_transcripts:
            if opts.transcript_ids:
                rows = transcript_repo.get_transcripts_by_deal_id_and_ids(db, deal_id, opts.transcript_ids)
            else:
                rows = transcript_repo.get_transcripts_by_deal_id(db, deal_id)
            if opts.limit_transcripts and opts.limit_transcripts > 0:
                rows = rows[: opts.limit_transcripts]
            transcripts = [TranscriptOut.model_validate(t) for t in rows]

        contacts: List[ContactWithRole] = []
        if opts.include_contacts:
            contacts = contact_repo.get_contacts_for_deal(db, deal_id)

        action_items: List[ActionItemOut] = []
        if opts.include_action_items:
            rows = action_item_repo.get_action_items_by_deal_id(db, deal_id, user_id)
            action_items = [ActionItemOut.model_validate(a) for a in rows]

    except SQLAlchemyError as e:
        logger.error("Failed to get deal AI context for deal_id=%s: %s", deal_id, e)
        raise DealContextFetchError("An unexpected error occurred while fetching deal context.") from e

    return DealAIContext(
        deal=DealOut.model_validate(deal),
        transcripts=transcripts,
        contacts=contacts,
        action_items=action_items,
    )


# -------------------- Formatter --------------------
def _calendar_date(value: date) -> str:
    # timestamps are stored as naive UTC; show the server's local calendar day
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone().date().isoformat()
    return value.isoformat()


def _deal_block(deal: DealOut) -> List[str]:
    return [
        "Deal Information:",
        f"  Name: {deal.name}",
        f"  ID: {deal.id}",
        f"  Created At: {_calendar_date(deal.created_at)}",
    ]


def _contacts_block(contacts: Sequence[ContactWithRole]) -> List[str]:
    lines = ["Associated Contacts:"]
    for c in contacts:
        lines += [
            f"  - Name: {c.first_name} {c.last_name}",
            f"    Email: {c.email or 'N/A'}",
            f"    Job Title: {c.job_title or 'N/A'}",
            f"    Role in Deal: {c.role_in_deal or 'N/A'}",
        ]
    return lines


def _transcripts_block(transcripts: Sequence[TranscriptOut], transcript_format: TranscriptFormat) -> List[str]:
    lines = ["Transcripts:"]
    for t in transcripts:
        lines += [
            f"  - File Name: {t.file_name or 'N/A'}",
            f"    Call Date: {_calendar_date(t.call_date) if t.call_date else 'N/A'}",
            f"    Call Time: {t.call_time or 'N/A'}",
        ]
        if transcript_format == "full":
            lines.append(f"    Content: {t.content or 'N/A'}")
        elif transcript_format == "summary":
            # TODO: plug in a transcript summarizer; until then this is the full text
            lines.append(f"    Content (Summary - Full for now): {t.content or 'N/A'}")
        # titles_only: metadata only
    return lines


def _action_items_block(items: Sequence[ActionItemOut]) -> List[str]:
    lines = ["Action Items:"]
    for it in items:
        lines += [
            f"  - Description: {it.description}",
            f"    Status: {'Completed' if it.is_completed else 'Pending'}",
        ]
    return lines


def format_deal_context_for_llm(
    context: Optional[DealAIContext],
    options: Optional[FormatOptions] = None,
) -> str:
    """
    Deterministic: the same (context, options) always renders the same text.
    Transcript content is included verbatim and uncapped in `full` mode.

    Raises ContextFormatError when there is no context, or when the deal
    section is wanted but the deal is missing.
    """
    if context is None:
        raise ContextFormatError(NO_CONTEXT_ERROR)

    opts = options or FormatOptions()
    wanted = set(ALL_SECTIONS if opts.include_sections is None else opts.include_sections)

    if "deal" in wanted and context.deal is None:
        raise ContextFormatError(MISSING_DEAL_ERROR)

    blocks: List[List[str]] = []
    if "deal" in wanted:
        blocks.append(_deal_block(context.deal))
    if "contacts" in wanted and context.contacts:
        blocks.append(_contacts_block(context.contacts))
    if "transcripts" in wanted and context.transcripts:
        blocks.append(_transcripts_block(context.transcripts, opts.transcript_format))
    if "action_items" in wanted and context.action_items:
        blocks.append(_action_items_block(context.action_items))

    if not blocks:
        return NO_SECTIONS_TEXT

    return CONTEXT_HEADER + "".join("\n".join(b) + "\n\n" for b in blocks)
