# backend/services/deal_ai.py
"""
AI tasks on a deal: suggest action items from a transcript, draft a
follow-up email, answer a question. Each one is

    assemble context -> format -> prompt -> one LLM call -> (parse) -> result

and reports failure as a short message with success=False instead of
raising, so request handlers can pass the result straight through.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ContextFormatError, DealContextError, LLMAuthenticationError, LLMError
from ..repos import action_items as action_item_repo
from ..repos import transcripts as transcript_repo
from ..schemas import ActionItemOut, ActionItemScanOut, DealAnswerOut, EmailDraftOut
from .action_item_parser import parse_suggested_items
from .deal_context import (
    DealContextOptions,
    FormatOptions,
    assemble_deal_context,
    format_deal_context_for_llm,
)
from .deal_prompts import (
    ACTION_ITEMS_TEMPLATE,
    DEAL_QA_TEMPLATE,
    FOLLOW_UP_EMAIL_TEMPLATE,
    NOT_IN_CONTEXT_REPLY,
)
from .llm import LLMClient

logger = logging.getLogger("deal_ai")

LLM_AUTH_FAILED = "LLM authentication failed. Please check API key."
DEAL_UNAVAILABLE = "Deal not found or unauthorized."
TRANSCRIPT_UNAVAILABLE = "Transcript not found or unauthorized."


def _failure_message(exc: Exception, default: str) -> str:
    if isinstance(exc, LLMAuthenticationError):
        return LLM_AUTH_FAILED
    if isinstance(exc, LLMError):
        return str(exc) or default
    if isinstance(exc, ContextFormatError):
        return str(exc)
    # context / storage faults: keep internals out of the user message
    return default


# -------------------- Action item suggestions --------------------
def scan_transcript_for_action_items(
    db: Session,
    llm: LLMClient,
    user_id: int,
    deal_id: int,
    transcript_id: int,
) -> ActionItemScanOut:
    default_error = "Failed to scan transcript for action items."
    try:
        ctx = assemble_deal_context(
            db,
            deal_id,
            user_id,
            DealContextOptions(
                transcript_ids=[transcript_id],
                include_contacts=False,
                include_action_items=False,
            ),
        )
        if ctx is None:
            return ActionItemScanOut(success=False, error=DEAL_UNAVAILABLE)
        if not ctx.transcripts:
            return ActionItemScanOut(success=False, error="Transcript not found.")
        if not (ctx.transcripts[0].content or "").strip():
            return ActionItemScanOut(success=True, count=0, error="Transcript content is empty or missing.")

        formatted = format_deal_context_for_llm(ctx, FormatOptions(include_sections=["deal", "transcripts"]))
        prompt = ACTION_ITEMS_TEMPLATE.format(deal_name=ctx.deal.name, context=formatted)

        logger.info("[scan] deal_id=%s transcript_id=%s", deal_id, transcript_id)
        raw = llm.generate(prompt)
        descriptions = parse_suggested_items(raw)
        if not descriptions:
            return ActionItemScanOut(success=True, count=0)

        rows = action_item_repo.create_action_items(db, [
            {
                "deal_id": deal_id,
                "transcript_id": transcript_id,
                "description": d,
                "user_id": user_id,
                "is_ai_suggested": True,
            }
            for d in descriptions
        ])
    except (DealContextError, ContextFormatError, LLMError, SQLAlchemyError) as e:
        logger.error(f"[scan] deal_id={deal_id} transcript_id={transcript_id} failed: {e}")
        return ActionItemScanOut(success=False, error=_failure_message(e, default_error))

    new_items = [ActionItemOut.model_validate(r) for r in rows]
    return ActionItemScanOut(success=True, new_items=new_items, count=len(new_items))


# -------------------- Follow-up email --------------------
def draft_follow_up_email(
    db: Session,
    llm: LLMClient,
    user_id: int,
    transcript_id: int,
) -> EmailDraftOut:
    default_error = "Failed to draft follow-up email."
    try:
        transcript = transcript_repo.get_transcript_by_id(db, transcript_id)
        if transcript is None:
            return EmailDraftOut(success=False, error=TRANSCRIPT_UNAVAILABLE)

        # the rest of the deal goes in too, focused on this one transcript
        ctx = assemble_deal_context(
            db,
            transcript.deal_id,
            user_id,
            DealContextOptions(transcript_ids=[transcript_id]),
        )
        if ctx is None or not ctx.transcripts:
            return EmailDraftOut(success=False, error=TRANSCRIPT_UNAVAILABLE)
        if not (ctx.transcripts[0].content or "").strip():
            return EmailDraftOut(success=False, error="Transcript content is empty.")

        formatted = format_deal_context_for_llm(ctx, FormatOptions(transcript_format="full"))
        prompt = FOLLOW_UP_EMAIL_TEMPLATE.format(file_name=ctx.transcripts[0].file_name, context=formatted)

        logger.info("[email] transcript_id=%s deal_id=%s", transcript_id, ctx.deal.id)
        email_text = llm.generate(prompt)
    except (DealContextError, ContextFormatError, LLMError, SQLAlchemyError) as e:
        logger.error(f"[email] transcript_id={transcript_id} failed: {e}")
        return EmailDraftOut(success=False, error=_failure_message(e, default_error))

    if not (email_text or "").strip():
        return EmailDraftOut(success=False, error="LLM failed to generate email content.")
    return EmailDraftOut(success=True, email_text=email_text.strip())


# -------------------- Q&A --------------------
def answer_deal_question(
    db: Session,
    llm: LLMClient,
    user_id: int,
    deal_id: int,
    question: Optional[str],
) -> DealAnswerOut:
    question = (question or "").strip()
    if not question:
        return DealAnswerOut(success=False, error="Question cannot be empty.")

    default_error = "An unexpected error occurred while trying to get an answer."
    try:
        ctx = assemble_deal_context(db, deal_id, user_id)
        if ctx is None:
            return DealAnswerOut(
                success=False,
                error="Failed to retrieve deal context. The deal may not exist or you may not have permission to access it.",
            )

        formatted = format_deal_context_for_llm(ctx)
        prompt = DEAL_QA_TEMPLATE.format(not_found=NOT_IN_CONTEXT_REPLY, context=formatted, question=question)

        logger.info("[qa] deal_id=%s question_chars=%d", deal_id, len(question))
        answer = llm.generate(prompt)
    except (DealContextError, ContextFormatError, LLMError, SQLAlchemyError) as e:
        logger.error(f"[qa] deal_id={deal_id} failed: {e}")
        return DealAnswerOut(success=False, error=_failure_message(e, default_error))

    if not (answer or "").strip():
        return DealAnswerOut(success=False, error="The AI failed to generate an answer. Please try again.")
    return DealAnswerOut(success=True, answer=answer.strip())
