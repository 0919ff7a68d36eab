# backend/utils/io.py
from pathlib import Path
from typing import Optional

ALLOWED_EXTS = {".txt", ".vtt"}


def is_text_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
    mime = (content_type or "").strip().lower()
    ext = Path((filename or "").strip().lower()).suffix
    return mime.startswith("text/") or ext in ALLOWED_EXTS


def strip_nuls(text: str) -> str:
    # Postgres rejects NUL in text columns
    return (text or "").replace("\x00", "")


def decode_transcript_bytes(data: bytes) -> str:
    text = data.decode("utf-8", errors="ignore")
    return strip_nuls(text).lstrip("\ufeff")
