# backend/services/action_item_parser.py
from __future__ import annotations

import json
import logging
import re
from typing import Callable, List, Optional

logger = logging.getLogger("action_item_parser")

NO_ITEMS_REPLY = "no action items found."

_FENCE_OPEN = re.compile(r"^```[\w+.-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```$")
_LEADING_BULLET = re.compile(r"^[\s*-]+")

Rule = Callable[[str], Optional[List[str]]]


def strip_code_fence(text: str) -> str:
    """Drop a ```lang ... ``` wrapper if the model added one."""
    s = (text or "").strip()
    s = _FENCE_OPEN.sub("", s, count=1)
    s = _FENCE_CLOSE.sub("", s, count=1)
    return s.strip()


# -------------------- Rules --------------------
# Each rule returns None when it does not apply, so the next one gets a turn.

def json_list_rule(text: str) -> Optional[List[str]]:
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        # malformed or absurdly nested: let the line rules have it
        return None
    if not isinstance(parsed, list) or not all(isinstance(x, str) for x in parsed):
        return None
    return [x for x in parsed if x.strip()]


def bullet_lines_rule(text: str) -> Optional[List[str]]:
    if "\n" not in text and "* " not in text and "- " not in text:
        return None
    lines = [_LEADING_BULLET.sub("", ln).strip() for ln in text.split("\n")]
    return [ln for ln in lines if ln]


def single_item_rule(text: str) -> Optional[List[str]]:
    if not text or text.lower() == NO_ITEMS_REPLY:
        return None
    return [text]


RULES: tuple = (json_list_rule, bullet_lines_rule, single_item_rule)


def parse_suggested_items(raw_text: str) -> List[str]:
    """
    Best-effort conversion of an LLM reply into action item descriptions.

    Tries, in order: a JSON array of strings, a bulleted / one-per-line list,
    the whole reply as one item. "No action items found." or an empty reply
    yields []. Never raises; a malformed reply only shrinks the result.
    """
    text = strip_code_fence(raw_text)
    for rule in RULES:
        items = rule(text)
        if items is None:
            continue
        if rule is not json_list_rule:
            logger.warning("[parse] reply was not a JSON list; used %s -> %d item(s)", rule.__name__, len(items))
        return items
    return []
