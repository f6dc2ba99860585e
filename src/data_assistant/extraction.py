"""
Query Block Extraction
======================

Locates the delimited query block in model output and scrubs query syntax
from text shown to users.

Grammar::

    text   := prose* block? prose*
    block  := OPEN sql CLOSE
    sql    := any text without OPEN or CLOSE

Only the first block is used. An opening marker with no closing marker is
unterminated; a second opening marker before the closing one is nested.
Both are rejected.
"""

import re

from data_assistant.models import CandidateQuery, ExtractionStatus

OPEN_MARKER = "[SQL_QUERY]"
CLOSE_MARKER = "[/SQL_QUERY]"

_BLOCK = re.compile(re.escape(OPEN_MARKER) + r".*?" + re.escape(CLOSE_MARKER), re.DOTALL)


def extract_query(text: str) -> CandidateQuery:
    """Return the first delimited query block in ``text``."""
    if not text:
        return CandidateQuery(ExtractionStatus.ABSENT)

    start = text.find(OPEN_MARKER)
    if start == -1:
        return CandidateQuery(ExtractionStatus.ABSENT)

    body_start = start + len(OPEN_MARKER)
    end = text.find(CLOSE_MARKER, body_start)
    if end == -1:
        return CandidateQuery(ExtractionStatus.UNTERMINATED)

    body = text[body_start:end]
    if OPEN_MARKER in body:
        return CandidateQuery(ExtractionStatus.NESTED)

    sql = body.strip()
    if not sql:
        return CandidateQuery(ExtractionStatus.ABSENT)
    return CandidateQuery(ExtractionStatus.FOUND, sql)


def strip_query_blocks(text: str) -> str:
    """Remove query blocks and stray markers so no query syntax is shown."""
    cleaned = _BLOCK.sub("", text or "")

    # An unterminated block runs to the end of the text
    dangling = cleaned.find(OPEN_MARKER)
    if dangling != -1:
        cleaned = cleaned[:dangling]

    return cleaned.replace(CLOSE_MARKER, "").strip()
