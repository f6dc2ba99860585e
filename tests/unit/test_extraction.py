"""
Unit Tests for Query Block Extraction
=====================================
"""

from data_assistant.extraction import extract_query, strip_query_blocks
from data_assistant.models import ExtractionStatus


class TestExtractQuery:
    """Tests for locating the delimited query block."""

    def test_single_block(self) -> None:
        text = 'Let me check.\n[SQL_QUERY]\nSELECT COUNT(*) FROM "Participant"\n[/SQL_QUERY]'
        candidate = extract_query(text)
        assert candidate.found
        assert candidate.sql == 'SELECT COUNT(*) FROM "Participant"'

    def test_inline_block(self) -> None:
        candidate = extract_query("[SQL_QUERY]SELECT 1[/SQL_QUERY]")
        assert candidate.sql == "SELECT 1"

    def test_no_block(self) -> None:
        candidate = extract_query("Hello! Ask me about participants or donations.")
        assert candidate.status is ExtractionStatus.ABSENT
        assert candidate.sql is None

    def test_empty_text(self) -> None:
        assert extract_query("").status is ExtractionStatus.ABSENT

    def test_empty_block(self) -> None:
        assert extract_query("[SQL_QUERY]   [/SQL_QUERY]").status is ExtractionStatus.ABSENT

    def test_unterminated_block(self) -> None:
        candidate = extract_query("[SQL_QUERY] SELECT 1")
        assert candidate.status is ExtractionStatus.UNTERMINATED
        assert not candidate.found

    def test_nested_block(self) -> None:
        candidate = extract_query("[SQL_QUERY] SELECT [SQL_QUERY] 1 [/SQL_QUERY]")
        assert candidate.status is ExtractionStatus.NESTED

    def test_first_of_multiple_blocks(self) -> None:
        text = "[SQL_QUERY]SELECT 1[/SQL_QUERY] and [SQL_QUERY]SELECT 2[/SQL_QUERY]"
        assert extract_query(text).sql == "SELECT 1"


class TestStripQueryBlocks:
    """Tests for removing query syntax from user-facing text."""

    def test_removes_complete_blocks(self) -> None:
        text = "Before [SQL_QUERY]SELECT 1[/SQL_QUERY] after"
        assert strip_query_blocks(text) == "Before  after"

    def test_removes_multiple_blocks(self) -> None:
        text = "[SQL_QUERY]SELECT 1[/SQL_QUERY]A[SQL_QUERY]\nSELECT 2\n[/SQL_QUERY]B"
        assert strip_query_blocks(text) == "AB"

    def test_removes_dangling_open_marker_and_tail(self) -> None:
        text = "Here is what I found.\n[SQL_QUERY] SELECT secret"
        assert strip_query_blocks(text) == "Here is what I found."

    def test_removes_stray_close_marker(self) -> None:
        assert strip_query_blocks("Done.[/SQL_QUERY]") == "Done."

    def test_plain_text_untouched(self) -> None:
        assert strip_query_blocks("  There are **156** participants.  ") == "There are **156** participants."
