"""
Statement Verifiers
===================

Structural checks: exactly one statement, starting with a read-only keyword.
"""

import re

from data_assistant.models import VerificationResult
from data_assistant.verifiers.base import Verifier, strip_comments

_TRAILING_TERMINATOR = re.compile(r";\s*$")
_READ_ONLY_ENTRY = re.compile(r"^(SELECT|WITH)\b")


class SingleStatementVerifier(Verifier):
    """Rejects statement stacking; one trailing terminator is tolerated."""

    @property
    def name(self) -> str:
        return "SingleStatementVerifier"

    def verify(self, sql: str, context: dict) -> VerificationResult:
        body = _TRAILING_TERMINATOR.sub("", strip_comments(sql).strip(), count=1)
        if ";" in body:
            return self.failed("multiple statements not allowed")
        return self.passed("Single statement")


class ReadOnlyEntryVerifier(Verifier):
    """Requires the query to open with SELECT or WITH."""

    @property
    def name(self) -> str:
        return "ReadOnlyEntryVerifier"

    def verify(self, sql: str, context: dict) -> VerificationResult:
        head = strip_comments(sql).strip().upper()
        if not _READ_ONLY_ENTRY.match(head):
            return self.failed("must start with SELECT or WITH")
        return self.passed("Query starts with a read-only keyword")
