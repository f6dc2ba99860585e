"""
Safety Verifiers
================

Reject malformed input and any statement that could change data, schema or
privileges.
"""

import re

from data_assistant.models import VerificationResult
from data_assistant.verifiers.base import Verifier


FORBIDDEN_KEYWORDS = (
    # data mutation
    "INSERT",
    "UPDATE",
    "DELETE",
    "MERGE",
    # schema mutation
    "DROP",
    "ALTER",
    "CREATE",
    "TRUNCATE",
    # privileges
    "GRANT",
    "REVOKE",
    # procedural
    "EXEC",
    "EXECUTE",
    "CALL",
    "PROCEDURE",
)


class FormatVerifier(Verifier):
    """Rejects anything that is not a non-empty string."""

    @property
    def name(self) -> str:
        return "FormatVerifier"

    def verify(self, sql: str, context: dict) -> VerificationResult:
        if not isinstance(sql, str) or not sql.strip():
            return self.failed("invalid format")
        return self.passed("Query text is present")


class ForbiddenKeywordVerifier(Verifier):
    """Ensures no mutating or procedural keyword appears as a whole word."""

    def __init__(self, keywords: tuple[str, ...] = FORBIDDEN_KEYWORDS) -> None:
        self.keywords = keywords
        self._patterns = [
            (keyword, re.compile(rf"\b{keyword}\b")) for keyword in keywords
        ]

    @property
    def name(self) -> str:
        return "ForbiddenKeywordVerifier"

    def verify(self, sql: str, context: dict) -> VerificationResult:
        """
        Scan the upper-cased text, comment bodies included.

        Args:
            sql: SQL query to validate
            context: Additional context (unused for this verifier)

        Returns:
            VerificationResult naming the first forbidden keyword found
        """
        upper = sql.upper()
        for keyword, pattern in self._patterns:
            if pattern.search(upper):
                return self.failed(f"forbidden keyword: {keyword}", keyword=keyword)

        return self.passed("No forbidden keywords detected")
