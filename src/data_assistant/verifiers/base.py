"""
Base Verifier Classes
=====================

Abstract base class and verification chain implementation.
"""

import re
from abc import ABC, abstractmethod

from data_assistant.models import VerificationResult, VerificationStatus

# One pass so whichever comment opens first wins
_COMMENT = re.compile(r"--[^\n]*|/\*.*?\*/", re.DOTALL)


def strip_comments(sql: str) -> str:
    """Remove line and block comments from SQL text."""
    return _COMMENT.sub(" ", sql)


class Verifier(ABC):
    """Base class for all verifiers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this verifier."""
        pass

    @abstractmethod
    def verify(self, sql: str, context: dict) -> VerificationResult:
        """
        Verify the SQL against this verifier's rules.

        Args:
            sql: The SQL query to verify
            context: Additional context shared by the chain

        Returns:
            VerificationResult indicating pass/fail with details
        """
        pass

    def passed(self, message: str) -> VerificationResult:
        return VerificationResult(
            verifier_name=self.name,
            status=VerificationStatus.PASSED,
            message=message,
        )

    def failed(self, message: str, **details) -> VerificationResult:
        return VerificationResult(
            verifier_name=self.name,
            status=VerificationStatus.FAILED,
            message=message,
            details=details,
        )


class VerificationChain:
    """Runs all verifiers in sequence, collecting results."""

    def __init__(self, verifiers: list[Verifier] | None = None) -> None:
        """
        Initialize the verification chain.

        Args:
            verifiers: List of verifiers to run. Defaults to the read-only chain.
        """
        if verifiers is not None:
            self.verifiers = verifiers
        else:
            # Lazy import to avoid circular imports
            from data_assistant.verifiers.safety import (
                FormatVerifier,
                ForbiddenKeywordVerifier,
            )
            from data_assistant.verifiers.statement import (
                ReadOnlyEntryVerifier,
                SingleStatementVerifier,
            )

            self.verifiers = [
                FormatVerifier(),
                ForbiddenKeywordVerifier(),
                SingleStatementVerifier(),
                ReadOnlyEntryVerifier(),
            ]

    def run(self, sql: str, context: dict) -> tuple[bool, list[VerificationResult]]:
        """
        Run all verifiers. Returns (all_passed, results).

        Stops at first failure.

        Args:
            sql: The SQL query to verify
            context: Additional context for verification

        Returns:
            Tuple of (success, list of verification results)
        """
        results = []

        for verifier in self.verifiers:
            result = verifier.verify(sql, context)
            results.append(result)

            if result.status == VerificationStatus.FAILED:
                return False, results

        return True, results
