"""
Verifiers Module
================

Read-only verification chain for generated SQL.
"""

from data_assistant.verifiers.base import Verifier, VerificationChain, strip_comments
from data_assistant.verifiers.safety import (
    FORBIDDEN_KEYWORDS,
    FormatVerifier,
    ForbiddenKeywordVerifier,
)
from data_assistant.verifiers.statement import (
    ReadOnlyEntryVerifier,
    SingleStatementVerifier,
)

__all__ = [
    "Verifier",
    "VerificationChain",
    "strip_comments",
    "FORBIDDEN_KEYWORDS",
    "FormatVerifier",
    "ForbiddenKeywordVerifier",
    "SingleStatementVerifier",
    "ReadOnlyEntryVerifier",
]
