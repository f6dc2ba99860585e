"""
Query Validator
===============

Pure read-only check applied to every candidate query before execution.
"""

import re

from data_assistant.models import ValidationOutcome, VerificationStatus
from data_assistant.verifiers.base import VerificationChain

_TRAILING_TERMINATOR = re.compile(r";\s*$")

_default_chain = VerificationChain()


def normalize(sql: str) -> str:
    """Trim and drop one trailing terminator, keeping the original casing."""
    return _TRAILING_TERMINATOR.sub("", sql.strip(), count=1).rstrip()


def validate(sql, chain: VerificationChain | None = None) -> ValidationOutcome:
    """
    Validate that ``sql`` is a single read-only statement.

    Never raises: malformed input yields an invalid outcome with a reason.

    Args:
        sql: Candidate query text
        chain: Verification chain to run (defaults to the read-only chain)

    Returns:
        ValidationOutcome with the normalized SQL when valid
    """
    passed, results = (chain or _default_chain).run(sql, {})
    if not passed:
        failed = next(r for r in results if r.status == VerificationStatus.FAILED)
        return ValidationOutcome(valid=False, reason=failed.message)

    return ValidationOutcome(valid=True, sql=normalize(sql))
