"""
Security Module
===============

Authentication components.
"""

from security.auth import APIKeyAuth, verify_api_key

__all__ = [
    "APIKeyAuth",
    "verify_api_key",
]
