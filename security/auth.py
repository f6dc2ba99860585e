"""
API Authentication
==================

API key authentication guarding the chat and health endpoints.
"""

import hashlib
import hmac
from typing import Annotated, Iterable, Optional

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

# API key header name
API_KEY_HEADER = "X-API-Key"


class APIKeyAuth:
    """
    API key authentication handler.

    Keys are held only as SHA-256 digests and compared in constant time.
    """

    def __init__(self, api_keys: Iterable[str] = ()):
        """
        Initialize API key authentication.

        Args:
            api_keys: Plain-text keys accepted by the service
        """
        self._key_hashes = {self._hash_key(key): f"key-{index}" for index, key in enumerate(api_keys, 1)}

    @property
    def enabled(self) -> bool:
        return bool(self._key_hashes)

    async def __call__(self, request: Request, api_key: Optional[str]) -> dict:
        """
        Validate an API key.

        Returns:
            API key metadata if valid

        Raises:
            HTTPException: If authentication fails
        """
        if api_key is None:
            raise HTTPException(
                status_code=401,
                detail={
                    "error": "AuthenticationRequired",
                    "message": f"Missing {API_KEY_HEADER} header",
                },
            )

        key_data = self._validate_key(api_key)
        if key_data is None:
            raise HTTPException(
                status_code=401,
                detail={
                    "error": "InvalidAPIKey",
                    "message": "Invalid API key",
                },
            )

        request.state.api_key_data = key_data
        return key_data

    def _validate_key(self, api_key: str) -> Optional[dict]:
        """Look up a key by digest."""
        candidate = self._hash_key(api_key)
        for key_hash, key_id in self._key_hashes.items():
            if hmac.compare_digest(candidate, key_hash):
                return {"key_id": key_id}
        return None

    @staticmethod
    def _hash_key(api_key: str) -> str:
        """Hash an API key for storage/lookup."""
        return hashlib.sha256(api_key.encode()).hexdigest()


async def verify_api_key(
    request: Request,
    api_key: Annotated[Optional[str], Security(APIKeyHeader(name=API_KEY_HEADER, auto_error=False))] = None,
) -> dict:
    """
    FastAPI dependency for API key verification.

    Uses the ``APIKeyAuth`` handler stored on ``app.state.auth``.

    Usage:
        @router.get("/protected")
        async def protected_route(key_data: dict = Depends(verify_api_key)):
            ...
    """
    return await request.app.state.auth(request, api_key)
