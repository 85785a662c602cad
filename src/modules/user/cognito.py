"""Cognito access token verification."""

import asyncio
import time
from typing import Any

import aiohttp
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from src.api.core.constants import COGNITO_TOKEN_USE, JWT_ALGORITHM
from src.core.context import CallerIdentity
from src.modules.user.jwt_claims import extract_identity_from_claims
from src.utils.logger import get_logger
from src.utils.settings.auth import CognitoSettings

JWKS_CACHE_SECONDS = 3600


class InvalidTokenError(Exception):
    """Token could not be verified; the caller stays anonymous."""


class CognitoTokenVerifier:
    """Verifies RS256 access tokens against the user pool's JWKS."""

    def __init__(self, settings: CognitoSettings | None = None, logger=None):
        self.settings = settings or CognitoSettings()
        self.logger = logger or get_logger(self.__class__.__name__)
        self._keys: dict[str, dict[str, Any]] = {}
        self._fetched_at = 0.0

    async def fetch_jwks(self) -> list[dict[str, Any]]:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                self.settings.jwks_url,
                timeout=aiohttp.ClientTimeout(
                    total=self.settings.COGNITO_JWKS_TIMEOUT_SECONDS
                ),
            ) as response:
                response.raise_for_status()
                data = await response.json()

        keys = data.get("keys") if isinstance(data, dict) else None
        if not isinstance(keys, list):
            raise ValueError("JWKS response has no key list")
        return keys

    async def _signing_key(self, kid: str) -> dict[str, Any]:
        expired = time.monotonic() - self._fetched_at > JWKS_CACHE_SECONDS
        if kid not in self._keys or expired:
            try:
                keys = await self.fetch_jwks()
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                self.logger.warning("JWKS fetch failed", error=str(e) or type(e).__name__)
                raise InvalidTokenError(f"Could not fetch signing keys: {e!r}") from e
            self._keys = {
                key["kid"]: key
                for key in keys
                if isinstance(key, dict) and key.get("kid")
            }
            self._fetched_at = time.monotonic()

        key = self._keys.get(kid)
        if key is None:
            raise InvalidTokenError("Unknown signing key")
        return key

    async def verify(self, token: str) -> dict[str, Any]:
        """Return the verified claims or raise InvalidTokenError."""
        if not self.settings.is_configured:
            raise InvalidTokenError("Cognito is not configured")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise InvalidTokenError(f"Malformed token: {e}") from e

        key = await self._signing_key(header.get("kid", ""))

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=[JWT_ALGORITHM],
                issuer=self.settings.issuer,
                # Access tokens carry client_id instead of aud
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as e:
            raise InvalidTokenError("Token expired") from e
        except JWTClaimsError as e:
            raise InvalidTokenError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        if claims.get("token_use") != COGNITO_TOKEN_USE:
            raise InvalidTokenError("Not an access token")
        if claims.get("client_id") != self.settings.COGNITO_CLIENT_ID:
            raise InvalidTokenError("Token issued for another client")
        return claims

    async def identify(self, token: str) -> CallerIdentity:
        claims = await self.verify(token)
        return extract_identity_from_claims(claims)
