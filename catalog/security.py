"""
Credential primitives: password digests and signed access tokens.

Passwords are hashed with bcrypt. Hashing is deliberately slow, so the async
helpers run it in Starlette's thread pool instead of on the event loop.

Access tokens are HMAC-signed JWTs produced and verified with ``jwcrypto``.
Every verification failure (malformed token, wrong signature, expired or
missing claims) is reported as ``InvalidTokenError``.
"""

import json
import time
from functools import lru_cache
from typing import Any

import bcrypt
from jwcrypto import jwk, jwt
from jwcrypto.common import JWException, base64url_encode
from starlette.concurrency import run_in_threadpool

from catalog.constants import MIN_HMAC_SECRET_BYTES
from catalog.exceptions import InvalidTokenError
from catalog.logging import logger
from catalog.schemas.auth import TokenClaims
from catalog.settings import app_settings


# ============================================================================
# Password hashing
# ============================================================================


def hash_password(password: str, rounds: int | None = None) -> str:
    """
    Hash a password with a fresh salt.

    Args:
        password: Plain text password.
        rounds: bcrypt cost factor. Defaults to ``app_settings.BCRYPT_ROUNDS``.

    Returns:
        The bcrypt digest as text.
    """
    salt = bcrypt.gensalt(rounds or app_settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, digest: str) -> bool:
    """
    Check a plain password against a stored digest.

    Returns:
        True if the password matches, False otherwise (including for
        passwords bcrypt refuses to process).
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), digest.encode("utf-8"))
    except ValueError:
        return False


@lru_cache
def _dummy_digest() -> str:
    return hash_password("dummy-password-for-timing")


async def hash_password_async(password: str) -> str:
    """Hash a password without blocking the event loop."""
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(password: str, digest: str | None) -> bool:
    """
    Verify a password without blocking the event loop.

    When ``digest`` is None (unknown user) the password is still checked
    against a dummy digest, so both failure paths cost the same.
    """
    if digest is None:
        await run_in_threadpool(verify_password, password, _dummy_digest())
        return False
    return await run_in_threadpool(verify_password, password, digest)


# ============================================================================
# Access tokens
# ============================================================================


class TokenManager:
    """
    Sign and verify access tokens.

    Attributes:
        algorithm: HMAC algorithm used for signatures.
        expire_seconds: Token lifetime in seconds.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60 * 24,
    ) -> None:
        minimum = MIN_HMAC_SECRET_BYTES.get(algorithm)
        if minimum is None:
            raise ValueError(f"unsupported signing algorithm {algorithm}")
        if len(secret.encode("utf-8")) < minimum:
            raise ValueError(
                f"secret must be at least {minimum} bytes for {algorithm}"
            )

        self._key = jwk.JWK(
            kty="oct", k=base64url_encode(secret.encode("utf-8"))
        )
        self.algorithm = algorithm
        self.expire_seconds = expire_minutes * 60

    @classmethod
    def from_settings(cls) -> "TokenManager":
        """Build a manager from ``app_settings``."""
        return cls(
            secret=app_settings.JWT_SECRET.get_secret_value(),
            algorithm=app_settings.JWT_ALGORITHM,
            expire_minutes=app_settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    def sign(self, claims: dict[str, Any]) -> str:
        """
        Create a signed token carrying ``claims``.

        ``iat`` and ``exp`` are added automatically.

        Args:
            claims: Claims to embed, e.g. ``{"username": "alice", "id": 1}``.

        Returns:
            Compact serialized JWT.
        """
        now = int(time.time())
        payload = {**claims, "iat": now, "exp": now + self.expire_seconds}
        token = jwt.JWT(header={"alg": self.algorithm}, claims=payload)
        token.make_signed_token(self._key)
        return token.serialize()

    def verify(self, raw_token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Args:
            raw_token: Compact serialized JWT.

        Returns:
            TokenClaims: Decoded and validated claims.

        Raises:
            InvalidTokenError: If the token is malformed, expired, signed
                with another key or lacks the required claims.
        """
        try:
            decoded = jwt.JWT(
                key=self._key,
                jwt=raw_token,
                algs=[self.algorithm],
                check_claims={"exp": None, "id": None, "username": None},
            )
            return TokenClaims.model_validate(json.loads(decoded.claims))
        except jwt.JWTExpired as ex:
            logger.info(f"Rejected expired token: {ex}")
            raise InvalidTokenError("token expired") from ex
        except (JWException, ValueError) as ex:
            logger.info(f"Rejected invalid token: {ex}")
            raise InvalidTokenError("invalid token") from ex
