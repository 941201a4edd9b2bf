"""Token Codec — python-jose encode/decode for identity and secure-file tokens.

Invariants:
    - Identity tokens must carry an "email" claim; it is returned lowercased
    - File tokens are typed (typ="file") and always expire
    - Any signature/expiry/shape failure maps to a PecupError (401 identity, 403 file)

Design Decisions:
    - HS256 shared secret: tokens are minted by the upstream identity provider
      and by this API itself, never by third parties
    - Secure URLs are signed JWTs instead of opaque DB rows: nothing to clean up
      after expiry, verification is stateless
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt

from pecup.core.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

FILE_TOKEN_TYPE = "file"


def create_identity_token(
    email: str,
    secret: str,
    algorithm: str = "HS256",
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Mint an identity token (development tooling and tests)."""
    payload = {
        "email": email.lower(),
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_identity_token(token: str, secret: str, algorithm: str = "HS256") -> str:
    """Verify a bearer token and return the caller's email."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.info(f"Rejected identity token: {e}")
        raise UnauthorizedError("Invalid or expired token")
    email = payload.get("email")
    if not isinstance(email, str) or not email.strip():
        raise UnauthorizedError("Invalid token payload")
    return email.strip().lower()


def create_file_token(
    resource_id: UUID,
    url: str,
    secret: str,
    ttl_seconds: int,
    algorithm: str = "HS256",
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """Sign a short-lived token pointing at a resource's stored URL."""
    issued = now or datetime.now(timezone.utc)
    expires_at = issued + timedelta(seconds=ttl_seconds)
    payload = {
        "typ": FILE_TOKEN_TYPE,
        "sub": str(resource_id),
        "url": url,
        "exp": expires_at,
    }
    return jwt.encode(payload, secret, algorithm=algorithm), expires_at


def decode_file_token(token: str, secret: str, algorithm: str = "HS256") -> dict:
    """Return {"resource_id", "url"} for a valid, unexpired file token."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.info(f"Rejected file token: {e}")
        raise ForbiddenError("Invalid or expired token")
    if payload.get("typ") != FILE_TOKEN_TYPE or not payload.get("url"):
        raise ForbiddenError("Invalid or expired token")
    return {"resource_id": payload.get("sub"), "url": payload["url"]}
