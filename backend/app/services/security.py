"""
Sparkz Backend: Credential & Session Tokens
============================================

What:  Password hashing/verification and bearer-token issue/verification.
How:   passlib CryptContext (bcrypt) for passwords, python-jose for HS-family
       JWTs signed with the configured secret.
Who:   AuthService (signup/login) and the authorization gate in
       app/dependencies.py.

Token format:
    {"sub": "<user id>", "iat": <issued at>, "exp": <iat + TOKEN_TTL_DAYS>}

Contract:
    verify_token() never raises. Malformed input, a bad signature, an
    unexpected algorithm, expiry and a non-integer subject all return None,
    and the gate treats every None the same way.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JOSEError, jwt
from passlib.context import CryptContext

from app.config import settings

logger = logging.getLogger(__name__)


# bcrypt at the configured cost (10 by default). passlib's verify compares
# digests in constant time.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Returns a salted bcrypt hash of ``password``."""
    return pwd_context.hash(password)


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """
    Checks ``password`` against a stored hash.

    A missing or unrecognised hash verifies as False instead of raising, so a
    corrupt row reads as a failed login rather than a 500.
    """
    if not hashed:
        pwd_context.dummy_verify()
        return False
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be identified")
        return False


def dummy_verify() -> None:
    """Burns the same time as a real verify; used when the email is unknown."""
    pwd_context.dummy_verify()


def issue_token(user_id: int, now: Optional[datetime] = None) -> str:
    """
    Mints a signed bearer token for ``user_id``.

    Args:
        user_id: The authenticated user's primary key.
        now: Issue time override (tests use it to mint already-expired tokens).
    """
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(days=settings.token_ttl_days)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: Optional[str]) -> Optional[int]:
    """
    Validates signature and expiry and returns the user id, or None.

    Only the configured algorithm is accepted, which also rejects "none"-alg
    and algorithm-confusion tokens.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JOSEError as e:
        logger.debug("Rejected bearer token: %s", type(e).__name__)
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.isdigit():
        return None
    return int(subject)
