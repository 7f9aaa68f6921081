"""
Postboard Backend — Credential Service
========================================

What:  Password hashing and bearer-token issuance/verification.
How:   bcrypt for salted, cost-factored password hashes; PyJWT (HS256 by
       default) for signed tokens carrying the user id and email with a fixed
       lifetime (5 hours by default).
Who:   UserService (registration, login) and AuthMiddleware (every request).

Token claims:
    {
        "userId": "<uuid>",
        "email": "a@x.com",
        "iat": 1700000000,
        "exp": 1700018000
    }

decode_token() never raises for a bad token. It reports invalidity by
returning None and leaves the decision to reject to the operation that needs
an identity.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from postboard.config import settings
from postboard.schemas.auth import Identity

logger = logging.getLogger(__name__)


class CredentialService:
    """
    Stateless credential helper.

    The signing secret, algorithm, lifetime and bcrypt cost are read from
    settings unless overridden (tests pass explicit values).
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expires_in: Optional[timedelta] = None,
        rounds: Optional[int] = None,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in
        self._rounds = rounds

    @property
    def secret(self) -> str:
        return self._secret if self._secret is not None else settings.jwt_secret

    @property
    def algorithm(self) -> str:
        return self._algorithm or settings.jwt_algorithm

    @property
    def expires_in(self) -> timedelta:
        return self._expires_in or timedelta(hours=settings.jwt_expire_hours)

    # ── Passwords ─────────────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        """One-way salted bcrypt hash; returned as text for storage."""
        rounds = self._rounds or settings.bcrypt_rounds
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
        return hashed.decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """False for a wrong password and for a hash bcrypt cannot parse."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is malformed")
            return False

    # ── Tokens ────────────────────────────────────────────────────────────

    def issue_token(self, identity: Identity) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": identity.user_id,
            "email": identity.email,
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Optional[Identity]:
        """
        Verify signature and expiry.

        Returns:
            The Identity carried by the token, or None when the token is
            expired, tampered, signed with another secret or malformed, or when
            the configured secret cannot verify anything.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "userId"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected invalid token: %s", str(e))
            return None
        except jwt.PyJWTError as e:
            # InvalidKeyError: no usable JWT_SECRET configured
            logger.warning("Token could not be verified: %s", str(e))
            return None

        return Identity(user_id=str(payload["userId"]), email=str(payload.get("email", "")))


credential_service = CredentialService()
