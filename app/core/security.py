"""Security related functions: password hashing and bearer tokens."""

import hashlib
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import bcrypt
import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from app.core.config import settings
from app.exceptions.auth import TokenExpiredError, TokenInvalidError

ACCESS_TOKEN_PURPOSE = "access"
PASSWORD_RESET_PURPOSE = "password_reset"


def password_fingerprint(password_hash: str) -> str:
    """Short digest of a stored hash, embedded in reset tokens."""
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()[:16]


def hash_password(password: str) -> str:
    """Hash a plain-text password with bcrypt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain-text password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False


class TokenManager:
    """
    Issues and verifies the signed JWTs used as bearer credentials.

    Access tokens carry the user id in ``sub`` and stay valid for
    ``settings.access_token_expire_days``. Password reset tokens carry a
    distinct ``purpose`` claim so one can never be replayed as the other.

    :ivar secret_key: HMAC key used to sign tokens.
    :type secret_key: str
    :ivar algorithm: JWT signing algorithm.
    :type algorithm: str
    """

    def __init__(self, secret_key: str | None = None, algorithm: str | None = None):
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm

    def create_access_token(self, user_id: UUID, now: datetime | None = None) -> str:
        return self._encode(
            user_id,
            ACCESS_TOKEN_PURPOSE,
            timedelta(days=settings.access_token_expire_days),
            now,
        )

    def create_password_reset_token(
        self, user_id: UUID, password_hash: str, now: datetime | None = None
    ) -> str:
        """Issue a reset token bound to the password it is meant to replace.

        Once the password changes the fingerprint no longer matches, so each
        token resets the password at most once.
        """
        return self._encode(
            user_id,
            PASSWORD_RESET_PURPOSE,
            timedelta(minutes=settings.password_reset_expire_minutes),
            now,
            pwd=password_fingerprint(password_hash),
        )

    def verify_token(self, token: str, purpose: str = ACCESS_TOKEN_PURPOSE) -> UUID:
        """
        Decode a token and return the user id it was issued for.

        :param token: The encoded JWT.
        :param purpose: The purpose the token must have been issued for.
        :return: The user id from the ``sub`` claim.
        :raises TokenExpiredError: if the token is past its expiry.
        :raises TokenInvalidError: if the signature, purpose or subject is wrong.
        """
        return self._subject(self._decode(token, purpose))

    def verify_password_reset_token(self, token: str) -> tuple[UUID, str]:
        """
        Decode a reset token.

        :return: The user id and the password fingerprint the token was issued for.
        :raises TokenExpiredError: if the token is past its expiry.
        :raises TokenInvalidError: if the token is not a well-formed reset token.
        """
        payload = self._decode(token, PASSWORD_RESET_PURPOSE)
        fingerprint = payload.get("pwd")
        if not isinstance(fingerprint, str):
            raise TokenInvalidError()
        return self._subject(payload), fingerprint

    def _decode(self, token: str, purpose: str) -> dict[str, Any]:
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except InvalidTokenError as e:
            raise TokenInvalidError() from e

        if payload.get("purpose") != purpose:
            raise TokenInvalidError()
        return payload

    @staticmethod
    def _subject(payload: dict[str, Any]) -> UUID:
        try:
            return UUID(payload["sub"])
        except (TypeError, ValueError) as e:
            raise TokenInvalidError() from e

    def _encode(
        self,
        user_id: UUID,
        purpose: str,
        lifetime: timedelta,
        now: datetime | None,
        **claims: Any,
    ) -> str:
        issued_at = now or datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "purpose": purpose,
            "iat": issued_at,
            "exp": issued_at + lifetime,
            **claims,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)


token_manager = TokenManager()
