"""Bearer token issuance and validation (signed JWT, HMAC)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt

from app.core.errors import InvalidSignature, MalformedToken, TokenExpired

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.models import User

Clock = Callable[[], datetime]

TOKEN_TYPE = "bearer"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class IssuedToken:
    access_token: str
    expires_at: datetime
    token_type: str = TOKEN_TYPE


@dataclass(frozen=True)
class Subject:
    """Identity carried by a token that passed validation."""

    user_id: int
    email: str
    expires_at: datetime


class TokenService:
    """
    Issues and validates stateless access tokens.

    There is no revocation list: a token stays valid until its exp claim,
    even after the user logs out. Expiry is compared with the injected
    clock rather than PyJWT's wall clock.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
        clock: Clock = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must be non-empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=expire_minutes)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = utc_now) -> TokenService:
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            expire_minutes=settings.JWT_EXPIRE_MINUTES,
            clock=clock,
        )

    def issue(self, user: User) -> IssuedToken:
        """Sign a token for user that expires a fixed duration from now."""
        issued_at = int(self._clock().timestamp())
        expires_at = issued_at + int(self._ttl.total_seconds())
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(
            access_token=token,
            expires_at=datetime.fromtimestamp(expires_at, tz=UTC),
        )

    def validate(self, token: str) -> Subject:
        """
        Verify signature, structure and expiry; return the embedded subject.

        Raises InvalidSignature, TokenExpired or MalformedToken.
        """
        if not token or token.count(".") != 2:
            raise MalformedToken("Token is not a three-part JWT.")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": ["sub", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignature("Token signature is invalid.") from e
        except jwt.PyJWTError as e:
            raise MalformedToken("Token could not be decoded.") from e

        exp = payload.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, int):
            raise MalformedToken("Token exp claim must be an integer timestamp.")
        if self._clock().timestamp() >= exp:
            raise TokenExpired("Token has expired.")

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise MalformedToken("Token subject is not a user id.") from e
        email = payload.get("email")
        if not isinstance(email, str):
            raise MalformedToken("Token email claim is missing.")
        return Subject(
            user_id=user_id,
            email=email,
            expires_at=datetime.fromtimestamp(exp, tz=UTC),
        )
