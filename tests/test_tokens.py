"""Unit tests for app.services.tokens: issuance, expiry boundary, tampering and malformed input."""

import unittest
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import jwt

from app.core.errors import InvalidSignature, MalformedToken, TokenError, TokenExpired
from app.services.tokens import TokenService

SECRET = "unit-test-secret-with-enough-entropy-0123456789"
ISSUED_AT = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def _user(user_id: int = 7, email: str = "a@x.com") -> SimpleNamespace:
    return SimpleNamespace(id=user_id, email=email)


def _service(clock: FakeClock, expire_minutes: int = 60, secret: str = SECRET) -> TokenService:
    return TokenService(secret=secret, algorithm="HS256", expire_minutes=expire_minutes, clock=clock)


def _tamper_signature(token: str) -> str:
    """Flip one character in the middle of the signature segment (not a padding character)."""
    header, payload, signature = token.split(".")
    i = len(signature) // 2
    replacement = "A" if signature[i] != "A" else "B"
    return ".".join([header, payload, signature[:i] + replacement + signature[i + 1 :]])


class TestIssue(unittest.TestCase):
    """issue embeds the subject and an expiry a fixed duration after issuance."""

    def test_claims(self) -> None:
        service = _service(FakeClock(ISSUED_AT), expire_minutes=30)
        issued = service.issue(_user())
        claims = jwt.decode(issued.access_token, options={"verify_signature": False})
        self.assertEqual(claims["sub"], "7")
        self.assertEqual(claims["email"], "a@x.com")
        self.assertEqual(claims["iat"], int(ISSUED_AT.timestamp()))
        self.assertEqual(claims["exp"] - claims["iat"], 30 * 60)
        self.assertEqual(issued.expires_at, ISSUED_AT + timedelta(minutes=30))
        self.assertEqual(issued.token_type, "bearer")

    def test_validate_returns_subject(self) -> None:
        clock = FakeClock(ISSUED_AT)
        service = _service(clock)
        subject = service.validate(service.issue(_user(user_id=42, email="b@x.com")).access_token)
        self.assertEqual(subject.user_id, 42)
        self.assertEqual(subject.email, "b@x.com")

    def test_empty_secret_rejected(self) -> None:
        with self.assertRaises(ValueError):
            TokenService(secret="")


class TestExpiry(unittest.TestCase):
    """Tokens are accepted strictly before exp and rejected at or after it."""

    def setUp(self) -> None:
        self.clock = FakeClock(ISSUED_AT)
        self.service = _service(self.clock, expire_minutes=60)
        self.token = self.service.issue(_user()).access_token

    def test_valid_one_second_before_expiry(self) -> None:
        self.clock.advance(minutes=60, seconds=-1)
        self.assertEqual(self.service.validate(self.token).user_id, 7)

    def test_expired_exactly_at_expiry(self) -> None:
        self.clock.advance(minutes=60)
        with self.assertRaises(TokenExpired):
            self.service.validate(self.token)

    def test_expired_after_expiry(self) -> None:
        self.clock.advance(days=2)
        with self.assertRaises(TokenExpired):
            self.service.validate(self.token)


class TestSignature(unittest.TestCase):
    """Any change to the signed token is detected as InvalidSignature."""

    def setUp(self) -> None:
        self.clock = FakeClock(ISSUED_AT)
        self.service = _service(self.clock)
        self.token = self.service.issue(_user()).access_token

    def test_tampered_signature(self) -> None:
        with self.assertRaises(InvalidSignature):
            self.service.validate(_tamper_signature(self.token))

    def test_token_signed_with_other_key(self) -> None:
        other = _service(self.clock, secret="another-secret-that-is-also-long-enough-42")
        with self.assertRaises(InvalidSignature):
            self.service.validate(other.issue(_user()).access_token)

    def test_tampered_payload(self) -> None:
        forged_claims = {"sub": "1", "email": "a@x.com", "exp": int(ISSUED_AT.timestamp()) + 60}
        forged = jwt.encode(forged_claims, "attacker-key-that-is-long-enough-for-hs256", algorithm="HS256")
        header, _, signature = self.token.split(".")
        _, forged_payload, _ = forged.split(".")
        with self.assertRaises(InvalidSignature):
            self.service.validate(".".join([header, forged_payload, signature]))

    def test_errors_share_base_class(self) -> None:
        self.assertTrue(issubclass(InvalidSignature, TokenError))
        self.assertTrue(issubclass(TokenExpired, TokenError))
        self.assertTrue(issubclass(MalformedToken, TokenError))


class TestMalformed(unittest.TestCase):
    """Structurally broken tokens raise MalformedToken."""

    def setUp(self) -> None:
        self.clock = FakeClock(ISSUED_AT)
        self.service = _service(self.clock)

    def test_not_a_jwt(self) -> None:
        for token in ("", "abc", "a.b", "a.b.c.d"):
            with self.subTest(token=token), self.assertRaises(MalformedToken):
                self.service.validate(token)

    def test_garbage_segments(self) -> None:
        with self.assertRaises(MalformedToken):
            self.service.validate("!!!.@@@.###")

    def test_missing_exp(self) -> None:
        token = jwt.encode({"sub": "7", "email": "a@x.com"}, SECRET, algorithm="HS256")
        with self.assertRaises(MalformedToken):
            self.service.validate(token)

    def test_non_numeric_subject(self) -> None:
        exp = int(ISSUED_AT.timestamp()) + 60
        token = jwt.encode({"sub": "alice", "email": "a@x.com", "exp": exp}, SECRET, algorithm="HS256")
        with self.assertRaises(MalformedToken):
            self.service.validate(token)

    def test_missing_email(self) -> None:
        exp = int(ISSUED_AT.timestamp()) + 60
        token = jwt.encode({"sub": "7", "exp": exp}, SECRET, algorithm="HS256")
        with self.assertRaises(MalformedToken):
            self.service.validate(token)


if __name__ == "__main__":
    unittest.main()
