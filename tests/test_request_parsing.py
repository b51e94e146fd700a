"""Unit tests for bearer header parsing and credential length limits on request bodies."""

import unittest

from pydantic import ValidationError

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.gate.middleware import bearer_token
from app.schemas.auth import RegisterRequest
from app.schemas.users import UserCreateRequest


class TestBearerToken(unittest.TestCase):
    def test_extracts_token(self) -> None:
        self.assertEqual(bearer_token("Bearer abc.def.ghi"), "abc.def.ghi")
        self.assertEqual(bearer_token("bearer abc.def.ghi"), "abc.def.ghi")

    def test_rejects_missing_or_other_schemes(self) -> None:
        for header in (None, "", "Bearer", "Bearer   ", "Basic dXNlcjpwYXNz", "abc.def.ghi"):
            with self.subTest(header=header):
                self.assertIsNone(bearer_token(header))


class TestPasswordLimits(unittest.TestCase):
    """Registration and admin create share the limits from app.core.security."""

    def _register(self, password: str) -> RegisterRequest:
        return RegisterRequest(
            first_name="Jane", last_name="Doe", email="jane@example.com", password=password
        )

    def test_bounds_are_inclusive(self) -> None:
        self._register("p" * PASSWORD_MIN_LEN)
        self._register("p" * PASSWORD_MAX_LEN)

    def test_too_short_or_too_long(self) -> None:
        for password in ("p" * (PASSWORD_MIN_LEN - 1), "p" * (PASSWORD_MAX_LEN + 1)):
            with self.subTest(length=len(password)):
                with self.assertRaises(ValidationError):
                    self._register(password)
                with self.assertRaises(ValidationError):
                    UserCreateRequest(
                        first_name="Ann",
                        last_name="Admin",
                        email="ann@example.com",
                        password=password,
                    )


if __name__ == "__main__":
    unittest.main()
