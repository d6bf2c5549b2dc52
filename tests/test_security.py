"""Unit tests for nhatroso.core.security: password hashing and the access/refresh token issuer."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from nhatroso.core.config import Settings
from nhatroso.core.security import (
    decode_access_token,
    decode_refresh_token,
    hash_password,
    hash_refresh_token,
    issue_token_pair,
    refresh_token_matches,
    verify_password,
)


def _settings(**overrides: object) -> Settings:
    values = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": "access-secret",
        "REFRESH_TOKEN_SECRET": "refresh-secret",
        "JWT_EXPIRE_MINUTES": 15,
        "REFRESH_TOKEN_EXPIRE_DAYS": 7,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestPasswordHashing(unittest.TestCase):
    """bcrypt hash/verify with the 72-byte input limit."""

    def test_verify_accepts_correct_password(self) -> None:
        hashed = hash_password("Abcdef12", rounds=4)
        self.assertNotEqual(hashed, "Abcdef12")
        self.assertTrue(verify_password("Abcdef12", hashed))

    def test_verify_rejects_wrong_password(self) -> None:
        hashed = hash_password("Abcdef12", rounds=4)
        self.assertFalse(verify_password("abcdef12", hashed))

    def test_malformed_hash_is_rejected_not_raised(self) -> None:
        self.assertFalse(verify_password("Abcdef12", "not-a-bcrypt-hash"))

    def test_input_beyond_72_bytes_is_ignored(self) -> None:
        base = "x" * 72
        hashed = hash_password(base + "tail-one", rounds=4)
        self.assertTrue(verify_password(base + "tail-two", hashed))


class TestTokenPair(unittest.TestCase):
    """issue_token_pair signs two tokens with distinct secrets and lifetimes."""

    def setUp(self) -> None:
        self.settings = _settings()
        self.now = datetime.now(UTC)

    def test_pair_is_non_empty_and_carries_identity(self) -> None:
        pair = issue_token_pair(42, "a@b.com", settings=self.settings, now=self.now)
        self.assertTrue(pair.access_token)
        self.assertTrue(pair.refresh_token)
        self.assertEqual(pair.token_type, "bearer")

        access = decode_access_token(pair.access_token, self.settings)
        refresh = decode_refresh_token(pair.refresh_token, self.settings)
        for payload in (access, refresh):
            self.assertEqual(payload["sub"], "42")
            self.assertEqual(payload["email"], "a@b.com")
        self.assertEqual(access["type"], "access")
        self.assertEqual(refresh["type"], "refresh")

    def test_expiry_policies(self) -> None:
        pair = issue_token_pair(1, "a@b.com", settings=self.settings, now=self.now)
        access = decode_access_token(pair.access_token, self.settings)
        refresh = decode_refresh_token(pair.refresh_token, self.settings)
        self.assertEqual(access["exp"] - access["iat"], 15 * 60)
        self.assertEqual(refresh["exp"] - refresh["iat"], 7 * 24 * 3600)

    def test_pairs_issued_at_same_instant_differ(self) -> None:
        first = issue_token_pair(1, "a@b.com", settings=self.settings, now=self.now)
        second = issue_token_pair(1, "a@b.com", settings=self.settings, now=self.now)
        self.assertNotEqual(first.refresh_token, second.refresh_token)
        self.assertNotEqual(first.access_token, second.access_token)

    def test_access_token_is_not_a_refresh_token(self) -> None:
        pair = issue_token_pair(1, "a@b.com", settings=self.settings, now=self.now)
        with self.assertRaises(jwt.PyJWTError):
            decode_refresh_token(pair.access_token, self.settings)
        with self.assertRaises(jwt.PyJWTError):
            decode_access_token(pair.refresh_token, self.settings)

    def test_type_claim_is_enforced_even_with_right_secret(self) -> None:
        forged = jwt.encode(
            {"sub": "1", "type": "refresh", "iat": self.now, "exp": self.now + timedelta(minutes=5)},
            "access-secret",
            algorithm="HS256",
        )
        with self.assertRaises(jwt.InvalidTokenError):
            decode_access_token(forged, self.settings)

    def test_expired_access_token_rejected(self) -> None:
        past = self.now - timedelta(minutes=16)
        pair = issue_token_pair(1, "a@b.com", settings=self.settings, now=past)
        with self.assertRaises(jwt.ExpiredSignatureError):
            decode_access_token(pair.access_token, self.settings)
        # The refresh half of the same pair is still within its 7 days.
        self.assertEqual(decode_refresh_token(pair.refresh_token, self.settings)["sub"], "1")

    def test_token_signed_with_other_deployment_secret_rejected(self) -> None:
        other = _settings(JWT_SECRET="someone-else", REFRESH_TOKEN_SECRET="someone-else-r")
        pair = issue_token_pair(1, "a@b.com", settings=other, now=self.now)
        with self.assertRaises(jwt.InvalidSignatureError):
            decode_access_token(pair.access_token, self.settings)


class TestRefreshTokenHash(unittest.TestCase):
    """Stored refresh-token hash and comparison."""

    def test_matches_only_the_hashed_token(self) -> None:
        stored = hash_refresh_token("token-a")
        self.assertEqual(len(stored), 64)
        self.assertTrue(refresh_token_matches("token-a", stored))
        self.assertFalse(refresh_token_matches("token-b", stored))

    def test_missing_hash_never_matches(self) -> None:
        self.assertFalse(refresh_token_matches("token-a", None))
        self.assertFalse(refresh_token_matches("token-a", ""))


if __name__ == "__main__":
    unittest.main()
