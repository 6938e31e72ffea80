"""Unit tests for newsdesk.core.security: durations, password hashing and session tokens."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from newsdesk.core.errors import ConfigError, TokenExpired, TokenInvalid
from newsdesk.core.permissions import Role
from newsdesk.core.security import (
    OAUTH_PASSWORD_SENTINEL,
    PasswordHasher,
    TokenClaims,
    TokenCodec,
    generate_verification_token,
    parse_duration,
    token_selector,
)
from support import FAST_HASHER, TEST_SECRET, make_codec


def _claims(**overrides: object) -> TokenClaims:
    values = {
        "id": "u1",
        "email": "reader@example.com",
        "name": "Reader",
        "role": Role.USER,
        "is_subscriber": False,
    }
    values.update(overrides)
    return TokenClaims(**values)


class TestParseDuration(unittest.TestCase):
    def test_units(self) -> None:
        self.assertEqual(parse_duration("7d"), timedelta(days=7))
        self.assertEqual(parse_duration("12h"), timedelta(hours=12))
        self.assertEqual(parse_duration("30m"), timedelta(minutes=30))
        self.assertEqual(parse_duration("45s"), timedelta(seconds=45))

    def test_rejects_garbage_and_zero(self) -> None:
        for value in ("", "7", "d7", "7w", "0h", "-1d"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_duration(value)


class TestPasswordHasher(unittest.TestCase):
    """hash/compare are one-way and malformed digests never match."""

    def test_hash_then_compare(self) -> None:
        digest = FAST_HASHER.hash("s3cret-password")
        self.assertNotEqual(digest, "s3cret-password")
        self.assertTrue(FAST_HASHER.compare("s3cret-password", digest))
        self.assertFalse(FAST_HASHER.compare("wrong-password", digest))

    def test_salted(self) -> None:
        self.assertNotEqual(FAST_HASHER.hash("same"), FAST_HASHER.hash("same"))

    def test_empty_or_malformed_digest_is_false(self) -> None:
        self.assertFalse(FAST_HASHER.compare("anything", None))
        self.assertFalse(FAST_HASHER.compare("anything", ""))
        self.assertFalse(FAST_HASHER.compare("anything", "not-a-bcrypt-hash"))
        self.assertFalse(FAST_HASHER.compare(OAUTH_PASSWORD_SENTINEL, OAUTH_PASSWORD_SENTINEL))

    def test_dummy_compare_is_always_false(self) -> None:
        self.assertFalse(FAST_HASHER.compare_dummy("whatever"))

    def test_rejects_out_of_range_rounds(self) -> None:
        with self.assertRaises(ConfigError):
            PasswordHasher(rounds=3)
        with self.assertRaises(ConfigError):
            PasswordHasher(rounds=32)


class TestVerificationTokens(unittest.TestCase):
    def test_token_is_64_hex_chars_and_unique(self) -> None:
        a = generate_verification_token()
        b = generate_verification_token()
        self.assertEqual(len(a), 64)
        int(a, 16)
        self.assertNotEqual(a, b)

    def test_selector_is_deterministic(self) -> None:
        raw = generate_verification_token()
        self.assertEqual(token_selector(raw), token_selector(raw))
        self.assertNotEqual(token_selector(raw), raw)


class TestTokenCodecConfig(unittest.TestCase):
    def test_missing_secret(self) -> None:
        with self.assertRaises(ConfigError):
            TokenCodec(None)
        with self.assertRaises(ConfigError):
            TokenCodec("   ")

    def test_short_secret(self) -> None:
        with self.assertRaises(ConfigError):
            TokenCodec("too-short")

    def test_bad_expiry(self) -> None:
        with self.assertRaises(ConfigError):
            TokenCodec(TEST_SECRET, expires_in="forever")

    def test_max_age_matches_lifetime(self) -> None:
        self.assertEqual(make_codec("7d").max_age_seconds, 7 * 24 * 3600)


class TestTokenCodec(unittest.TestCase):
    """mint/verify round trip and every rejection path."""

    def setUp(self) -> None:
        self.codec = make_codec()

    def test_round_trip_preserves_claims(self) -> None:
        token = self.codec.mint(_claims(role=Role.MODERATOR, is_subscriber=True))
        claims = self.codec.verify(token)
        self.assertEqual(claims.id, "u1")
        self.assertEqual(claims.email, "reader@example.com")
        self.assertEqual(claims.role, Role.MODERATOR)
        self.assertTrue(claims.is_subscriber)
        self.assertIsNotNone(claims.exp)
        self.assertEqual(claims.exp - claims.iat, timedelta(days=7))

    def test_expired_token(self) -> None:
        token = self.codec.mint(_claims(), now=datetime.now(UTC) - timedelta(days=8))
        with self.assertRaises(TokenExpired):
            self.codec.verify(token)

    def test_wrong_secret(self) -> None:
        other = TokenCodec("another-secret-another-secret-another-secret")
        with self.assertRaises(TokenInvalid):
            self.codec.verify(other.mint(_claims()))

    def test_garbage_token(self) -> None:
        with self.assertRaises(TokenInvalid):
            self.codec.verify("not.a.token")

    def test_tampered_payload(self) -> None:
        token = self.codec.mint(_claims())
        header, payload, signature = token.split(".")
        forged = self.codec.mint(_claims(role=Role.ADMIN)).split(".")[1]
        with self.assertRaises(TokenInvalid):
            self.codec.verify(".".join([header, forged, signature[::-1]]))

    def test_unknown_role_is_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"id": "u1", "email": "a@b.co", "role": "OWNER", "iat": now, "exp": now + timedelta(hours=1)},
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenInvalid):
            self.codec.verify(token)

    def test_missing_identity_is_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"email": "a@b.co", "role": "USER", "iat": now, "exp": now + timedelta(hours=1)},
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenInvalid):
            self.codec.verify(token)

    def test_missing_expiry_is_rejected(self) -> None:
        token = jwt.encode(
            {"id": "u1", "email": "a@b.co", "role": "USER", "iat": datetime.now(UTC)},
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenInvalid):
            self.codec.verify(token)

    def test_subscriber_flag_must_be_true_literal(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "id": "u1",
                "email": "a@b.co",
                "role": "USER",
                "isSubscriber": "yes",
                "iat": now,
                "exp": now + timedelta(hours=1),
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        self.assertFalse(self.codec.verify(token).is_subscriber)


if __name__ == "__main__":
    unittest.main()
