"""Unit tests for app.core.security: bcrypt hashing, strength rules, random passwords, JWT."""

import unittest
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import bcrypt
import jwt
from pydantic import SecretStr

from app.core.config import Settings
from app.core.exceptions import InvalidArgumentError
from app.core.security import (
    SPECIALS,
    STRENGTH_OK_MESSAGE,
    check_password_strength,
    create_access_token,
    decode_access_token,
    generate_random_password,
    hash_password,
    verify_password,
)

TEST_KEY = "unit-test-signing-key-0123456789abcdef"
ROUNDS = 4


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "JWT_KEY": SecretStr(TEST_KEY),
        "JWT_ISSUER": "escolar-test-issuer",
        "JWT_AUDIENCE": "escolar-test-client",
        "JWT_EXPIRE_MINUTES": 30,
        "BCRYPT_ROUNDS": ROUNDS,
    }
    values.update(overrides)
    return Settings(**values)


class TestHashPassword(unittest.TestCase):
    """hash_password produces self-contained bcrypt hashes and rejects empty input."""

    def test_empty_password_raises_invalid_argument(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            hash_password("", ROUNDS)

    def test_invalid_argument_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            hash_password("", ROUNDS)

    def test_hash_embeds_algorithm_and_cost(self) -> None:
        hashed = hash_password("abcd", ROUNDS)
        self.assertTrue(hashed.startswith("$2b$04$"))

    def test_same_password_gets_different_salts(self) -> None:
        self.assertNotEqual(hash_password("abcd", ROUNDS), hash_password("abcd", ROUNDS))

    def test_default_work_factor_is_12(self) -> None:
        with patch("app.core.security.bcrypt.gensalt", wraps=bcrypt.gensalt) as gensalt:
            with patch("app.core.security.bcrypt.hashpw", return_value=b"$2b$12$x"):
                hash_password("abcd")
        gensalt.assert_called_once_with(rounds=12)


class TestVerifyPassword(unittest.TestCase):
    """verify_password returns a plain bool and never raises."""

    def test_round_trip(self) -> None:
        hashed = hash_password("Correct horse 1!", ROUNDS)
        self.assertTrue(verify_password("Correct horse 1!", hashed))

    def test_wrong_password(self) -> None:
        hashed = hash_password("abcd", ROUNDS)
        self.assertFalse(verify_password("abce", hashed))

    def test_empty_password_is_false(self) -> None:
        hashed = hash_password("abcd", ROUNDS)
        self.assertFalse(verify_password("", hashed))

    def test_empty_hash_is_false(self) -> None:
        self.assertFalse(verify_password("abcd", ""))

    def test_malformed_hash_is_false(self) -> None:
        self.assertFalse(verify_password("abcd", "not-a-bcrypt-hash"))

    def test_backend_error_is_false(self) -> None:
        with patch("app.core.security.bcrypt.checkpw", side_effect=RuntimeError("boom")):
            self.assertFalse(verify_password("abcd", "$2b$04$whatever"))


class TestPasswordStrength(unittest.TestCase):
    """check_password_strength accumulates every violated rule."""

    def test_empty(self) -> None:
        result = check_password_strength("")
        self.assertFalse(result.valid)
        self.assertEqual(result.message, "Password cannot be empty")

    def test_strong_password(self) -> None:
        result = check_password_strength("Ab1!aaaa")
        self.assertTrue(result.valid)
        self.assertEqual(result.message, STRENGTH_OK_MESSAGE)
        self.assertEqual(result.errors, [])

    def test_short_lowercase_lists_all_violations(self) -> None:
        result = check_password_strength("abc")
        self.assertFalse(result.valid)
        self.assertEqual(len(result.errors), 4)
        self.assertIn("at least 8 characters", result.message)
        self.assertIn("uppercase", result.message)
        self.assertIn("digit", result.message)
        self.assertIn("special character", result.message)
        self.assertNotIn("lowercase", result.message)
        self.assertEqual(result.message, ", ".join(result.errors))

    def test_missing_lowercase_only(self) -> None:
        result = check_password_strength("ABCDEF1!")
        self.assertFalse(result.valid)
        self.assertEqual(result.errors, ["Must contain at least one lowercase letter"])

    def test_space_counts_as_special(self) -> None:
        self.assertTrue(check_password_strength("Abcdef1 ").valid)


class TestGenerateRandomPassword(unittest.TestCase):
    """generate_random_password always satisfies the strength rules."""

    def test_too_short_raises(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            generate_random_password(7)

    def test_default_length(self) -> None:
        self.assertEqual(len(generate_random_password()), 12)

    def test_minimum_length(self) -> None:
        self.assertEqual(len(generate_random_password(8)), 8)

    def test_always_strong(self) -> None:
        for _ in range(200):
            password = generate_random_password(12)
            self.assertTrue(check_password_strength(password).valid, password)

    def test_uses_only_known_alphabet(self) -> None:
        password = generate_random_password(64)
        for c in password:
            self.assertTrue(c.isascii() and (c.isalnum() or c in SPECIALS), c)

    def test_class_positions_are_shuffled(self) -> None:
        # With a fixed layout the first character would always be uppercase.
        firsts = {generate_random_password(12)[0].isupper() for _ in range(200)}
        self.assertEqual(firsts, {True, False})


class TestAccessToken(unittest.TestCase):
    """create_access_token / decode_access_token: claims, signature, expiry, issuer, audience."""

    def setUp(self) -> None:
        self.settings = _settings()

    def test_round_trip_claims(self) -> None:
        before = int(datetime.now(UTC).timestamp())
        token = create_access_token("alice", self.settings)
        payload = decode_access_token(token, self.settings)
        self.assertEqual(payload["sub"], "alice")
        self.assertEqual(payload["iss"], "escolar-test-issuer")
        self.assertEqual(payload["aud"], "escolar-test-client")
        uuid.UUID(payload["jti"])
        self.assertIsInstance(payload["iat"], int)
        self.assertGreaterEqual(payload["iat"], before)
        self.assertAlmostEqual(payload["exp"] - payload["iat"], 30 * 60, delta=2)

    def test_signed_with_hs256(self) -> None:
        token = create_access_token("alice", self.settings)
        self.assertEqual(jwt.get_unverified_header(token)["alg"], "HS256")

    def test_token_ids_are_unique(self) -> None:
        a = decode_access_token(create_access_token("alice", self.settings), self.settings)
        b = decode_access_token(create_access_token("alice", self.settings), self.settings)
        self.assertNotEqual(a["jti"], b["jti"])

    def test_wrong_key_rejected(self) -> None:
        token = create_access_token("alice", self.settings)
        other = _settings(JWT_KEY=SecretStr("another-signing-key-0123456789abcdef"))
        with self.assertRaises(jwt.InvalidSignatureError):
            decode_access_token(token, other)

    def test_tampered_token_rejected(self) -> None:
        token = create_access_token("alice", self.settings)
        header, payload, signature = token.split(".")
        forged = jwt.encode(
            {**jwt.decode(token, options={"verify_signature": False}), "sub": "mallory"},
            "x" * 40,
            algorithm="HS256",
        ).split(".")[1]
        with self.assertRaises(jwt.PyJWTError):
            decode_access_token(f"{header}.{forged}.{signature}", self.settings)

    def test_wrong_audience_rejected(self) -> None:
        token = create_access_token("alice", self.settings)
        with self.assertRaises(jwt.InvalidAudienceError):
            decode_access_token(token, _settings(JWT_AUDIENCE="someone-else"))

    def test_wrong_issuer_rejected(self) -> None:
        token = create_access_token("alice", self.settings)
        with self.assertRaises(jwt.InvalidIssuerError):
            decode_access_token(token, _settings(JWT_ISSUER="someone-else"))

    def test_expired_token_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": "alice",
                "jti": str(uuid.uuid4()),
                "iat": int((now - timedelta(minutes=31)).timestamp()),
                "exp": now - timedelta(seconds=1),
                "iss": "escolar-test-issuer",
                "aud": "escolar-test-client",
            },
            TEST_KEY,
            algorithm="HS256",
        )
        with self.assertRaises(jwt.ExpiredSignatureError):
            decode_access_token(token, self.settings)

    def test_missing_jti_rejected(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": "alice",
                "iat": int(now.timestamp()),
                "exp": now + timedelta(minutes=5),
                "iss": "escolar-test-issuer",
                "aud": "escolar-test-client",
            },
            TEST_KEY,
            algorithm="HS256",
        )
        with self.assertRaises(jwt.MissingRequiredClaimError):
            decode_access_token(token, self.settings)


if __name__ == "__main__":
    unittest.main()
