"""
Unit Tests - Authentication

Module: tests.test_authentication
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial tests
  - AccountManager: bcrypt credentials, uniform login failure
  - JWTHandler: token kinds, expiry, refresh and revocation
"""

import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

import jwt

from chirpy_server.persistence import (
    DocumentStore,
    DuplicateEmailError,
    JSONStore,
    NotFoundError,
)
from chirpy_server.security.authentication import (
    AccountManager,
    AuthFailedError,
    JWTHandler,
    MalformedTokenError,
    TokenRevokedError,
    UnauthorizedError,
    WrongTokenKindError,
)

SECRET = "test-secret-key-that-is-long-enough-0123456789"


class AuthTestCase(unittest.TestCase):
    """Fresh database per test"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        json_store = JSONStore(Path(self.temp_dir) / "database.json")
        json_store.ensure()
        self.store = DocumentStore(json_store)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)


class TestAccountManager(AuthTestCase):

    def setUp(self):
        super().setUp()
        self.accounts = AccountManager(self.store, bcrypt_rounds=4)

    def test_password_is_hashed(self):
        account = self.accounts.create_account("a@example.com", "hunter2")
        self.assertNotEqual(account.password, "hunter2")
        self.assertTrue(account.password.startswith("$2"))

    def test_verify_credential(self):
        created = self.accounts.create_account("a@example.com", "hunter2")
        self.assertEqual(self.accounts.verify_credential("a@example.com", "hunter2").id, created.id)

    def test_wrong_password_and_unknown_email_look_alike(self):
        self.accounts.create_account("a@example.com", "hunter2")

        with self.assertRaises(AuthFailedError) as wrong_password:
            self.accounts.verify_credential("a@example.com", "wrong")
        with self.assertRaises(AuthFailedError) as unknown_email:
            self.accounts.verify_credential("b@example.com", "hunter2")

        self.assertEqual(str(wrong_password.exception), str(unknown_email.exception))

    def test_duplicate_email(self):
        self.accounts.create_account("a@example.com", "hunter2")
        with self.assertRaises(DuplicateEmailError):
            self.accounts.create_account("a@example.com", "other")

    def test_update_profile_changes_login(self):
        account = self.accounts.create_account("a@example.com", "hunter2")

        self.accounts.update_profile(account.id, "new@example.com", "s3cret")

        self.assertEqual(self.accounts.verify_credential("new@example.com", "s3cret").id, account.id)
        with self.assertRaises(AuthFailedError):
            self.accounts.verify_credential("a@example.com", "hunter2")

    def test_upgrade_tier(self):
        account = self.accounts.create_account("a@example.com", "hunter2")
        self.assertTrue(self.accounts.upgrade_tier(account.id).is_chirpy_red)
        self.assertTrue(self.accounts.get_account(account.id).is_chirpy_red)
        with self.assertRaises(NotFoundError):
            self.accounts.upgrade_tier(99)

    def test_corrupt_hash_fails_verification(self):
        account = self.store.create_account("a@example.com", "not-a-bcrypt-hash")
        with self.assertRaises(AuthFailedError):
            self.accounts.verify_credential(account.email, "anything")


class TestJWTHandler(AuthTestCase):

    def setUp(self):
        super().setUp()
        self.tokens = JWTHandler(SECRET, self.store)

    def test_short_secret_rejected(self):
        with self.assertRaises(ValueError):
            JWTHandler("short", self.store)

    def test_access_token_claims(self):
        pair = self.tokens.issue_session_pair(7)

        claims = jwt.decode(pair.access_token, SECRET, algorithms=["HS256"])

        self.assertEqual(claims["iss"], "chirpy-access")
        self.assertEqual(claims["sub"], "7")
        self.assertEqual(claims["exp"] - claims["iat"], 3600)

    def test_refresh_token_claims(self):
        pair = self.tokens.issue_session_pair(7)

        claims = jwt.decode(pair.refresh_token, SECRET, algorithms=["HS256"])

        self.assertEqual(claims["iss"], "chirpy-refresh")
        self.assertEqual(claims["exp"] - claims["iat"], 60 * 24 * 3600)
        self.assertFalse(self.store.get_token(pair.refresh_token).is_revoked)

    def test_tokens_are_unique(self):
        first = self.tokens.issue_session_pair(7)
        second = self.tokens.issue_session_pair(7)
        self.assertNotEqual(first.access_token, second.access_token)
        self.assertNotEqual(first.refresh_token, second.refresh_token)

    def test_validate_access_token(self):
        pair = self.tokens.issue_session_pair(7)
        self.assertEqual(self.tokens.validate_access_token(pair.access_token), 7)

    def test_refresh_token_is_not_an_access_token(self):
        pair = self.tokens.issue_session_pair(7)
        with self.assertRaises(WrongTokenKindError):
            self.tokens.validate_access_token(pair.refresh_token)

    def test_access_token_cannot_refresh(self):
        pair = self.tokens.issue_session_pair(7)
        with self.assertRaises(WrongTokenKindError):
            self.tokens.refresh_access_token(pair.access_token)

    def test_other_secret_rejected(self):
        other = JWTHandler("another-secret-key-that-is-long-enough-000", self.store)
        pair = other.issue_session_pair(7)
        with self.assertRaises(UnauthorizedError):
            self.tokens.validate_access_token(pair.access_token)

    def test_garbage_rejected(self):
        for token in ("", "abc", "a.b.c"):
            with self.subTest(token=token):
                with self.assertRaises(UnauthorizedError):
                    self.tokens.validate_access_token(token)

    def test_expired_token(self):
        expired = JWTHandler(SECRET, self.store, access_token_ttl=timedelta(seconds=-10))
        pair = expired.issue_session_pair(7)
        with self.assertRaises(UnauthorizedError):
            self.tokens.validate_access_token(pair.access_token)

    def test_bad_subject(self):
        now = int(datetime.now(timezone.utc).timestamp())
        for subject in ("abc", "0", "-3", "١٢"):
            with self.subTest(subject=subject):
                token = jwt.encode(
                    {"iss": "chirpy-access", "sub": subject, "iat": now, "exp": now + 60},
                    SECRET,
                    algorithm="HS256",
                )
                with self.assertRaises(MalformedTokenError):
                    self.tokens.validate_access_token(token)

    def test_missing_claim(self):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode({"iss": "chirpy-access", "sub": "1", "iat": now}, SECRET, algorithm="HS256")
        with self.assertRaises(UnauthorizedError):
            self.tokens.validate_access_token(token)

    def test_refresh_access_token(self):
        pair = self.tokens.issue_session_pair(7)

        access_token = self.tokens.refresh_access_token(pair.refresh_token)

        self.assertEqual(self.tokens.validate_access_token(access_token), 7)

    def test_revoked_token_cannot_refresh(self):
        pair = self.tokens.issue_session_pair(7)

        self.tokens.revoke(pair.refresh_token)

        with self.assertRaises(TokenRevokedError):
            self.tokens.refresh_access_token(pair.refresh_token)

    def test_unknown_refresh_token(self):
        other_store_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, other_store_dir)
        other_json = JSONStore(Path(other_store_dir) / "database.json")
        other_json.ensure()
        other = JWTHandler(SECRET, DocumentStore(other_json))
        pair = other.issue_session_pair(7)

        with self.assertRaises(NotFoundError):
            self.tokens.refresh_access_token(pair.refresh_token)
        with self.assertRaises(NotFoundError):
            self.tokens.revoke(pair.refresh_token)

    def test_revoke_access_token_rejected(self):
        pair = self.tokens.issue_session_pair(7)
        with self.assertRaises(WrongTokenKindError):
            self.tokens.revoke(pair.access_token)


if __name__ == "__main__":
    unittest.main()
