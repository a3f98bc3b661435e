"""
Account Manager - Account credentials and authentication

Module: security.authentication.account_manager
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Account registration with bcrypt password hashing
  - Credential verification (opaque failures)
  - Profile update and tier upgrade

ARCHITECTURE:
AccountManager provides:
  - Secure password hashing with bcrypt
  - Credential verification through bcrypt.checkpw
  - Account mutations through the DocumentStore

SECURITY NOTES:
- Plaintext passwords are never stored or logged
- Unknown email and wrong password raise the same AuthFailedError
- Unknown emails still pay for one bcrypt check
"""

import logging
import secrets

import bcrypt

from ...core.constants import DEFAULT_BCRYPT_ROUNDS
from ...persistence.codec import Account
from ...persistence.document_store import DocumentStore, NotFoundError


class AuthFailedError(Exception):
    """Authentication failed (deliberately undifferentiated)"""
    pass


class AccountManager:
    """
    Manages account credentials and authentication.

    Passwords are stored as bcrypt hashes in the "password" field.
    """

    def __init__(self, document_store: DocumentStore, bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS):
        """
        Initialize account manager

        Args:
            document_store: Backing store
            bcrypt_rounds: Cost factor for bcrypt (10-12 recommended)
        """
        self.logger = logging.getLogger("security.account_manager")
        self.store = document_store
        self.bcrypt_rounds = bcrypt_rounds

        # Compared against when the email is unknown
        self._dummy_hash = self._hash_password(secrets.token_urlsafe(16))

        self.logger.info(f"AccountManager initialized (bcrypt_rounds={bcrypt_rounds})")

    def create_account(self, email: str, password: str) -> Account:
        """
        Create a new account with hashed password

        Args:
            email: Email (must be unique)
            password: Plaintext password (will be hashed)

        Returns:
            Stored Account

        Raises:
            DuplicateEmailError: If email already exists
        """
        password_hash = self._hash_password(password)
        return self.store.create_account(email, password_hash)

    def verify_credential(self, email: str, password: str) -> Account:
        """
        Authenticate with email and password

        Args:
            email: Account email
            password: Plaintext password

        Returns:
            Account if authentication succeeds

        Raises:
            AuthFailedError: If email is unknown or password is wrong
        """
        try:
            account = self.store.get_account_by_email(email)
        except NotFoundError:
            self._verify_password(password, self._dummy_hash)
            self.logger.warning("Authentication failed: unknown email")
            raise AuthFailedError("Incorrect email or password")

        if not self._verify_password(password, account.password):
            self.logger.warning(f"Authentication failed for account {account.id}")
            raise AuthFailedError("Incorrect email or password")

        self.logger.info(f"Account authenticated: {account.id}")
        return account

    def get_account(self, account_id: int) -> Account:
        """
        Get account by id

        Raises:
            NotFoundError: If account doesn't exist
        """
        return self.store.get_account(account_id)

    def update_profile(self, account_id: int, email: str, password: str) -> Account:
        """
        Replace email and password of an account

        Raises:
            NotFoundError: If account doesn't exist
            DuplicateEmailError: If another account uses the email
        """
        password_hash = self._hash_password(password)
        return self.store.update_account(account_id, email, password_hash)

    def upgrade_tier(self, account_id: int) -> Account:
        """
        Upgrade account to Chirpy Red

        Raises:
            NotFoundError: If account doesn't exist
        """
        return self.store.upgrade_account(account_id)

    def _hash_password(self, password: str) -> str:
        """
        Hash password using bcrypt

        Args:
            password: Plaintext password

        Returns:
            bcrypt hash (bytes decoded to string)
        """
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        hashed = bcrypt.hashpw(password.encode(), salt)
        return hashed.decode()

    @staticmethod
    def _verify_password(password: str, password_hash: str) -> bool:
        """
        Verify password against hash

        Args:
            password: Plaintext password
            password_hash: bcrypt hash

        Returns:
            True if password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except ValueError:
            return False
