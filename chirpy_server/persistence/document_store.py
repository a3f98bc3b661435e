"""
Document Store - Per-entity operations over the JSON store

Module: persistence.document_store
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Account create/get/list/update/upgrade
  - Chirp create/get/list/delete
  - Refresh token record create/get/revoke

ARCHITECTURE:
Every mutation is one JSONStore.mutate() cycle over the whole file:
load, validate, change in memory, save. Reads are a single load().
Returned records are the values that were written, not a re-read.
"""

import hashlib
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

from ..core.constants import COLLECTION_USERS, COLLECTION_CHIRPS
from .codec import Account, Post, SessionTokenRecord
from .json_store import JSONStore


class DocumentStoreError(Exception):
    """Base document store error"""
    pass


class NotFoundError(DocumentStoreError):
    """Record not found"""
    pass


class DuplicateEmailError(DocumentStoreError):
    """Another account already uses this email"""
    pass


class DocumentStore:
    """
    Accounts, chirps and refresh token records backed by one JSON file.
    """

    def __init__(self, json_store: JSONStore):
        """
        Initialize document store

        Args:
            json_store: Store owning the database file
        """
        self.logger = logging.getLogger("persistence.document_store")
        self.store = json_store

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_account(self, email: str, password_hash: str) -> Account:
        """
        Create a new account

        Args:
            email: Email address (unique, case-sensitive)
            password_hash: Already hashed credential

        Returns:
            The stored Account

        Raises:
            DuplicateEmailError: If email is already used
        """
        with self.store.mutate() as documents:
            for existing in documents.users.values():
                if existing.email == email:
                    raise DuplicateEmailError("A user with this email already exists")

            account = Account(
                id=documents.allocate_id(COLLECTION_USERS),
                email=email,
                password=password_hash,
                is_chirpy_red=False,
            )
            documents.users[account.id] = account

        self.logger.info(f"Account created: {account.id}")
        return replace(account)

    def get_account(self, account_id: int) -> Account:
        """
        Get account by id

        Raises:
            NotFoundError: If no account has this id
        """
        account = self.store.load().users.get(account_id)
        if account is None:
            raise NotFoundError(f"No user with id {account_id}")
        return account

    def get_account_by_email(self, email: str) -> Account:
        """
        Get account by email

        Raises:
            NotFoundError: If no account has this email
        """
        for account in self.store.load().users.values():
            if account.email == email:
                return account
        raise NotFoundError("No user with such email")

    def list_accounts(self, descending: bool = False) -> List[Account]:
        """List all accounts ordered by id"""
        users = self.store.load().users
        return [users[key] for key in sorted(users, reverse=descending)]

    def update_account(self, account_id: int, email: str, password_hash: str) -> Account:
        """
        Replace email and password, keeping the tier flag

        Raises:
            NotFoundError: If account doesn't exist
            DuplicateEmailError: If another account uses the new email
        """
        with self.store.mutate() as documents:
            current = documents.users.get(account_id)
            if current is None:
                raise NotFoundError(f"No user with id {account_id}")

            for other in documents.users.values():
                if other.id != account_id and other.email == email:
                    raise DuplicateEmailError("A user with this email already exists")

            updated = replace(current, email=email, password=password_hash)
            documents.users[account_id] = updated

        self.logger.info(f"Account updated: {account_id}")
        return replace(updated)

    def upgrade_account(self, account_id: int) -> Account:
        """
        Set the Chirpy Red flag

        Raises:
            NotFoundError: If account doesn't exist
        """
        with self.store.mutate() as documents:
            current = documents.users.get(account_id)
            if current is None:
                raise NotFoundError(f"No user with id {account_id}")

            upgraded = replace(current, is_chirpy_red=True)
            documents.users[account_id] = upgraded

        self.logger.info(f"Account upgraded: {account_id}")
        return replace(upgraded)

    # ------------------------------------------------------------------
    # Chirps
    # ------------------------------------------------------------------

    def create_post(self, author_id: int, body: str) -> Post:
        """
        Store a chirp

        The body must already be validated and censored.
        """
        with self.store.mutate() as documents:
            post = Post(
                id=documents.allocate_id(COLLECTION_CHIRPS),
                author_id=author_id,
                body=body,
            )
            documents.chirps[post.id] = post

        self.logger.info(f"Chirp created: {post.id} (author={author_id})")
        return replace(post)

    def get_post(self, post_id: int) -> Post:
        """
        Get chirp by id

        Raises:
            NotFoundError: If no chirp has this id
        """
        post = self.store.load().chirps.get(post_id)
        if post is None:
            raise NotFoundError(f"No chirp with id {post_id}")
        return post

    def list_posts(
        self,
        author_id: Optional[int] = None,
        descending: bool = False,
    ) -> List[Post]:
        """
        List chirps ordered by id

        Args:
            author_id: Only chirps by this author when given
            descending: Most recent first
        """
        chirps = self.store.load().chirps
        return [
            chirps[key]
            for key in sorted(chirps, reverse=descending)
            if author_id is None or chirps[key].author_id == author_id
        ]

    def delete_post(self, post_id: int) -> Post:
        """
        Delete a chirp

        Returns:
            The deleted Post

        Raises:
            NotFoundError: If no chirp has this id
        """
        with self.store.mutate() as documents:
            post = documents.chirps.pop(post_id, None)
            if post is None:
                raise NotFoundError(f"No chirp with id {post_id}")

        self.logger.info(f"Chirp deleted: {post_id}")
        return post

    # ------------------------------------------------------------------
    # Refresh tokens
    # ------------------------------------------------------------------

    def create_token(self, token: str) -> SessionTokenRecord:
        """
        Record a freshly issued refresh token as not revoked

        An already known token keeps its record, so a revocation is never
        undone.
        """
        with self.store.mutate() as documents:
            record = documents.revocations.get(token)
            if record is None:
                record = SessionTokenRecord(id=token)
                documents.revocations[token] = record
                self.logger.info(f"Refresh token stored: {token_fingerprint(token)}")
            else:
                self.logger.warning(f"Refresh token already stored: {token_fingerprint(token)}")

        return replace(record)

    def get_token(self, token: str) -> SessionTokenRecord:
        """
        Get refresh token record

        Raises:
            NotFoundError: If token was never stored
        """
        record = self.store.load().revocations.get(token)
        if record is None:
            raise NotFoundError("No such token")
        return record

    def revoke_token(self, token: str, revoked_at: Optional[datetime] = None) -> SessionTokenRecord:
        """
        Mark a refresh token revoked

        Re-revoking overwrites the timestamp.

        Raises:
            NotFoundError: If token was never stored
        """
        revoked_at = revoked_at or datetime.now(timezone.utc)

        with self.store.mutate() as documents:
            current = documents.revocations.get(token)
            if current is None:
                raise NotFoundError("No such token")

            revoked = replace(current, revoked_at=revoked_at)
            documents.revocations[token] = revoked

        self.logger.info(f"Refresh token revoked: {token_fingerprint(token)}")
        return replace(revoked)


def token_fingerprint(token: str) -> str:
    """Short SHA256 prefix, safe to log"""
    return hashlib.sha256(token.encode()).hexdigest()[:12]
