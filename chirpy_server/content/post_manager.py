"""
Post Manager - Chirp validation, censoring and ownership

Module: content.post_manager
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Body length validation (1..140 characters)
  - Profane word censoring
  - Author-only deletion

SECURITY NOTES:
- Invalid bodies are rejected before reaching the store
- Deletion is an ownership check (author id == token subject), not a role check
"""

import logging
from typing import List, Optional

from ..core.constants import CENSOR_REPLACEMENT, MAX_CHIRP_LENGTH, PROFANE_WORDS
from ..persistence.codec import Post
from ..persistence.document_store import DocumentStore


class PostError(Exception):
    """Base chirp error"""
    pass


class InvalidPostError(PostError):
    """Chirp body is empty or too long"""
    pass


class ForbiddenError(PostError):
    """Account is not the author of the chirp"""
    pass


def censor(body: str) -> str:
    """Replace profane words (case-insensitive, space separated) with ****"""
    words = body.split(" ")
    return " ".join(
        CENSOR_REPLACEMENT if word.lower() in PROFANE_WORDS else word
        for word in words
    )


def validate_body(body: str) -> str:
    """
    Check chirp length and return the censored body

    Raises:
        InvalidPostError: If body is empty or longer than 140 characters
    """
    if not body:
        raise InvalidPostError("Chirp is empty")
    if len(body) > MAX_CHIRP_LENGTH:
        raise InvalidPostError(f"Chirp is too long (max {MAX_CHIRP_LENGTH} characters)")
    return censor(body)


class PostManager:
    """Chirp operations on top of the DocumentStore"""

    def __init__(self, document_store: DocumentStore):
        self.logger = logging.getLogger("content.post_manager")
        self.store = document_store

    def create_post(self, author_id: int, body: str) -> Post:
        """
        Validate, censor and store a chirp

        Raises:
            InvalidPostError: If body is empty or too long
        """
        cleaned = validate_body(body)
        return self.store.create_post(author_id, cleaned)

    def get_post(self, post_id: int) -> Post:
        return self.store.get_post(post_id)

    def list_posts(self, author_id: Optional[int] = None, descending: bool = False) -> List[Post]:
        return self.store.list_posts(author_id=author_id, descending=descending)

    def delete_post(self, post_id: int, account_id: int) -> Post:
        """
        Delete a chirp owned by account_id

        Returns:
            The deleted Post

        Raises:
            NotFoundError: If chirp doesn't exist
            ForbiddenError: If account_id is not the author
        """
        post = self.store.get_post(post_id)
        if post.author_id != account_id:
            self.logger.warning(
                f"Account {account_id} tried to delete chirp {post_id} of {post.author_id}"
            )
            raise ForbiddenError("Chirp deletion forbidden")

        return self.store.delete_post(post_id)
