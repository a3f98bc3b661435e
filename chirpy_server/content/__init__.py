"""
Content module - Chirps

Provides:
- PostManager: Chirp creation, listing and author-only deletion
- censor / validate_body: Body rules
"""

from .post_manager import (
    PostManager,
    PostError,
    InvalidPostError,
    ForbiddenError,
    censor,
    validate_body,
)

__all__ = [
    "PostManager",
    "PostError",
    "InvalidPostError",
    "ForbiddenError",
    "censor",
    "validate_body",
]
