"""
Persistence module - JSON-based data storage

Provides:
- Account, Post, SessionTokenRecord, DocumentSet: stored records
- encode/decode: document set codec
- JSONStore: Concurrency-safe file gateway
- DocumentStore: Per-entity operations
"""

from .codec import (
    Account,
    Post,
    SessionTokenRecord,
    DocumentSet,
    CorruptDataError,
    ZERO_TIME,
    encode,
    decode,
)
from .json_store import JSONStore, JSONStoreError, StoreInitError, StoreIOError
from .document_store import (
    DocumentStore,
    DocumentStoreError,
    NotFoundError,
    DuplicateEmailError,
)

__all__ = [
    "Account",
    "Post",
    "SessionTokenRecord",
    "DocumentSet",
    "CorruptDataError",
    "ZERO_TIME",
    "encode",
    "decode",
    "JSONStore",
    "JSONStoreError",
    "StoreInitError",
    "StoreIOError",
    "DocumentStore",
    "DocumentStoreError",
    "NotFoundError",
    "DuplicateEmailError",
]
