"""
Document Codec - Records and JSON (de)serialization of the document set

Module: persistence.codec
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Account, Post and SessionTokenRecord records
  - DocumentSet container with monotonic id counters
  - Structural JSON encode/decode with schema validation

ARCHITECTURE:
The whole database is one JSON object:
  {"users": {...}, "chirps": {...}, "revocations": {...}, "next_ids": {...}}

Mapping keys are the decimal string of the record id (users, chirps) or
the token string itself (revocations). Key order carries no meaning.

Timestamps are RFC 3339 UTC strings. The zero timestamp
"0001-01-01T00:00:00Z" means "unset".

Timestamps carry at most microsecond precision. Files written with
nanosecond fractions (e.g. "2024-05-01T10:00:00.123456789Z") load fine,
but the extra digits are dropped and the next save writes
"2024-05-01T10:00:00.123456Z". Only "unset" versus "set" matters for a
revocation, so the lost digits change no behavior.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from ..core.constants import (
    COLLECTION_USERS,
    COLLECTION_CHIRPS,
    COLLECTION_REVOCATIONS,
    NEXT_IDS_KEY,
)


ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?"
    r"(Z|[+-]\d{2}:\d{2})$"
)


class CorruptDataError(Exception):
    """Bytes do not match the expected document schema"""
    pass


# ============================================================================
# Timestamps
# ============================================================================

def format_timestamp(value: datetime) -> str:
    """Render a datetime as RFC 3339 UTC ("Z" suffix)"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)

    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += f".{value.microsecond:06d}"
    return text + "Z"


def parse_timestamp(text: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware UTC datetime

    Fractions beyond microseconds are truncated.

    Raises:
        CorruptDataError: If the text is not a timestamp
    """
    if not isinstance(text, str):
        raise CorruptDataError(f"Timestamp must be a string, got {type(text).__name__}")

    match = _TIMESTAMP_RE.match(text)
    if match is None:
        raise CorruptDataError(f"Invalid timestamp: {text!r}")

    year, month, day, hour, minute, second, fraction, offset = match.groups()
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))

    try:
        if offset == "Z":
            tz = timezone.utc
        else:
            sign = 1 if offset[0] == "+" else -1
            hours, minutes = int(offset[1:3]), int(offset[4:6])
            tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

        value = datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second),
            microsecond, tzinfo=tz,
        )
        return value.astimezone(timezone.utc)
    except (ValueError, OverflowError) as e:
        raise CorruptDataError(f"Invalid timestamp {text!r}: {e}")


# ============================================================================
# Records
# ============================================================================

@dataclass
class Account:
    """A registered user"""
    id: int
    email: str
    password: str         # bcrypt hash, never plaintext
    is_chirpy_red: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage"""
        return {
            "id": self.id,
            "email": self.email,
            "password": self.password,
            "is_chirpy_red": self.is_chirpy_red,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Dictionary without the credential, for API responses"""
        return {
            "id": self.id,
            "email": self.email,
            "is_chirpy_red": self.is_chirpy_red,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        """Create from dictionary (from JSON)"""
        _require_object(data, "user")
        return cls(
            id=_require_int(data, "id"),
            email=_require_str(data, "email"),
            password=_require_str(data, "password"),
            is_chirpy_red=_require_bool(data, "is_chirpy_red"),
        )


@dataclass
class Post:
    """A chirp"""
    id: int
    author_id: int
    body: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage"""
        return {
            "id": self.id,
            "author_id": self.author_id,
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        """Create from dictionary (from JSON)"""
        _require_object(data, "chirp")
        return cls(
            id=_require_int(data, "id"),
            author_id=_require_int(data, "author_id"),
            body=_require_str(data, "body"),
        )


@dataclass
class SessionTokenRecord:
    """Revocation state of one refresh token, keyed by the token string"""
    id: str
    revoked_at: datetime = ZERO_TIME

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at != ZERO_TIME

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage"""
        return {
            "id": self.id,
            "revoked_at": format_timestamp(self.revoked_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionTokenRecord":
        """Create from dictionary (from JSON)"""
        _require_object(data, "revocation")
        return cls(
            id=_require_str(data, "id"),
            revoked_at=parse_timestamp(_require_field(data, "revoked_at")),
        )


@dataclass
class DocumentSet:
    """
    Full content of the database file.

    next_ids holds the next identifier per integer-keyed collection.
    Counters only move forward, so deleting a record never frees its id.
    """
    users: Dict[int, Account] = field(default_factory=dict)
    chirps: Dict[int, Post] = field(default_factory=dict)
    revocations: Dict[str, SessionTokenRecord] = field(default_factory=dict)
    next_ids: Dict[str, int] = field(
        default_factory=lambda: {COLLECTION_USERS: 1, COLLECTION_CHIRPS: 1}
    )

    def allocate_id(self, collection: str) -> int:
        """Reserve and return the next identifier of a collection"""
        records = getattr(self, collection)
        next_id = max(self.next_ids.get(collection, 1), _max_key(records) + 1)
        self.next_ids[collection] = next_id + 1
        return next_id


# ============================================================================
# Codec
# ============================================================================

def encode(documents: DocumentSet) -> bytes:
    """Serialize a document set to UTF-8 JSON"""
    data = {
        COLLECTION_USERS: {
            str(account_id): account.to_dict()
            for account_id, account in documents.users.items()
        },
        COLLECTION_CHIRPS: {
            str(post_id): post.to_dict()
            for post_id, post in documents.chirps.items()
        },
        COLLECTION_REVOCATIONS: {
            token: record.to_dict()
            for token, record in documents.revocations.items()
        },
        NEXT_IDS_KEY: {
            COLLECTION_USERS: max(
                documents.next_ids.get(COLLECTION_USERS, 1),
                _max_key(documents.users) + 1,
            ),
            COLLECTION_CHIRPS: max(
                documents.next_ids.get(COLLECTION_CHIRPS, 1),
                _max_key(documents.chirps) + 1,
            ),
        },
    }
    return json.dumps(data, indent=2, sort_keys=True).encode("utf-8")


def decode(raw: bytes) -> DocumentSet:
    """
    Deserialize a document set

    Files without "next_ids" (written by older versions) get counters
    derived from the highest stored id.

    Raises:
        CorruptDataError: If bytes are not a valid document set
    """
    try:
        data = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise CorruptDataError(f"Database is not UTF-8: {e}")
    except json.JSONDecodeError as e:
        raise CorruptDataError(f"Invalid JSON: {e}")

    _require_object(data, "database")

    users: Dict[int, Account] = {}
    for key, value in _require_collection(data, COLLECTION_USERS).items():
        account = Account.from_dict(value)
        _check_key(COLLECTION_USERS, key, str(account.id))
        users[account.id] = account

    chirps: Dict[int, Post] = {}
    for key, value in _require_collection(data, COLLECTION_CHIRPS).items():
        post = Post.from_dict(value)
        _check_key(COLLECTION_CHIRPS, key, str(post.id))
        chirps[post.id] = post

    revocations: Dict[str, SessionTokenRecord] = {}
    for key, value in _require_collection(data, COLLECTION_REVOCATIONS).items():
        record = SessionTokenRecord.from_dict(value)
        _check_key(COLLECTION_REVOCATIONS, key, record.id)
        revocations[record.id] = record

    stored_ids = data.get(NEXT_IDS_KEY, {})
    _require_object(stored_ids, NEXT_IDS_KEY)
    next_ids = {}
    for collection, records in ((COLLECTION_USERS, users), (COLLECTION_CHIRPS, chirps)):
        stored = stored_ids.get(collection, 1)
        if not isinstance(stored, int) or isinstance(stored, bool) or stored < 1:
            raise CorruptDataError(f"Invalid {NEXT_IDS_KEY}.{collection}: {stored!r}")
        next_ids[collection] = max(stored, _max_key(records) + 1)

    return DocumentSet(
        users=users,
        chirps=chirps,
        revocations=revocations,
        next_ids=next_ids,
    )


# ============================================================================
# Validation helpers
# ============================================================================

def _max_key(records: Dict[Any, Any]) -> int:
    return max((key for key in records if isinstance(key, int)), default=0)


def _check_key(collection: str, key: str, expected: str) -> None:
    if key != expected:
        raise CorruptDataError(
            f"Key {key!r} in {collection} does not match record id {expected!r}"
        )


def _require_object(value: Any, what: str) -> None:
    if not isinstance(value, dict):
        raise CorruptDataError(f"{what} must be an object, got {type(value).__name__}")


def _require_collection(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    if name not in data:
        raise CorruptDataError(f"Missing collection: {name}")
    collection = data[name]
    _require_object(collection, name)
    return collection


def _require_field(data: Dict[str, Any], name: str) -> Any:
    if name not in data:
        raise CorruptDataError(f"Missing field: {name}")
    return data[name]


def _require_int(data: Dict[str, Any], name: str) -> int:
    value = _require_field(data, name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise CorruptDataError(f"Field {name} must be an integer, got {value!r}")
    return value


def _require_str(data: Dict[str, Any], name: str) -> str:
    value = _require_field(data, name)
    if not isinstance(value, str):
        raise CorruptDataError(f"Field {name} must be a string, got {value!r}")
    return value


def _require_bool(data: Dict[str, Any], name: str) -> bool:
    value = _require_field(data, name)
    if not isinstance(value, bool):
        raise CorruptDataError(f"Field {name} must be a boolean, got {value!r}")
    return value
