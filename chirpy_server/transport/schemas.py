"""
Request records - One typed record per endpoint

Module: transport.schemas
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Credentials, chirp and webhook request records
  - Strict parsing: unknown, missing and mistyped fields are rejected

Responses are plain dicts built from the persistence records
(Account.to_public_dict, Post.to_dict).
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Type

from ..core.constants import POLKA_EVENT_USER_UPGRADED

# bcrypt only uses the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class RequestValidationError(ValueError):
    """Request body does not match the endpoint's record"""
    pass


def _parse_fields(payload: Any, fields: Dict[str, Type], what: str) -> Tuple[Any, ...]:
    """
    Check that payload is an object with exactly these fields and types

    Returns:
        Field values in declaration order

    Raises:
        RequestValidationError: On non-object, unknown, missing or mistyped fields
    """
    if not isinstance(payload, dict):
        raise RequestValidationError(f"{what} must be a JSON object")

    unknown = sorted(set(payload) - set(fields))
    if unknown:
        raise RequestValidationError(f"Unknown field(s) in {what}: {', '.join(unknown)}")

    values = []
    for name, expected in fields.items():
        if name not in payload:
            raise RequestValidationError(f"Missing field in {what}: {name}")
        value = payload[name]
        # bool is a subclass of int
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise RequestValidationError(
                f"Field {name} in {what} must be of type {expected.__name__}"
            )
        values.append(value)
    return tuple(values)


@dataclass
class CredentialsRequest:
    """Body of POST /api/users, PUT /api/users and POST /api/login"""
    email: str
    password: str

    @classmethod
    def from_json(cls, payload: Any) -> "CredentialsRequest":
        email, password = _parse_fields(payload, {"email": str, "password": str}, "credentials")
        if not email.strip():
            raise RequestValidationError("Email must not be empty")
        if not password:
            raise RequestValidationError("Password must not be empty")
        try:
            password_bytes = password.encode()
        except UnicodeEncodeError:
            raise RequestValidationError("Password must be valid UTF-8")
        if len(password_bytes) > MAX_PASSWORD_BYTES:
            raise RequestValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            )
        return cls(email=email, password=password)


@dataclass
class ChirpRequest:
    """Body of POST /api/chirps and POST /api/validate_chirp"""
    body: str

    @classmethod
    def from_json(cls, payload: Any) -> "ChirpRequest":
        (body,) = _parse_fields(payload, {"body": str}, "chirp")
        return cls(body=body)


@dataclass
class PolkaWebhookRequest:
    """
    Body of POST /api/polka/webhooks

    data is only interpreted for "user.upgraded" events.
    """
    event: str
    data: Dict[str, Any]

    @classmethod
    def from_json(cls, payload: Any) -> "PolkaWebhookRequest":
        event, data = _parse_fields(payload, {"event": str, "data": dict}, "webhook")
        return cls(event=event, data=data)

    @property
    def is_user_upgrade(self) -> bool:
        return self.event == POLKA_EVENT_USER_UPGRADED

    @property
    def user_id(self) -> int:
        """
        Raises:
            RequestValidationError: If data is not {"user_id": <int>}
        """
        (user_id,) = _parse_fields(self.data, {"user_id": int}, "webhook data")
        return user_id
