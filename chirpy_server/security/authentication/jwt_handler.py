"""
JWT Handler - Session token issuing, validation and revocation

Module: security.authentication.jwt_handler
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - Access/refresh pair generation with HS256
  - Issuer claim as the token kind discriminator
  - Refresh token records persisted for revocation
  - Access token refresh from a non-revoked refresh token

ARCHITECTURE:
Refresh token lifecycle:
    Issued (revoked_at unset) --revoke--> Revoked (terminal)

Access tokens have no stored state: they are self-verifying and expire.
Refresh tokens are also checked against their SessionTokenRecord.

Claims:
  - iss: "chirpy-access" or "chirpy-refresh"
  - sub: account id (decimal string)
  - iat / exp: issued-at / expiry (seconds since epoch)
  - jti: random id, keeps two tokens issued in the same second distinct

SECURITY NOTES:
- Secret key must be 32+ characters (entropy)
- A token is expired from the exact "exp" instant onwards
- All times in UTC
- Token strings are never logged, only a short hash
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Tuple

import jwt

from ...core.constants import (
    ACCESS_TOKEN_ISSUER,
    ACCESS_TOKEN_TTL,
    JWT_ALGORITHM,
    MIN_SECRET_LENGTH,
    REFRESH_TOKEN_ISSUER,
    REFRESH_TOKEN_TTL,
    TOKEN_TYPE_BEARER,
)
from ...persistence.codec import SessionTokenRecord
from ...persistence.document_store import DocumentStore, token_fingerprint


class UnauthorizedError(Exception):
    """Token rejected (bad signature, expired, wrong kind...)"""
    pass


class WrongTokenKindError(UnauthorizedError):
    """Refresh token used as access token, or the reverse"""
    pass


class MalformedTokenError(UnauthorizedError):
    """Subject claim is not an account id"""
    pass


class TokenRevokedError(UnauthorizedError):
    """Refresh token has been revoked"""
    pass


@dataclass
class TokenPair:
    """Access and refresh token pair"""
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime
    token_type: str = TOKEN_TYPE_BEARER


class JWTHandler:
    """
    Issues and validates session tokens.

    Uses HS256 (HMAC-SHA256) for signing. Access tokens are stateless;
    refresh tokens are revocable through the DocumentStore.
    """

    def __init__(
        self,
        secret_key: str,
        document_store: DocumentStore,
        algorithm: str = JWT_ALGORITHM,
        access_token_ttl: timedelta = ACCESS_TOKEN_TTL,
        refresh_token_ttl: timedelta = REFRESH_TOKEN_TTL,
    ):
        """
        Initialize JWT handler

        Args:
            secret_key: Secret key for signing (32+ characters)
            document_store: Store holding refresh token records
            algorithm: JWT algorithm (default HS256)
            access_token_ttl: Access token lifetime
            refresh_token_ttl: Refresh token lifetime

        Raises:
            ValueError: If secret_key too short
        """
        if len(secret_key) < MIN_SECRET_LENGTH:
            raise ValueError(f"Secret key must be at least {MIN_SECRET_LENGTH} characters")

        self.logger = logging.getLogger("security.jwt_handler")
        self.secret_key = secret_key
        self.store = document_store
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl

        self.logger.info(
            f"JWT Handler initialized (algo={algorithm}, "
            f"access_expires={access_token_ttl}, "
            f"refresh_expires={refresh_token_ttl})"
        )

    def issue_session_pair(self, account_id: int) -> TokenPair:
        """
        Generate access and refresh token pair

        The refresh token is recorded in the store as not revoked.

        Args:
            account_id: Subject of both tokens

        Returns:
            TokenPair with both tokens and expiration times
        """
        now = datetime.now(timezone.utc)
        access_token, access_exp = self._mint(account_id, ACCESS_TOKEN_ISSUER, self.access_token_ttl, now)
        refresh_token, refresh_exp = self._mint(account_id, REFRESH_TOKEN_ISSUER, self.refresh_token_ttl, now)

        self.store.create_token(refresh_token)

        self.logger.info(f"Session issued for account {account_id}")

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_exp,
            refresh_expires_at=refresh_exp,
        )

    def validate_access_token(self, token: str) -> int:
        """
        Verify an access token and return its account id

        Raises:
            UnauthorizedError: Bad signature or expired
            WrongTokenKindError: Issuer is not "chirpy-access"
            MalformedTokenError: Subject is not an account id
        """
        payload = self._decode(token, ACCESS_TOKEN_ISSUER)
        return self._parse_subject(payload)

    def refresh_access_token(self, refresh_token: str) -> str:
        """
        Generate new access token from a refresh token

        The refresh token itself is not rotated.

        Args:
            refresh_token: Valid, non-revoked refresh token

        Returns:
            New access token (JWT string)

        Raises:
            UnauthorizedError: Bad signature or expired
            WrongTokenKindError: Not a refresh token
            MalformedTokenError: Subject is not an account id
            NotFoundError: Token was never issued by this service
            TokenRevokedError: Token has been revoked
        """
        payload = self._decode(refresh_token, REFRESH_TOKEN_ISSUER)
        account_id = self._parse_subject(payload)

        record = self.store.get_token(refresh_token)
        if record.is_revoked:
            self.logger.warning(
                f"Revoked refresh token presented: {token_fingerprint(refresh_token)}"
            )
            raise TokenRevokedError("This token has been revoked")

        access_token, _ = self._mint(
            account_id,
            ACCESS_TOKEN_ISSUER,
            self.access_token_ttl,
            datetime.now(timezone.utc),
        )

        self.logger.info(f"Access token refreshed for account {account_id}")
        return access_token

    def revoke(self, refresh_token: str) -> SessionTokenRecord:
        """
        Revoke a refresh token

        Args:
            refresh_token: Refresh token to revoke

        Returns:
            Updated SessionTokenRecord

        Raises:
            UnauthorizedError: Bad signature or expired
            WrongTokenKindError: Not a refresh token
            NotFoundError: Token was never issued by this service
        """
        self._decode(refresh_token, REFRESH_TOKEN_ISSUER)
        return self.store.revoke_token(refresh_token)

    def _mint(
        self,
        account_id: int,
        issuer: str,
        ttl: timedelta,
        now: datetime,
    ) -> Tuple[str, datetime]:
        """Sign one token, return it with its expiry"""
        now = now.replace(microsecond=0)
        expires_at = now + ttl
        claims = {
            "iss": issuer,
            "sub": str(account_id),
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": str(uuid.uuid4()),
        }
        token = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return token, expires_at

    def _decode(self, token: str, expected_issuer: str) -> Dict[str, Any]:
        """
        Verify signature, expiry and issuer

        Raises:
            UnauthorizedError: Invalid or expired token
            WrongTokenKindError: Issuer mismatch
        """
        if not token or not isinstance(token, str):
            raise UnauthorizedError("Token must be non-empty string")

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["iss", "sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise UnauthorizedError(f"Token expired: {e}")
        except jwt.InvalidSignatureError as e:
            raise UnauthorizedError(f"Invalid signature: {e}")
        except jwt.DecodeError as e:
            raise UnauthorizedError(f"Decode error: {e}")
        except jwt.InvalidTokenError as e:
            raise UnauthorizedError(f"Invalid token: {e}")

        if payload["iss"] != expected_issuer:
            raise WrongTokenKindError(
                f"Expected {expected_issuer} token, got {payload['iss']!r}"
            )
        return payload

    @staticmethod
    def _parse_subject(payload: Dict[str, Any]) -> int:
        """
        Extract the account id from the "sub" claim

        Raises:
            MalformedTokenError: If sub is not a positive integer
        """
        subject = payload.get("sub")
        if not isinstance(subject, str) or not (subject.isascii() and subject.isdigit()):
            raise MalformedTokenError(f"Invalid subject: {subject!r}")
        account_id = int(subject)
        if account_id < 1:
            raise MalformedTokenError(f"Invalid subject: {subject!r}")
        return account_id
