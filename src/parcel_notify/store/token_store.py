"""In-memory store for short-lived package authorization tokens."""

from __future__ import annotations

import secrets
import threading
from datetime import UTC, datetime, timedelta
from typing import Callable

from parcel_notify.exceptions import ResourceExhaustedError
from parcel_notify.models.token import (
    AuthorizationToken,
    AuthorizedInfo,
    AuthorizeResult,
    IssuedToken,
    PackageKind,
    TokenStatus,
)

DEFAULT_TTL = timedelta(minutes=20)
DEFAULT_ENTROPY_BITS = 256
MIN_ENTROPY_BITS = 128
DEFAULT_MAX_TOKENS = 10_000

# Retries on id collision before giving up; only reachable with a broken RNG
_MAX_ID_ATTEMPTS = 8


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenStore:
    """Issues unguessable, time-bounded tokens and answers queries about them.

    Every operation takes the same lock for its whole read-modify-write, so
    calls on a given id are linearizable. Expiry is checked against the
    clock on every read; sweep() only bounds memory.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        entropy_bits: int = DEFAULT_ENTROPY_BITS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        if entropy_bits < MIN_ENTROPY_BITS or entropy_bits % 8:
            raise ValueError(
                f"entropy_bits must be a multiple of 8 and at least {MIN_ENTROPY_BITS}"
            )
        if max_tokens < 1:
            raise ValueError("max_tokens must be at least 1")

        self._ttl = ttl
        self._id_bytes = entropy_bits // 8
        self._max_tokens = max_tokens
        self._clock = clock
        self._tokens: dict[str, AuthorizationToken] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(
        self,
        subject_name: str,
        kind: PackageKind = PackageKind.STANDARD,
        locale: str = "en",
        recipient_contact: str = "",
    ) -> IssuedToken:
        """Create and store a new token.

        Raises:
            ResourceExhaustedError: If the store is full of live tokens.
        """
        with self._lock:
            now = self._clock()
            if len(self._tokens) >= self._max_tokens:
                self._purge_expired(now)
                if len(self._tokens) >= self._max_tokens:
                    raise ResourceExhaustedError(len(self._tokens), self._max_tokens)

            token_id = self._new_id()
            record = AuthorizationToken(
                id=token_id,
                recipient_contact=recipient_contact,
                subject_name=subject_name,
                kind=kind,
                created_at=now,
                expires_at=now + self._ttl,
                locale=locale,
            )
            self._tokens[token_id] = record

        return IssuedToken(token_id=token_id, expires_at=record.expires_at)

    def authorize(self, token_id: str) -> AuthorizeResult:
        """Mark a live token as authorized.

        Idempotent while the token is live. Expired tokens are rejected even
        if the sweep has not removed them yet.
        """
        with self._lock:
            record = self._tokens.get(token_id)
            if record is None or record.is_expired(self._clock()):
                return AuthorizeResult.not_found()

            first = not record.authorized
            if first:
                record = record.model_copy(update={"authorized": True})
                self._tokens[token_id] = record

        return AuthorizeResult(
            ok=True,
            info=AuthorizedInfo(
                subject_name=record.subject_name,
                kind=record.kind,
                locale=record.locale,
                first_authorization=first,
            ),
        )

    def status(self, token_id: str) -> TokenStatus:
        """Report a token's state without modifying it."""
        with self._lock:
            record = self._tokens.get(token_id)
            now = self._clock()

        if record is None:
            return TokenStatus(exists=False)

        expired = record.is_expired(now)
        return TokenStatus(
            exists=True,
            authorized=record.authorized,
            expired=expired,
            subject_name=record.subject_name,
            time_remaining=timedelta(0) if expired else record.time_remaining(now),
            locale=record.locale,
        )

    def sweep(self) -> int:
        """Remove every token past its expiry.

        Returns the number of tokens removed.
        """
        with self._lock:
            return self._purge_expired(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def __contains__(self, token_id: object) -> bool:
        with self._lock:
            return token_id in self._tokens

    # Callers must hold self._lock

    def _purge_expired(self, now: datetime) -> int:
        expired = [
            token_id
            for token_id, record in self._tokens.items()
            if record.is_expired(now)
        ]
        for token_id in expired:
            del self._tokens[token_id]
        return len(expired)

    def _new_id(self) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            token_id = secrets.token_hex(self._id_bytes)
            if token_id not in self._tokens:
                return token_id
        raise RuntimeError("Could not generate a unique token id")
