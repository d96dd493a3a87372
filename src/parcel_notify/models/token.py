"""Authorization token models.

A token is the sole access-control factor for the authorize action, so the
id is generated from a CSPRNG and records are replaced wholesale rather than
mutated in place.
"""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict


class PackageKind(str, Enum):
    """Which notification/result variant a token belongs to."""

    STANDARD = "standard"
    SUSPENDED = "suspended"


class AuthError(str, Enum):
    """Reasons an authorize call can fail."""

    NOT_FOUND = "not_found"  # Unknown, evicted, or past expires_at


class AuthorizationToken(BaseModel):
    """One pending or resolved authorization request."""

    model_config = ConfigDict(frozen=True)

    id: str
    recipient_contact: str
    subject_name: str
    kind: PackageKind = PackageKind.STANDARD
    created_at: datetime
    expires_at: datetime
    authorized: bool = False
    locale: str = "en"

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def time_remaining(self, now: datetime) -> timedelta:
        return max(timedelta(0), self.expires_at - now)


class IssuedToken(BaseModel):
    """What the issuer gets back to build an authorization link."""

    token_id: str
    expires_at: datetime


class AuthorizedInfo(BaseModel):
    """Snapshot returned by a successful authorize call."""

    subject_name: str
    kind: PackageKind
    locale: str
    first_authorization: bool = False  # True only on the false->true transition


class AuthorizeResult(BaseModel):
    """Outcome of TokenStore.authorize()."""

    ok: bool
    info: AuthorizedInfo | None = None
    error: AuthError | None = None

    @classmethod
    def not_found(cls) -> "AuthorizeResult":
        return cls(ok=False, error=AuthError.NOT_FOUND)


class TokenStatus(BaseModel):
    """Read-only view of a token's state."""

    exists: bool
    authorized: bool = False
    expired: bool = False
    subject_name: str | None = None
    time_remaining: timedelta = timedelta(0)
    locale: str | None = None  # Not part of the JSON payload

    def to_response(self) -> dict:
        """Render the JSON body served by the status endpoint."""
        if not self.exists:
            return {"exists": False, "message": "Token not found"}
        return {
            "exists": True,
            "authorized": self.authorized,
            "expired": self.expired,
            "subjectName": self.subject_name,
            "timeRemaining": int(self.time_remaining.total_seconds() * 1000),
        }
