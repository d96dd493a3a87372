"""Data models for Parcel Notify."""

from parcel_notify.models.submission import (
    PackageSubmission,
    ResultView,
    SubmitResponse,
    SuspendedSubmission,
)
from parcel_notify.models.token import (
    AuthError,
    AuthorizationToken,
    AuthorizedInfo,
    AuthorizeResult,
    IssuedToken,
    PackageKind,
    TokenStatus,
)

__all__ = [
    "AuthError",
    "AuthorizationToken",
    "AuthorizedInfo",
    "AuthorizeResult",
    "IssuedToken",
    "PackageKind",
    "PackageSubmission",
    "ResultView",
    "SubmitResponse",
    "SuspendedSubmission",
    "TokenStatus",
]
