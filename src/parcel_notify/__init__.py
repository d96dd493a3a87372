"""Parcel Notify - package notifications with short-lived authorization links."""

__version__ = "0.1.0"

from parcel_notify.exceptions import (
    DeliveryError,
    ImageUploadError,
    MailDeliveryError,
    ParcelNotifyError,
    ResourceExhaustedError,
)
from parcel_notify.store import TokenStore, TokenSweeper

__all__ = [
    "__version__",
    "DeliveryError",
    "ImageUploadError",
    "MailDeliveryError",
    "ParcelNotifyError",
    "ResourceExhaustedError",
    "TokenStore",
    "TokenSweeper",
]
