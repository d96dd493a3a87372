"""Custom exceptions for Parcel Notify."""


class ParcelNotifyError(Exception):
    """Base class for all Parcel Notify errors."""


class ResourceExhaustedError(ParcelNotifyError):
    """Raised when the token store cannot accept another record."""

    def __init__(self, live_tokens: int, max_tokens: int) -> None:
        self.live_tokens = live_tokens
        self.max_tokens = max_tokens
        super().__init__(
            f"Token store full: live={live_tokens}, max={max_tokens}"
        )


class DeliveryError(ParcelNotifyError):
    """A primary-delivery collaborator failed. Fatal for the request."""


class MailDeliveryError(DeliveryError):
    """Raised when an email could not be sent."""


class ImageUploadError(DeliveryError):
    """Raised when an image could not be uploaded to the hosting service."""


class InvalidUploadError(ParcelNotifyError):
    """Raised when a submitted file is not an acceptable image."""


class MapArtifactError(ParcelNotifyError):
    """Raised when map artifacts cannot be built for an address."""
