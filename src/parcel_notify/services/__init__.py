"""External-service adapters for Parcel Notify."""

from parcel_notify.services.i18n import Translator, translate
from parcel_notify.services.mailer import Mailer, SmtpMailer
from parcel_notify.services.maps import MapArtifacts, MapLinker
from parcel_notify.services.renderer import Renderer
from parcel_notify.services.uploader import CloudinaryUploader, ImageUploader

__all__ = [
    "CloudinaryUploader",
    "ImageUploader",
    "Mailer",
    "MapArtifacts",
    "MapLinker",
    "Renderer",
    "SmtpMailer",
    "Translator",
    "translate",
]
