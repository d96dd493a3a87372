"""Form submission and response models.

Blank form fields are treated as missing so the documented defaults apply,
matching how the HTML form posts empty inputs.
"""

import time
from typing import Any

from pydantic import BaseModel, Field, model_validator

NOT_SPECIFIED = "Not specified"


def _tracking_code(prefix: str) -> str:
    """Human-facing tracking code, independent of the token id."""
    return f"{prefix}{str(int(time.time() * 1000))[-6:]}"


class _FormModel(BaseModel):
    """Base for models built from multipart forms."""

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if not (value is None or (isinstance(value, str) and not value.strip()))
            }
        return data


class PackageSubmission(_FormModel):
    """A standard package/task notification request."""

    recipient_email: str
    recipient_name: str = "Customer"
    task_name: str
    special_id: str = Field(default_factory=lambda: _tracking_code("PKG"))
    priority: str = "Standard"
    estimated_time: str = "2-3 business days"
    weight: str = "N/A"
    dimensions: str = "N/A"
    value: str = "N/A"
    address1: str = NOT_SPECIFIED
    address2: str = NOT_SPECIFIED
    message: str = "A new task has been assigned to you."
    locale: str | None = None


class SuspendedSubmission(_FormModel):
    """A notification for a package held before distribution."""

    recipient_email: str
    recipient_name: str = "Customer"
    package_name: str
    special_id: str = Field(default_factory=lambda: _tracking_code("SPD"))
    hold_reason: str = "Pending verification"
    distribution_hub: str = "Main distribution hub"
    contact_message: str = (
        "Your package is waiting at the distribution hub. "
        "Please confirm the delivery so it can be released."
    )
    locale: str | None = None


class SubmitResponse(BaseModel):
    """JSON body returned by both submission endpoints."""

    success: bool
    message: str
    special_id: str | None = Field(default=None, serialization_alias="specialId")
    token: str | None = None


class ResultView(BaseModel):
    """Context for the authorization result page."""

    success: bool
    title: str
    message: str
    sub_message: str
