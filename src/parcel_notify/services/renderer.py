"""HTML rendering for emails and browser pages."""

from datetime import datetime, UTC
from functools import partial
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from parcel_notify.models.submission import (
    PackageSubmission,
    ResultView,
    SuspendedSubmission,
)
from parcel_notify.models.token import AuthorizedInfo
from parcel_notify.services.i18n import Translator
from parcel_notify.services.maps import MapArtifacts

TEMPLATE_DIR = Path(__file__).parent / "templates"


class Renderer:
    """Renders the Jinja2 templates shipped with the package.

    Every template gets ``t(key, **params)`` bound to the target locale and
    ``brand`` for the configured brand name.
    """

    def __init__(
        self,
        translator: Translator,
        brand_name: str = "Parcel Notify",
        template_dir: Path = TEMPLATE_DIR,
    ) -> None:
        self.translator = translator
        self.brand_name = brand_name
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _t(self, locale: str | None, key: str, **params) -> str:
        return self.translator.translate(key, locale, params)

    def _render(self, template: str, locale: str | None, **context) -> str:
        return self._env.get_template(template).render(
            t=partial(self._t, locale),
            brand=self.brand_name,
            **context,
        )

    def standard_email(
        self,
        submission: PackageSubmission,
        auth_url: str,
        ttl_minutes: int,
        image_url: str | None = None,
        pickup_map: MapArtifacts | None = None,
        delivery_map: MapArtifacts | None = None,
    ) -> str:
        return self._render(
            "standard_email.html",
            submission.locale,
            data=submission,
            auth_url=auth_url,
            ttl_minutes=ttl_minutes,
            image_url=image_url,
            created_date=datetime.now(UTC).strftime("%Y-%m-%d"),
            pickup_map=pickup_map or MapArtifacts(),
            delivery_map=delivery_map or MapArtifacts(),
        )

    def suspended_email(
        self,
        submission: SuspendedSubmission,
        auth_url: str,
        ttl_minutes: int,
        image_url: str | None = None,
    ) -> str:
        return self._render(
            "suspended_email.html",
            submission.locale,
            data=submission,
            auth_url=auth_url,
            ttl_minutes=ttl_minutes,
            image_url=image_url,
        )

    def admin_notice(self, info: AuthorizedInfo) -> str:
        return self._render(
            "admin_notice.html",
            None,
            info=info,
            authorized_at=datetime.now(UTC).isoformat(timespec="seconds"),
        )

    def result_page(self, view: ResultView, locale: str | None = None) -> str:
        return self._render("result.html", locale, view=view)

    def confirm_page(
        self,
        subject_name: str,
        action_url: str,
        locale: str | None = None,
    ) -> str:
        return self._render(
            "confirm.html",
            locale,
            subject_name=subject_name,
            action_url=action_url,
        )

    def index_page(self) -> str:
        return self._render("index.html", None)
