"""FastAPI routes for package notifications and token authorization."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, JSONResponse

from parcel_notify import __version__
from parcel_notify.api.dependencies import (
    AppSettings,
    MailerDep,
    MapsDep,
    RendererDep,
    Store,
    UploaderDep,
)
from parcel_notify.config import Settings
from parcel_notify.exceptions import DeliveryError, InvalidUploadError
from parcel_notify.models.submission import (
    PackageSubmission,
    ResultView,
    SubmitResponse,
    SuspendedSubmission,
)
from parcel_notify.models.token import AuthorizedInfo, PackageKind
from parcel_notify.services.mailer import Mailer
from parcel_notify.services.renderer import Renderer
from parcel_notify.store.token_store import TokenStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _short(token_id: str) -> str:
    """Token prefix safe to log."""
    return f"{token_id[:8]}..."


async def _read_image(
    upload: UploadFile | None,
    settings: Settings,
) -> tuple[bytes, str] | None:
    """Validate an optional uploaded image and return (content, filename).

    Raises:
        InvalidUploadError: If the file is not an image or is too large.
    """
    if upload is None or not upload.filename:
        return None

    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        raise InvalidUploadError("Only image files allowed!")

    content = await upload.read()
    if len(content) > settings.max_upload_size_bytes:
        raise InvalidUploadError(
            f"Image exceeds {settings.max_upload_size_mb}MB limit"
        )
    return content, upload.filename


def _auth_url(request: Request, settings: Settings, token_id: str) -> str:
    if settings.public_base_url:
        return f"{settings.public_base_url.rstrip('/')}/authorize/{token_id}"
    return str(request.url_for("authorize_link", token_id=token_id))


def _ttl_minutes(store: TokenStore) -> int:
    return max(1, int(store.ttl.total_seconds() // 60))


def _failure(renderer: Renderer, error: Exception, code: int) -> JSONResponse:
    message = renderer.translator.translate(
        "submit.failed", params={"error": str(error)}
    )
    body = SubmitResponse(success=False, message=message)
    return JSONResponse(
        status_code=code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def _success(message: str, special_id: str, token_id: str) -> dict:
    body = SubmitResponse(
        success=True,
        message=message,
        special_id=special_id,
        token=token_id,
    )
    return body.model_dump(by_alias=True)


def _result_view(
    renderer: Renderer,
    outcome: str,
    locale: str | None,
    name: str = "",
) -> ResultView:
    """Build a result page from the result.<outcome>.* catalog keys."""
    t = renderer.translator.translate
    params = {"name": name}
    return ResultView(
        success=outcome != "expired",
        title=t(f"result.{outcome}.title", locale, params),
        message=t(f"result.{outcome}.message", locale, params),
        sub_message=t(f"result.{outcome}.sub_message", locale, params),
    )


def _expired_page(renderer: Renderer, locale: str | None = None) -> HTMLResponse:
    view = _result_view(renderer, "expired", locale)
    return HTMLResponse(
        renderer.result_page(view, locale),
        status_code=status.HTTP_410_GONE,
    )


async def _notify_admin(
    mailer: Mailer,
    renderer: Renderer,
    admin_email: str,
    info: AuthorizedInfo,
) -> None:
    """Tell the operator a package was authorized. Failures are only logged."""
    subject = renderer.translator.translate(
        "email.admin_subject", params={"name": info.subject_name}
    )
    try:
        await mailer.send(admin_email, subject, renderer.admin_notice(info))
    except DeliveryError as e:
        logger.warning(f"Admin notification failed: {e}")


@router.get("/", response_class=HTMLResponse)
async def index(renderer: RendererDep) -> HTMLResponse:
    """Submission form."""
    return HTMLResponse(renderer.index_page())


@router.get("/health")
async def health(store: Store) -> dict:
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
        "live_tokens": len(store),
    }


@router.post("/send-task")
async def send_task(
    request: Request,
    settings: AppSettings,
    store: Store,
    mailer: MailerDep,
    uploader: UploaderDep,
    maps: MapsDep,
    renderer: RendererDep,
    recipient_email: Annotated[str, Form(alias="recipientEmail")],
    task_name: Annotated[str, Form(alias="taskName")],
    recipient_name: Annotated[str | None, Form(alias="recipientName")] = None,
    special_id: Annotated[str | None, Form(alias="specialId")] = None,
    priority: Annotated[str | None, Form()] = None,
    estimated_time: Annotated[str | None, Form(alias="estimatedTime")] = None,
    weight: Annotated[str | None, Form()] = None,
    dimensions: Annotated[str | None, Form()] = None,
    value: Annotated[str | None, Form()] = None,
    address1: Annotated[str | None, Form()] = None,
    address2: Annotated[str | None, Form()] = None,
    message: Annotated[str | None, Form()] = None,
    locale: Annotated[str | None, Form()] = None,
    task_image: Annotated[UploadFile | None, File(alias="taskImage")] = None,
):
    """Send a standard package notification with an authorization link."""
    logger.info("Received task request")

    submission = PackageSubmission(
        recipient_email=recipient_email,
        recipient_name=recipient_name,
        task_name=task_name,
        special_id=special_id,
        priority=priority,
        estimated_time=estimated_time,
        weight=weight,
        dimensions=dimensions,
        value=value,
        address1=address1,
        address2=address2,
        message=message,
        locale=locale,
    )

    try:
        image = await _read_image(task_image, settings)
    except InvalidUploadError as e:
        return _failure(renderer, e, status.HTTP_400_BAD_REQUEST)

    issued = store.issue(
        subject_name=submission.task_name,
        kind=PackageKind.STANDARD,
        locale=submission.locale or settings.default_locale,
        recipient_contact=submission.recipient_email,
    )
    logger.info(f"Issued token {_short(issued.token_id)} for {submission.special_id}")

    try:
        image_url = None
        if image is not None:
            image_url = await uploader.upload(
                image[0], image[1], settings.upload_folder_standard
            )

        pickup_map = await maps.address_to_map_artifacts(submission.address1)
        delivery_map = await maps.address_to_map_artifacts(submission.address2)

        html = renderer.standard_email(
            submission,
            auth_url=_auth_url(request, settings, issued.token_id),
            ttl_minutes=_ttl_minutes(store),
            image_url=image_url,
            pickup_map=pickup_map,
            delivery_map=delivery_map,
        )
        subject = renderer.translator.translate(
            "email.standard_subject",
            submission.locale,
            {"name": submission.task_name, "special_id": submission.special_id},
        )
        await mailer.send(submission.recipient_email, subject, html)

    except DeliveryError as e:
        logger.error(f"Error in /send-task: {e}")
        return _failure(renderer, e, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return _success(
        renderer.translator.translate("submit.standard_sent", submission.locale),
        submission.special_id,
        issued.token_id,
    )


@router.post("/send-suspended-package")
async def send_suspended_package(
    request: Request,
    settings: AppSettings,
    store: Store,
    mailer: MailerDep,
    uploader: UploaderDep,
    renderer: RendererDep,
    recipient_email: Annotated[str, Form(alias="recipientEmail")],
    package_name: Annotated[str, Form(alias="packageName")],
    recipient_name: Annotated[str | None, Form(alias="recipientName")] = None,
    special_id: Annotated[str | None, Form(alias="specialId")] = None,
    hold_reason: Annotated[str | None, Form(alias="holdReason")] = None,
    distribution_hub: Annotated[str | None, Form(alias="distributionHub")] = None,
    contact_message: Annotated[str | None, Form(alias="contactMessage")] = None,
    locale: Annotated[str | None, Form()] = None,
    package_image: Annotated[UploadFile | None, File(alias="packageImage")] = None,
):
    """Send a notification for a package held at a distribution hub."""
    logger.info("Received suspended package request")

    submission = SuspendedSubmission(
        recipient_email=recipient_email,
        recipient_name=recipient_name,
        package_name=package_name,
        special_id=special_id,
        hold_reason=hold_reason,
        distribution_hub=distribution_hub,
        contact_message=contact_message,
        locale=locale,
    )

    try:
        image = await _read_image(package_image, settings)
    except InvalidUploadError as e:
        return _failure(renderer, e, status.HTTP_400_BAD_REQUEST)

    issued = store.issue(
        subject_name=submission.package_name,
        kind=PackageKind.SUSPENDED,
        locale=submission.locale or settings.default_locale,
        recipient_contact=submission.recipient_email,
    )
    logger.info(f"Issued token {_short(issued.token_id)} for {submission.special_id}")

    try:
        image_url = None
        if image is not None:
            image_url = await uploader.upload(
                image[0], image[1], settings.upload_folder_suspended
            )

        html = renderer.suspended_email(
            submission,
            auth_url=_auth_url(request, settings, issued.token_id),
            ttl_minutes=_ttl_minutes(store),
            image_url=image_url,
        )
        subject = renderer.translator.translate(
            "email.suspended_subject",
            submission.locale,
            {"name": submission.package_name, "special_id": submission.special_id},
        )
        await mailer.send(submission.recipient_email, subject, html)

    except DeliveryError as e:
        logger.error(f"Error in /send-suspended-package: {e}")
        return _failure(renderer, e, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return _success(
        renderer.translator.translate("submit.suspended_sent", submission.locale),
        submission.special_id,
        issued.token_id,
    )


async def _authorize(
    token_id: str,
    store: TokenStore,
    settings: Settings,
    mailer: Mailer,
    renderer: Renderer,
    background_tasks: BackgroundTasks,
) -> HTMLResponse:
    result = store.authorize(token_id)
    if not result.ok:
        logger.info(f"Authorization rejected for {_short(token_id)}")
        # Tokens still held past expiry keep their language
        return _expired_page(renderer, store.status(token_id).locale)

    info = result.info
    logger.info(f"Token {_short(token_id)} authorized ({info.kind.value})")

    if info.first_authorization and settings.admin_email:
        background_tasks.add_task(
            _notify_admin, mailer, renderer, settings.admin_email, info
        )

    view = _result_view(renderer, info.kind.value, info.locale, info.subject_name)
    return HTMLResponse(renderer.result_page(view, info.locale))


@router.get("/authorize/{token_id}", name="authorize_link", response_class=HTMLResponse)
async def authorize_link(
    token_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    settings: AppSettings,
    store: Store,
    mailer: MailerDep,
    renderer: RendererDep,
) -> HTMLResponse:
    """Link clicked from the email.

    Authorizes immediately unless confirmation is required, in which case a
    page with a POST form is shown and nothing changes yet.
    """
    if settings.authorize_requires_confirmation:
        token_status = store.status(token_id)
        if not token_status.exists or token_status.expired:
            return _expired_page(renderer, token_status.locale)
        return HTMLResponse(
            renderer.confirm_page(
                token_status.subject_name,
                str(request.url_for("authorize_confirm", token_id=token_id)),
                token_status.locale,
            )
        )

    return await _authorize(
        token_id, store, settings, mailer, renderer, background_tasks
    )


@router.post("/authorize/{token_id}", name="authorize_confirm", response_class=HTMLResponse)
async def authorize_confirm(
    token_id: str,
    background_tasks: BackgroundTasks,
    settings: AppSettings,
    store: Store,
    mailer: MailerDep,
    renderer: RendererDep,
) -> HTMLResponse:
    """Explicit confirmation from the confirmation page."""
    return await _authorize(
        token_id, store, settings, mailer, renderer, background_tasks
    )


@router.get("/status/{token_id}")
async def token_status(token_id: str, store: Store) -> JSONResponse:
    """Report whether a token exists, is authorized, and how long it has left."""
    return JSONResponse(store.status(token_id).to_response())
