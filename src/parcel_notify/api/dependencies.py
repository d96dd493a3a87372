"""FastAPI dependencies for collaborators owned by the application.

All collaborators live on ``app.state`` and are created in ``create_app()``,
so each app instance (and each test) has its own token store.
"""

from typing import Annotated

from fastapi import Depends, Request

from parcel_notify.config import Settings
from parcel_notify.services.mailer import Mailer
from parcel_notify.services.maps import MapLinker
from parcel_notify.services.renderer import Renderer
from parcel_notify.services.uploader import ImageUploader
from parcel_notify.store.token_store import TokenStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_store(request: Request) -> TokenStore:
    return request.app.state.token_store


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_uploader(request: Request) -> ImageUploader:
    return request.app.state.uploader


def get_map_linker(request: Request) -> MapLinker:
    return request.app.state.map_linker


def get_renderer(request: Request) -> Renderer:
    return request.app.state.renderer


# Type aliases for dependency injection
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Store = Annotated[TokenStore, Depends(get_token_store)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]
UploaderDep = Annotated[ImageUploader, Depends(get_uploader)]
MapsDep = Annotated[MapLinker, Depends(get_map_linker)]
RendererDep = Annotated[Renderer, Depends(get_renderer)]
