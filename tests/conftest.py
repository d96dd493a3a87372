"""Global test configuration for Parcel Notify."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from parcel_notify.config import Settings, get_settings
from parcel_notify.main import create_app
from parcel_notify.services.maps import MapLinker
from parcel_notify.store.token_store import TokenStore


class FakeClock:
    """Manually advanced UTC clock for deterministic expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Make every test read settings fresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> TokenStore:
    """A fresh 20-minute store driven by the fake clock."""
    return TokenStore(ttl=timedelta(minutes=20), clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        smtp_username="sender@example.com",
        smtp_password="app-password",
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
        mapbox_token=None,
        admin_email=None,
    )


@pytest.fixture
def mock_mailer() -> AsyncMock:
    mailer = AsyncMock()
    mailer.send = AsyncMock(return_value=None)
    return mailer


@pytest.fixture
def mock_uploader() -> AsyncMock:
    uploader = AsyncMock()
    uploader.upload = AsyncMock(return_value="https://res.cloudinary.com/demo/image.png")
    return uploader


@pytest.fixture
def app(settings, store, mock_mailer, mock_uploader):
    """Application wired to the fake clock store and mocked collaborators."""
    return create_app(
        settings=settings,
        token_store=store,
        mailer=mock_mailer,
        uploader=mock_uploader,
        map_linker=MapLinker(access_token=None),
    )
