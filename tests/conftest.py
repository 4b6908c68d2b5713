"""
Pytest Configuration and Fixtures

Provides shared fixtures for testing the API: isolated settings backed by a
temporary SQLite file, an application built through the factory, and a fake
mail transport that records messages instead of talking to SMTP.
"""

import base64
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlmodel import Session

from goldstar.core.config import Settings
from goldstar.core.errors import DeliverySubmissionError
from goldstar.db.session import make_engine, create_db_and_tables
from goldstar.services.blog import BlogService
from goldstar.services.images import ImagePipeline


class FakeMailer:
    """Records messages; set ``fail_with`` to simulate a refused submission."""

    def __init__(self):
        self.sent = []
        self.fail_with = None

    def send(self, message):
        if self.fail_with:
            raise DeliverySubmissionError(self.fail_with)
        self.sent.append(message)

    def verify(self):
        return True


def make_image(width=1200, height=600, mode="RGB", fmt="PNG", color=(200, 30, 30)):
    """Encode a solid-colour test image."""
    if mode in ("RGBA", "LA"):
        color = (*color, 128) if mode == "RGBA" else (128, 128)
    elif mode == "L":
        color = 128
    elif mode == "P":
        color = 3
    img = Image.new(mode, (width, height), color)
    out = BytesIO()
    img.save(out, format=fmt)
    return out.getvalue()


def as_data_uri(raw, media_type="image/png"):
    return f"data:{media_type};base64,{base64.b64encode(raw).decode('ascii')}"


def decode_data_uri_image(uri):
    """Open a ``data:image/jpeg;base64,...`` URI with Pillow."""
    assert uri.startswith("data:image/jpeg;base64,")
    raw = base64.b64decode(uri.split(";base64,", 1)[1])
    return Image.open(BytesIO(raw))


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to the test's temporary directory."""
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        RECIPIENT_EMAIL="staff@goldstar.test",
        MAIL_USERNAME="bookings@goldstar.test",
        SMTP_VERIFY_ON_STARTUP=False,
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(settings, mailer):
    """Application instance wired to the fake mailer."""
    from goldstar.main import create_app
    from goldstar.routers.booking import get_mailer

    app = create_app(settings)
    app.dependency_overrides[get_mailer] = lambda: mailer
    return app


@pytest.fixture
def client(app):
    """Test client with the lifespan (database setup) running."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def engine(settings):
    engine = make_engine(settings.DATABASE_URL)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def blog_service(session, settings):
    return BlogService(session, ImagePipeline(), settings.BLOG_UPLOAD_DIR)


@pytest.fixture
def image_factory():
    """Factory for encoded test images, see ``make_image``."""
    return make_image


@pytest.fixture
def data_uri():
    return as_data_uri


@pytest.fixture
def open_jpeg():
    return decode_data_uri_image
