"""Pytest configuration and fixtures for Site Visit tests."""
import base64
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from config import DEFAULTS
from server import create_app
from visit_form import PhotoFile, VisitForm


def make_image_bytes(fmt="JPEG", size=(64, 48), color=(200, 30, 30)):
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def to_uri(data, mime="image/jpeg"):
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


@pytest.fixture
def jpeg_uri():
    return to_uri(make_image_bytes("JPEG"))


@pytest.fixture
def png_uri():
    return to_uri(make_image_bytes("PNG", color=(10, 120, 10)), mime="image/png")


@pytest.fixture
def visit_payload(jpeg_uri, png_uri):
    """A complete Visit Record as the form would post it."""
    return {
        "projectCode": "PRJ-2025-001",
        "clientName": "Acme Telecom",
        "contactName": "Jane Roe",
        "contactPhone": "+56 9 1234 5678",
        "latitude": "-33.437916",
        "longitude": "-70.650641",
        "constructionDays": 15,
        "permitsRequired": True,
        "permitTypes": ["municipal", "serviu"],
        "entryPhoto": jpeg_uri,
        "routePhotos": [png_uri, jpeg_uri],
        "sitePhoto": jpeg_uri,
    }


@pytest.fixture
def photo():
    return PhotoFile(name="entry.jpg", data=make_image_bytes("JPEG"), mime="image/jpeg")


@pytest.fixture
def filled_form(photo):
    """A VisitForm that passes the validation gate."""
    form = VisitForm(
        project_code="PRJ-2025-001",
        client_name="Acme Telecom",
        contact_name="Jane Roe",
        latitude="-33.437916",
        longitude="-70.650641",
    )
    form.set_entry_photo(photo)
    form.set_site_photo(PhotoFile(name="site.png", data=make_image_bytes("PNG"), mime="image/png"))
    return form


@pytest.fixture
def app():
    """Create a render app with default settings."""
    return create_app(dict(DEFAULTS))


@pytest.fixture
def client(app):
    """A test client for the render app."""
    return TestClient(app)
