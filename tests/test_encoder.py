"""Tests for data-URI encoding and payload assembly."""
import asyncio
import base64
import time

import encoder
from encoder import build_payload, encode_photos, to_data_uri
from visit_form import PermitType, PhotoFile


def test_to_data_uri():
    photo = PhotoFile(name="a.png", data=b"\x89PNG-data", mime="image/png")
    uri = to_data_uri(photo)
    assert uri.startswith("data:image/png;base64,")
    assert base64.b64decode(uri.split(",", 1)[1]) == b"\x89PNG-data"


def test_encode_photos_preserves_input_order(monkeypatch):
    photos = [PhotoFile(name=f"p{i}", data=bytes([i])) for i in range(3)]
    real = encoder.to_data_uri

    def slow_first(photo):
        # first photo finishes last
        time.sleep({"p0": 0.15, "p1": 0.05, "p2": 0.0}[photo.name])
        return real(photo)

    monkeypatch.setattr(encoder, "to_data_uri", slow_first)
    result = asyncio.run(encode_photos(photos))
    assert result == [real(p) for p in photos]


def test_encode_photos_empty():
    assert asyncio.run(encode_photos([])) == []


def test_build_payload(filled_form):
    filled_form.set_field("contact_phone", " +56 9 1111 2222 ")
    filled_form.set_field("construction_days", 12)
    filled_form.add_route_photo(PhotoFile(name="r1.jpg", data=b"r1"))
    filled_form.add_route_photo(PhotoFile(name="r2.jpg", data=b"r2"))

    payload = asyncio.run(build_payload(filled_form))

    assert payload["projectCode"] == "PRJ-2025-001"
    assert payload["contactPhone"] == "+56 9 1111 2222"
    assert payload["latitude"] == "-33.437916"
    assert payload["longitude"] == "-70.650641"
    assert payload["constructionDays"] == 12
    assert payload["permitsRequired"] is False
    assert payload["permitTypes"] == []
    assert payload["entryPhoto"].startswith("data:image/jpeg;base64,")
    assert payload["sitePhoto"].startswith("data:image/png;base64,")
    assert [base64.b64decode(u.split(",", 1)[1]) for u in payload["routePhotos"]] == [b"r1", b"r2"]


def test_build_payload_sends_permit_types_only_when_required(filled_form):
    filled_form.set_field("permits_required", True)
    filled_form.toggle_permit_type(PermitType.SERVIU)
    payload = asyncio.run(build_payload(filled_form))
    assert payload["permitsRequired"] is True
    assert payload["permitTypes"] == ["serviu"]
