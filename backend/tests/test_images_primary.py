# backend/tests/test_images_primary.py
from __future__ import annotations

import pytest
from fastapi import HTTPException

from househunt.services import images

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 32


def _upload(backend, session, home, name="a.png"):
    return images.upload_image(
        backend, session=session, home_id=home.id, content=PNG, content_type="image/png", filename=name
    )


def _primaries(backend, session, home) -> list[str]:
    return [i.id for i in images.list_images(backend, session=session, home_id=home.id) if i.is_primary]


def test_first_upload_is_primary_and_creates_bucket(backend, session, home):
    first = _upload(backend, session, home)
    second = _upload(backend, session, home, "b.png")

    assert first.is_primary is True
    assert second.is_primary is False
    assert [b["name"] for b in backend.storage.list_buckets().data] == ["home-images"]
    assert first.image_url.startswith(backend.storage.base + "/storage/v1/object/public/home-images/" + home.id + "/")
    assert first.image_url.endswith(".png")


def test_set_primary_leaves_exactly_one(backend, session, home):
    a = _upload(backend, session, home)
    b = _upload(backend, session, home, "b.png")
    c = _upload(backend, session, home, "c.png")

    images.set_primary_image(backend, session=session, image_id=c.id)
    assert _primaries(backend, session, home) == [c.id]

    images.set_primary_image(backend, session=session, image_id=b.id)
    assert _primaries(backend, session, home) == [b.id]
    assert a.id not in _primaries(backend, session, home)


def test_deleting_primary_promotes_newest_remaining(backend, session, home):
    a = _upload(backend, session, home)
    b = _upload(backend, session, home, "b.png")

    images.delete_image(backend, session=session, image_id=a.id)

    assert _primaries(backend, session, home) == [b.id]


def test_rejects_wrong_type_and_empty_body(backend, session, home):
    with pytest.raises(HTTPException) as e:
        images.upload_image(backend, session=session, home_id=home.id, content=b"x", content_type="text/plain")
    assert e.value.status_code == 415

    with pytest.raises(HTTPException) as e:
        images.upload_image(backend, session=session, home_id=home.id, content=b"", content_type="image/png")
    assert e.value.status_code == 400


def test_unknown_image_is_404(backend, session):
    with pytest.raises(HTTPException) as e:
        images.set_primary_image(backend, session=session, image_id="missing")
    assert e.value.status_code == 404


def test_concurrent_primary_claims_settle_on_the_oldest(backend, session, home):
    table = backend.table("home_images", session=session)
    older = table.insert(
        {"home_id": home.id, "image_url": "http://x/a.png", "is_primary": True, "created_at": "2026-01-01T00:00:00Z"}
    ).execute().unwrap()[0]
    table.insert(
        {"home_id": home.id, "image_url": "http://x/b.png", "is_primary": True, "created_at": "2026-01-02T00:00:00Z"}
    ).execute().unwrap()

    assert images.settle_primary(backend, session=session, home_id=home.id) == older["id"]
    assert _primaries(backend, session, home) == [older["id"]]


def test_settle_primary_with_no_photos(backend, session, home):
    assert images.settle_primary(backend, session=session, home_id=home.id) is None
