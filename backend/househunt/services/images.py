# backend/househunt/services/images.py
from __future__ import annotations

import logging
import mimetypes
import uuid
from typing import Optional

from fastapi import HTTPException

from ..clients import AuthSession, Backend
from ..config import Settings, settings as default_settings
from ..schemas import ImageOut
from .ownership import must_get_home, must_get_row

log = logging.getLogger("househunt.images")

_EXT_BY_TYPE = {"image/jpeg": "jpg", "image/png": "png", "image/gif": "gif"}


def ensure_bucket(backend: Backend, *, session: AuthSession | None, cfg: Settings = default_settings) -> None:
    """Create the public photo bucket on first use."""
    buckets = backend.storage.list_buckets(session=session).unwrap() or []
    if any((b.get("name") or b.get("id")) == cfg.image_bucket for b in buckets):
        return

    res = backend.storage.create_bucket(
        cfg.image_bucket,
        public=True,
        file_size_limit=cfg.image_max_bytes,
        allowed_mime_types=cfg.image_mime_types,
        session=session,
    )
    # 409: another upload created it first.
    if res.error is not None and res.error.status_code != 409:
        raise res.error
    log.info("storage bucket %s created", cfg.image_bucket)


def _extension(filename: Optional[str], content_type: str) -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].strip().lower()
        if ext:
            return ext
    guessed = _EXT_BY_TYPE.get(content_type) or (mimetypes.guess_extension(content_type) or "").lstrip(".")
    return guessed or "bin"


def list_images(backend: Backend, *, session: AuthSession | None, home_id: str) -> list[ImageOut]:
    rows = (
        backend.table("home_images", session=session)
        .select()
        .eq("home_id", home_id)
        .order("created_at", ascending=False)
        .execute()
        .unwrap()
    )
    return [ImageOut.model_validate(r) for r in rows or []]


def upload_image(
    backend: Backend,
    *,
    session: AuthSession | None,
    home_id: str,
    content: bytes,
    content_type: str,
    filename: Optional[str] = None,
    cfg: Settings = default_settings,
) -> ImageOut:
    """
    Store a photo under <home_id>/<random>.<ext> and record it. The home's
    first photo becomes its primary.
    """
    content_type = (content_type or "").split(";", 1)[0].strip().lower()
    if not content:
        raise HTTPException(status_code=400, detail="empty upload")
    if content_type not in cfg.image_mime_types:
        raise HTTPException(status_code=415, detail=f"unsupported image type: {content_type or 'unknown'}")
    if len(content) > cfg.image_max_bytes:
        raise HTTPException(status_code=413, detail=f"image exceeds {cfg.image_max_bytes} bytes")

    must_get_home(backend, session=session, home_id=home_id)
    ensure_bucket(backend, session=session, cfg=cfg)

    path = f"{home_id}/{uuid.uuid4().hex}.{_extension(filename, content_type)}"
    backend.storage.upload(cfg.image_bucket, path, content, content_type=content_type, session=session).unwrap()
    url = backend.storage.get_public_url(cfg.image_bucket, path)

    existing = (
        backend.table("home_images", session=session).select("id").eq("home_id", home_id).limit(1).execute().unwrap()
    )
    record = {"home_id": home_id, "image_url": url, "is_primary": not existing}
    row = backend.table("home_images", session=session).insert(record).execute().unwrap()[0]
    if record["is_primary"] and settle_primary(backend, session=session, home_id=home_id) != row["id"]:
        row = {**row, "is_primary": False}

    log.info("image uploaded", extra={"home_id": home_id})
    return ImageOut.model_validate(row)


def settle_primary(backend: Backend, *, session: AuthSession | None, home_id: str) -> Optional[str]:
    """
    Leave one primary photo on the home when concurrent first uploads both
    claimed it. The oldest claim wins; its id is returned.
    """
    claims = (
        backend.table("home_images", session=session)
        .select()
        .eq("home_id", home_id)
        .eq("is_primary", True)
        .order("created_at")
        .order("id")
        .execute()
        .unwrap()
    ) or []
    if not claims:
        return None

    for loser in claims[1:]:
        backend.table("home_images", session=session).update({"is_primary": False}).eq("id", loser["id"]).execute().unwrap()
    if len(claims) > 1:
        log.warning("cleared %d extra primary photos", len(claims) - 1, extra={"home_id": home_id})
    return claims[0]["id"]


def set_primary_image(backend: Backend, *, session: AuthSession | None, image_id: str) -> ImageOut:
    """Clear the flag on the home's other photos, then set it on this one."""
    image = must_get_row(backend, "home_images", session=session, row_id=image_id, what="image")
    home_id = image["home_id"]

    (
        backend.table("home_images", session=session)
        .update({"is_primary": False})
        .eq("home_id", home_id)
        .eq("is_primary", True)
        .execute()
        .unwrap()
    )
    rows = (
        backend.table("home_images", session=session)
        .update({"is_primary": True})
        .eq("id", image_id)
        .execute()
        .unwrap()
    )
    if not rows:
        raise HTTPException(status_code=404, detail="image not found")
    return ImageOut.model_validate(rows[0])


def delete_image(backend: Backend, *, session: AuthSession | None, image_id: str) -> None:
    image = must_get_row(backend, "home_images", session=session, row_id=image_id, what="image")
    backend.table("home_images", session=session).delete().eq("id", image_id).execute().unwrap()

    if not image.get("is_primary"):
        return

    # The newest remaining photo takes over as primary.
    remaining = (
        backend.table("home_images", session=session)
        .select("id")
        .eq("home_id", image["home_id"])
        .order("created_at", ascending=False)
        .limit(1)
        .execute()
        .unwrap()
    )
    if remaining:
        set_primary_image(backend, session=session, image_id=remaining[0]["id"])
