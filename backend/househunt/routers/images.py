# backend/househunt/routers/images.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool

from ..auth import get_auth_session, get_backend, get_settings
from ..clients import AuthSession, Backend
from ..config import Settings
from ..schemas import ImageOut
from ..services import images as svc

router = APIRouter(tags=["images"])


@router.get("/homes/{home_id}/images", response_model=list[ImageOut])
def list_images(home_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.list_images(backend, session=session, home_id=home_id)


@router.post("/homes/{home_id}/images", response_model=ImageOut, status_code=201)
async def upload_image(
    home_id: str,
    request: Request,
    filename: Optional[str] = Query(default=None),
    session: AuthSession = Depends(get_auth_session),
    backend: Backend = Depends(get_backend),
    cfg: Settings = Depends(get_settings),
):
    """
    Raw request body is the image; Content-Type names its type and the
    optional ?filename= supplies the extension.
    """
    content = await request.body()
    # The storage and table calls block.
    return await run_in_threadpool(
        svc.upload_image,
        backend,
        session=session,
        home_id=home_id,
        content=content,
        content_type=request.headers.get("content-type", ""),
        filename=filename,
        cfg=cfg,
    )


@router.post("/images/{image_id}/primary", response_model=ImageOut)
def set_primary(image_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    return svc.set_primary_image(backend, session=session, image_id=image_id)


@router.delete("/images/{image_id}", status_code=204)
def delete_image(image_id: str, session: AuthSession = Depends(get_auth_session), backend: Backend = Depends(get_backend)):
    svc.delete_image(backend, session=session, image_id=image_id)
    return None
