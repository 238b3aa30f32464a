"""
Image upload — multipart ``file`` + ``category``.

Returns the public URL to store in a content record's ``imageUrl``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from bulletin.api.deps import get_current_identity, get_image_manager
from bulletin.core.exceptions import UploadRejected
from bulletin.schemas.common import UploadResponse
from bulletin.schemas.token import Identity
from bulletin.services.images import ImageManager

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    file: UploadFile = File(...),
    category: str = Form(default="posters"),
    images: ImageManager = Depends(get_image_manager),
    identity: Identity = Depends(get_current_identity),
) -> UploadResponse:
    # One byte past the limit is enough to know the file is too large
    data = await file.read(images.max_bytes + 1)
    try:
        stored = images.store(data, file.content_type, category, file.filename)
    except UploadRejected:
        logger.info(
            "Upload rejected for %s (%s, category %s)",
            identity.id,
            file.content_type,
            category,
        )
        raise
    finally:
        await file.close()
    return UploadResponse(url=stored.url, filename=stored.filename)
