"""
Poster endpoints — service, event and monthly theme posters.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from bulletin.api.deps import (
    authenticate,
    get_current_identity,
    get_image_manager,
    get_poster_store,
    oauth2_scheme,
)
from bulletin.core.exceptions import NotFound, ValidationFailed
from bulletin.models.content import Poster
from bulletin.schemas.common import MessageResponse
from bulletin.schemas.content import POSTER_CATEGORIES, PosterCreate, PosterRead, PosterUpdate
from bulletin.schemas.token import Identity
from bulletin.services.images import ImageManager
from bulletin.stores.content import PosterStore

router = APIRouter(prefix="/posters", tags=["posters"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[PosterRead])
async def list_posters(
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    store: PosterStore = Depends(get_poster_store),
    token: Optional[str] = Depends(oauth2_scheme),
) -> list[Poster]:
    if include_inactive:
        # Hidden records need a valid session; public listings ignore the token
        authenticate(token)
        return await store.list_all()
    return await store.list_active()


@router.get("/theme/latest", response_model=PosterRead)
async def get_latest_theme_poster(
    store: PosterStore = Depends(get_poster_store),
) -> Poster:
    """The theme-of-the-month poster: newest active one in ``theme``."""
    poster = await store.latest_by_category("theme")
    if poster is None:
        raise NotFound("No theme poster found")
    return poster


@router.get("/category/{category}", response_model=list[PosterRead])
async def list_posters_by_category(
    category: str,
    store: PosterStore = Depends(get_poster_store),
) -> list[Poster]:
    if category not in POSTER_CATEGORIES:
        raise ValidationFailed(
            "Invalid category. Use: service, event, or theme",
            details=[{"field": "category", "message": f"Must be one of: {', '.join(POSTER_CATEGORIES)}"}],
        )
    posters = await store.list_by_category(category)
    logger.debug("Found %d posters for category '%s'", len(posters), category)
    return posters


@router.get("/{poster_id}", response_model=PosterRead)
async def get_poster(
    poster_id: str,
    store: PosterStore = Depends(get_poster_store),
) -> Poster:
    poster = await store.get_by_id(poster_id)
    if poster is None:
        raise NotFound("Poster not found")
    return poster


@router.post("", response_model=PosterRead, status_code=201)
async def create_poster(
    body: PosterCreate,
    store: PosterStore = Depends(get_poster_store),
    _identity: Identity = Depends(get_current_identity),
) -> Poster:
    return await store.create(body)


@router.put("/{poster_id}", response_model=PosterRead)
async def update_poster(
    poster_id: str,
    body: PosterUpdate,
    store: PosterStore = Depends(get_poster_store),
    images: ImageManager = Depends(get_image_manager),
    _identity: Identity = Depends(get_current_identity),
) -> Poster:
    existing = await store.get_by_id(poster_id)
    if existing is None:
        raise NotFound("Poster not found")
    old_image = existing.image_url

    updated = await store.update(poster_id, body)
    if updated is None:
        raise NotFound("Poster not found")

    images.release(old_image, updated.image_url)
    return updated


@router.delete("/{poster_id}", response_model=MessageResponse)
async def delete_poster(
    poster_id: str,
    store: PosterStore = Depends(get_poster_store),
    images: ImageManager = Depends(get_image_manager),
    _identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    existing = await store.get_by_id(poster_id)
    if existing is None:
        raise NotFound("Poster not found")
    old_image = existing.image_url

    if not await store.delete(poster_id):
        raise NotFound("Poster not found")

    images.release(old_image)
    return MessageResponse(message="Poster deleted successfully")
