"""
Announcement endpoints — public reads, authenticated writes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from bulletin.api.deps import (
    authenticate,
    get_announcement_store,
    get_current_identity,
    oauth2_scheme,
)
from bulletin.core.exceptions import NotFound
from bulletin.models.content import Announcement
from bulletin.schemas.common import MessageResponse
from bulletin.schemas.content import AnnouncementCreate, AnnouncementRead, AnnouncementUpdate
from bulletin.schemas.token import Identity
from bulletin.stores.content import AnnouncementStore

router = APIRouter(prefix="/announcements", tags=["announcements"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[AnnouncementRead])
async def list_announcements(
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    store: AnnouncementStore = Depends(get_announcement_store),
    token: Optional[str] = Depends(oauth2_scheme),
) -> list[Announcement]:
    """Newest first. Hidden announcements are listed only for signed-in admins."""
    if include_inactive:
        # Hidden records need a valid session; public listings ignore the token
        authenticate(token)
        return await store.list_all()
    return await store.list_active()


@router.get("/{announcement_id}", response_model=AnnouncementRead)
async def get_announcement(
    announcement_id: str,
    store: AnnouncementStore = Depends(get_announcement_store),
) -> Announcement:
    item = await store.get_by_id(announcement_id)
    if item is None:
        raise NotFound("Announcement not found")
    return item


@router.post("", response_model=AnnouncementRead, status_code=201)
async def create_announcement(
    body: AnnouncementCreate,
    store: AnnouncementStore = Depends(get_announcement_store),
    _identity: Identity = Depends(get_current_identity),
) -> Announcement:
    return await store.create(body)


@router.put("/{announcement_id}", response_model=AnnouncementRead)
async def update_announcement(
    announcement_id: str,
    body: AnnouncementUpdate,
    store: AnnouncementStore = Depends(get_announcement_store),
    _identity: Identity = Depends(get_current_identity),
) -> Announcement:
    updated = await store.update(announcement_id, body)
    if updated is None:
        raise NotFound("Announcement not found")
    return updated


@router.delete("/{announcement_id}", response_model=MessageResponse)
async def delete_announcement(
    announcement_id: str,
    store: AnnouncementStore = Depends(get_announcement_store),
    _identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    if not await store.delete(announcement_id):
        raise NotFound("Announcement not found")
    return MessageResponse(message="Announcement deleted successfully")
