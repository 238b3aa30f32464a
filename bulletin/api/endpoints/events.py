"""
Event endpoints — public reads, authenticated writes.

Image files follow the record: replacing ``imageUrl`` or deleting the event
removes the old upload after the database change has committed.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from bulletin.api.deps import (
    authenticate,
    get_current_identity,
    get_event_store,
    get_image_manager,
    oauth2_scheme,
)
from bulletin.core.exceptions import NotFound
from bulletin.models.content import Event
from bulletin.schemas.common import MessageResponse
from bulletin.schemas.content import EventCreate, EventRead, EventUpdate
from bulletin.schemas.token import Identity
from bulletin.services.images import ImageManager
from bulletin.stores.content import EventStore

router = APIRouter(prefix="/events", tags=["events"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[EventRead])
async def list_events(
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    store: EventStore = Depends(get_event_store),
    token: Optional[str] = Depends(oauth2_scheme),
) -> list[Event]:
    if include_inactive:
        # Hidden records need a valid session; public listings ignore the token
        authenticate(token)
        return await store.list_all()
    return await store.list_active()


@router.get("/upcoming", response_model=list[EventRead])
async def list_upcoming_events(
    limit: int = Query(default=4, ge=1, le=50),
    store: EventStore = Depends(get_event_store),
) -> list[Event]:
    """Active events from today onwards, soonest first."""
    return await store.list_upcoming(limit=limit)


@router.get("/{event_id}", response_model=EventRead)
async def get_event(
    event_id: str,
    store: EventStore = Depends(get_event_store),
) -> Event:
    event = await store.get_by_id(event_id)
    if event is None:
        raise NotFound("Event not found")
    return event


@router.post("", response_model=EventRead, status_code=201)
async def create_event(
    body: EventCreate,
    store: EventStore = Depends(get_event_store),
    _identity: Identity = Depends(get_current_identity),
) -> Event:
    return await store.create(body)


@router.put("/{event_id}", response_model=EventRead)
async def update_event(
    event_id: str,
    body: EventUpdate,
    store: EventStore = Depends(get_event_store),
    images: ImageManager = Depends(get_image_manager),
    _identity: Identity = Depends(get_current_identity),
) -> Event:
    existing = await store.get_by_id(event_id)
    if existing is None:
        raise NotFound("Event not found")
    old_image = existing.image_url

    updated = await store.update(event_id, body)
    if updated is None:
        raise NotFound("Event not found")

    images.release(old_image, updated.image_url)
    return updated


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: str,
    store: EventStore = Depends(get_event_store),
    images: ImageManager = Depends(get_image_manager),
    _identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    existing = await store.get_by_id(event_id)
    if existing is None:
        raise NotFound("Event not found")
    old_image = existing.image_url

    if not await store.delete(event_id):
        raise NotFound("Event not found")

    images.release(old_image)
    return MessageResponse(message="Event deleted successfully")
