"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from bulletin.api.endpoints import announcements, auth, events, health, posters, upload, users

api_router = APIRouter()

# Auth (login, profile, password)
api_router.include_router(auth.router)

# Account management (super admin)
api_router.include_router(users.router)

# Content
api_router.include_router(announcements.router)
api_router.include_router(events.router)
api_router.include_router(posters.router)
api_router.include_router(upload.router)

# Liveness
api_router.include_router(health.router)
