"""Small response envelopes shared across routers."""

from __future__ import annotations

from pydantic import BaseModel


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UploadResponse(BaseModel):
    success: bool = True
    url: str
    filename: str


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
    database: bool = False
