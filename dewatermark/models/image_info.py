from __future__ import annotations

from pydantic import BaseModel, Field


class ImageInfo(BaseModel):
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    format: str | None = None  # e.g., "JPEG", "PNG", "WEBP"
