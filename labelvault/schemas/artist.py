"""Artist schemas."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from labelvault.models.artist import ArtistType
from .base import BaseSchema, UpdateSchema


class ArtistResponse(BaseSchema):
    id: str
    name: str
    label_id: str
    type: str
    spotify_id: Optional[str] = None
    apple_music_id: Optional[str] = None
    instagram_url: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None


class ArtistCreateRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    label_id: Optional[str] = Field(None, description="Defaults to the caller's own label")
    type: ArtistType = ArtistType.SINGER
    spotify_id: Optional[str] = Field(None, max_length=100)
    apple_music_id: Optional[str] = Field(None, max_length=100)
    instagram_url: Optional[str] = Field(None, max_length=500)
    email: Optional[EmailStr] = None


class ArtistUpdateRequest(UpdateSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[ArtistType] = None
    spotify_id: Optional[str] = Field(None, max_length=100)
    apple_music_id: Optional[str] = Field(None, max_length=100)
    instagram_url: Optional[str] = Field(None, max_length=500)
    email: Optional[EmailStr] = None
