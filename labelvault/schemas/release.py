"""Release, track and interaction note schemas."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from labelvault.models.release import ReleaseStatus, ReleaseType
from labelvault.utils.validators import ISRCValidator, UPCValidator, first_error_message
from .base import BaseSchema, UpdateSchema

# Columns a partial update may omit but never clear
NON_NULLABLE_FIELDS = ("title", "release_type", "explicit", "youtube_content_id")


def _normalize_isrc(v: Optional[str]) -> Optional[str]:
    if not v:
        return None
    message = first_error_message(ISRCValidator.validate(v))
    if message:
        raise ValueError(message)
    return ISRCValidator.normalize(v)


class TrackPayload(BaseSchema):
    """One track as supplied by the client. Numbering is assigned server side."""

    title: str = Field(..., min_length=1, max_length=500)
    disc_number: int = Field(1, ge=1)
    version_title: Optional[str] = Field(None, max_length=255)
    primary_artist_ids: List[str] = Field(default_factory=list)
    featured_artist_ids: List[str] = Field(default_factory=list)
    isrc: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)
    explicit: bool = False
    audio_file_name: Optional[str] = Field(None, max_length=255)
    audio_url: Optional[str] = Field(None, max_length=1000)
    crbt_cut_name: Optional[str] = Field(None, max_length=255)
    crbt_time: Optional[str] = Field(None, max_length=20)
    dolby_isrc: Optional[str] = None
    composer: Optional[str] = Field(None, max_length=255)
    lyricist: Optional[str] = Field(None, max_length=255)
    language: Optional[str] = Field(None, max_length=50)
    content_type: str = Field("Music", max_length=50)

    @field_validator("isrc", "dolby_isrc")
    @classmethod
    def validate_isrc(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_isrc(v)


class TrackResponse(BaseSchema):
    id: str
    track_number: int
    disc_number: int
    title: str
    version_title: Optional[str] = None
    primary_artist_ids: List[str] = Field(default_factory=list)
    featured_artist_ids: List[str] = Field(default_factory=list)
    isrc: Optional[str] = None
    duration: Optional[int] = None
    explicit: bool = False
    audio_file_name: Optional[str] = None
    audio_url: Optional[str] = None
    crbt_cut_name: Optional[str] = None
    crbt_time: Optional[str] = None
    dolby_isrc: Optional[str] = None
    composer: Optional[str] = None
    lyricist: Optional[str] = None
    language: Optional[str] = None
    content_type: str = "Music"


class NoteResponse(BaseSchema):
    id: str
    author_id: str
    author_name: str
    author_role: str
    message: str
    timestamp: datetime


class ReleaseFields(BaseSchema):
    version_title: Optional[str] = Field(None, max_length=255)
    release_type: Optional[ReleaseType] = None
    primary_artist_ids: Optional[List[str]] = None
    featured_artist_ids: Optional[List[str]] = None
    upc: Optional[str] = None
    catalogue_number: Optional[str] = Field(None, max_length=50)
    release_date: Optional[date] = None
    original_release_date: Optional[date] = None
    artwork_url: Optional[str] = Field(None, max_length=1000)
    artwork_file_name: Optional[str] = Field(None, max_length=255)
    p_line: Optional[str] = Field(None, max_length=255)
    c_line: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    explicit: Optional[bool] = None
    genre: Optional[str] = Field(None, max_length=100)
    sub_genre: Optional[str] = Field(None, max_length=100)
    mood: Optional[str] = Field(None, max_length=100)
    language: Optional[str] = Field(None, max_length=50)
    publisher: Optional[str] = Field(None, max_length=255)
    film_name: Optional[str] = Field(None, max_length=255)
    film_director: Optional[str] = Field(None, max_length=255)
    film_producer: Optional[str] = Field(None, max_length=255)
    film_banner: Optional[str] = Field(None, max_length=255)
    film_cast: Optional[str] = None
    youtube_content_id: Optional[bool] = None

    @field_validator("upc")
    @classmethod
    def validate_upc(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        message = first_error_message(UPCValidator.validate(v))
        if message:
            raise ValueError(message)
        return v


class ReleaseCreateRequest(ReleaseFields):
    """New releases always start as Draft; a status sent by the client is ignored."""

    title: str = Field(..., min_length=1, max_length=500)
    label_id: Optional[str] = Field(None, description="Defaults to the caller's own label")
    tracks: List[TrackPayload] = Field(default_factory=list)
    note: Optional[str] = None

    def release_fields(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"tracks", "note", "label_id"}, exclude_none=True)
        if data.get("release_type") is not None:
            data["release_type"] = data["release_type"].value
        return data


class ReleaseUpdateRequest(UpdateSchema, ReleaseFields):
    """Partial update; ``tracks`` replaces the whole track list when present."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    status: Optional[ReleaseStatus] = None
    tracks: Optional[List[TrackPayload]] = None
    note: Optional[str] = None

    def release_changes(self) -> Dict[str, Any]:
        data = self.changes(exclude={"tracks", "note", "status"})
        for key in NON_NULLABLE_FIELDS:
            if key in data and data[key] is None:
                del data[key]
        for key in ("primary_artist_ids", "featured_artist_ids"):
            if key in data and data[key] is None:
                data[key] = []
        if data.get("release_type") is not None:
            data["release_type"] = data["release_type"].value
        return data

    def track_payloads(self) -> Optional[List[Dict[str, Any]]]:
        if self.tracks is None:
            return None
        return [track.model_dump() for track in self.tracks]


class ReleaseSummaryResponse(BaseSchema):
    """Release as shown in lists, without tracks or notes."""

    id: str
    title: str
    version_title: Optional[str] = None
    release_type: str
    primary_artist_ids: List[str] = Field(default_factory=list)
    featured_artist_ids: List[str] = Field(default_factory=list)
    label_id: str
    upc: Optional[str] = None
    catalogue_number: Optional[str] = None
    release_date: Optional[date] = None
    status: str
    artwork_url: Optional[str] = None
    genre: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReleaseResponse(ReleaseSummaryResponse):
    original_release_date: Optional[date] = None
    artwork_file_name: Optional[str] = None
    p_line: Optional[str] = None
    c_line: Optional[str] = None
    description: Optional[str] = None
    explicit: bool = False
    sub_genre: Optional[str] = None
    mood: Optional[str] = None
    language: Optional[str] = None
    publisher: Optional[str] = None
    film_name: Optional[str] = None
    film_director: Optional[str] = None
    film_producer: Optional[str] = None
    film_banner: Optional[str] = None
    film_cast: Optional[str] = None
    youtube_content_id: bool = False
    tracks: List[TrackResponse] = Field(default_factory=list)
    notes: List[NoteResponse] = Field(default_factory=list)


class AssetUploadResponse(BaseSchema):
    url: str
    key: str
