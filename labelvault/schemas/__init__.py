"""Pydantic schemas for request/response validation."""

from .base import BaseSchema, ErrorResponse, HealthCheckResponse, SuccessResponse, UpdateSchema
from .user import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    UserCreatedResponse,
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
    VerifyResponse,
)
from .label import LabelCreatedResponse, LabelCreateRequest, LabelResponse, LabelUpdateRequest
from .artist import ArtistCreateRequest, ArtistResponse, ArtistUpdateRequest
from .release import (
    AssetUploadResponse,
    NoteResponse,
    ReleaseCreateRequest,
    ReleaseResponse,
    ReleaseSummaryResponse,
    ReleaseUpdateRequest,
    TrackPayload,
    TrackResponse,
)
from .notice import NoticeCreateRequest, NoticeResponse, NoticeUpdateRequest
from .revenue import RevenueEntryResponse, RevenueSummaryResponse
from .search import SearchResponse

__all__ = [
    "BaseSchema",
    "ErrorResponse",
    "HealthCheckResponse",
    "SuccessResponse",
    "UpdateSchema",
    "ChangePasswordRequest",
    "LoginRequest",
    "LoginResponse",
    "ResetPasswordRequest",
    "UserCreatedResponse",
    "UserCreateRequest",
    "UserResponse",
    "UserUpdateRequest",
    "VerifyResponse",
    "LabelCreatedResponse",
    "LabelCreateRequest",
    "LabelResponse",
    "LabelUpdateRequest",
    "ArtistCreateRequest",
    "ArtistResponse",
    "ArtistUpdateRequest",
    "AssetUploadResponse",
    "NoteResponse",
    "ReleaseCreateRequest",
    "ReleaseResponse",
    "ReleaseSummaryResponse",
    "ReleaseUpdateRequest",
    "TrackPayload",
    "TrackResponse",
    "NoticeCreateRequest",
    "NoticeResponse",
    "NoticeUpdateRequest",
    "RevenueEntryResponse",
    "RevenueSummaryResponse",
    "SearchResponse",
]
