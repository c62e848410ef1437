"""Cross-entity search schemas."""

from typing import List

from pydantic import Field

from .artist import ArtistResponse
from .base import BaseSchema
from .label import LabelResponse
from .release import ReleaseSummaryResponse
from .user import UserResponse


class SearchResponse(BaseSchema):
    """Matches per entity kind, each list capped by the search service."""

    users: List[UserResponse] = Field(default_factory=list)
    releases: List[ReleaseSummaryResponse] = Field(default_factory=list)
    artists: List[ArtistResponse] = Field(default_factory=list)
    labels: List[LabelResponse] = Field(default_factory=list)
