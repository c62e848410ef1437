"""Artist model."""

from enum import Enum

from sqlalchemy import Column, String

from labelvault.core.database import Base
from .base import TenantOwnedMixin, TimestampMixin, id_column


class ArtistType(str, Enum):
    SINGER = "Singer"
    COMPOSER = "Composer"
    LYRICIST = "Lyricist"
    PRODUCER = "Producer"
    REMIXER = "Remixer"
    DJ = "DJ"
    BAND = "Band"
    ORCHESTRA = "Orchestra"


class Artist(Base, TimestampMixin, TenantOwnedMixin):
    """An artist profile owned by a label."""

    __tablename__ = "artists"

    entity_kind = "artist"

    id = id_column()

    name = Column(String(255), nullable=False, comment="Artist or band name")

    label_id = Column(
        String(36),
        nullable=False,
        index=True,
        comment="Owning label"
    )

    type = Column(
        String(20),
        nullable=False,
        default=ArtistType.SINGER.value,
        comment="Singer, Composer, Lyricist, Producer, Remixer, DJ, Band or Orchestra"
    )

    spotify_id = Column(String(100), nullable=True, comment="Spotify artist id")
    apple_music_id = Column(String(100), nullable=True, comment="Apple Music artist id")
    instagram_url = Column(String(500), nullable=True, comment="Instagram profile URL")
    email = Column(String(255), nullable=True, comment="Contact email")

    def __repr__(self) -> str:
        return f"<Artist(id={self.id}, name='{self.name}', label={self.label_id})>"
