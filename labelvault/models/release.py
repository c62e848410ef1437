"""Release aggregate: the release row, its ordered tracks and its audit notes."""

from enum import Enum

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Index,
    Integer, String, Text
)
from sqlalchemy.orm import relationship

from labelvault.core.database import Base
from .base import JSONType, TenantOwnedMixin, TimestampMixin, id_column, utcnow


class ReleaseStatus(str, Enum):
    """Workflow states of a release, stored under their display names."""

    DRAFT = "Draft"
    PENDING = "Pending"
    NEEDS_INFO = "Needs Info"
    REJECTED = "Rejected"
    APPROVED = "Approved"
    PROCESSED = "Processed"
    PUBLISHED = "Published"
    TAKEDOWN = "Takedown"
    CANCELLED = "Cancelled"

    @classmethod
    def terminal(cls) -> frozenset:
        return frozenset({cls.REJECTED, cls.TAKEDOWN, cls.CANCELLED})

    @classmethod
    def purging(cls) -> frozenset:
        return frozenset({cls.REJECTED, cls.TAKEDOWN})

    @classmethod
    def partner_editable(cls) -> frozenset:
        return frozenset({cls.DRAFT, cls.NEEDS_INFO})


class ReleaseType(str, Enum):
    SINGLE = "Single"
    EP = "EP"
    ALBUM = "Album"
    COMPILATION = "Compilation"
    SOUNDTRACK = "Soundtrack"


class Release(Base, TimestampMixin, TenantOwnedMixin):
    """
    A single, EP or album moving through the distribution workflow.

    Status changes only happen through the release lifecycle service; the
    track list is replaced wholesale on update and notes are append-only.
    """

    __tablename__ = "releases"

    entity_kind = "release"

    id = id_column()

    title = Column(String(500), nullable=False, comment="Release title")
    version_title = Column(String(255), nullable=True, comment="Version, e.g. 'Remastered'")
    release_type = Column(
        String(20),
        nullable=False,
        default=ReleaseType.SINGLE.value,
        comment="Single, EP, Album, Compilation or Soundtrack"
    )

    primary_artist_ids = Column(
        JSONType,
        nullable=False,
        default=list,
        comment="Ordered list of primary artist ids"
    )
    featured_artist_ids = Column(
        JSONType,
        nullable=False,
        default=list,
        comment="Ordered list of featured artist ids"
    )

    label_id = Column(
        String(36),
        nullable=False,
        index=True,
        comment="Owning label"
    )

    upc = Column(String(13), nullable=True, comment="UPC/EAN barcode")
    catalogue_number = Column(String(50), nullable=True, comment="Label catalogue number")
    release_date = Column(Date, nullable=True, comment="Planned street date")
    original_release_date = Column(Date, nullable=True, comment="Original date for re-releases")

    status = Column(
        String(20),
        nullable=False,
        default=ReleaseStatus.DRAFT.value,
        comment="Workflow status"
    )

    artwork_url = Column(String(1000), nullable=True, comment="Public URL of the cover artwork")
    artwork_file_name = Column(String(255), nullable=True, comment="Uploaded artwork file name")

    p_line = Column(String(255), nullable=True, comment="Sound recording copyright line")
    c_line = Column(String(255), nullable=True, comment="Composition copyright line")
    description = Column(Text, nullable=True, comment="Marketing description")
    explicit = Column(Boolean, nullable=False, default=False, comment="Parental advisory flag")

    genre = Column(String(100), nullable=True, comment="Primary genre")
    sub_genre = Column(String(100), nullable=True, comment="Secondary genre")
    mood = Column(String(100), nullable=True, comment="Mood tag")
    language = Column(String(50), nullable=True, comment="Metadata language")
    publisher = Column(String(255), nullable=True, comment="Music publisher")

    film_name = Column(String(255), nullable=True, comment="Film title for soundtracks")
    film_director = Column(String(255), nullable=True, comment="Film director")
    film_producer = Column(String(255), nullable=True, comment="Film producer")
    film_banner = Column(String(255), nullable=True, comment="Production banner")
    film_cast = Column(Text, nullable=True, comment="Film cast")

    youtube_content_id = Column(Boolean, nullable=False, default=False, comment="Opt in to YouTube Content ID")

    tracks = relationship(
        "Track",
        order_by="Track.track_number",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    notes = relationship(
        "InteractionNote",
        order_by="InteractionNote.timestamp.desc()",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('Draft', 'Pending', 'Needs Info', 'Rejected', 'Approved', "
            "'Processed', 'Published', 'Takedown', 'Cancelled')",
            name="valid_release_status"
        ),
        Index("idx_releases_label_status", "label_id", "status"),
    )

    @property
    def release_status(self) -> ReleaseStatus:
        return ReleaseStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.release_status in ReleaseStatus.terminal()

    def artist_ids(self) -> set:
        return set(self.primary_artist_ids or []) | set(self.featured_artist_ids or [])

    def __repr__(self) -> str:
        return f"<Release(id={self.id}, title='{self.title}', status='{self.status}')>"


class Track(Base):
    """One track of a release. Numbered 1..N in release order."""

    __tablename__ = "tracks"

    id = id_column()

    release_id = Column(
        String(36),
        ForeignKey("releases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Parent release"
    )

    track_number = Column(Integer, nullable=False, comment="Position within the release, 1-based")
    disc_number = Column(Integer, nullable=False, default=1, comment="Disc number")
    title = Column(String(500), nullable=False, comment="Track title")
    version_title = Column(String(255), nullable=True, comment="Version, e.g. 'Radio Edit'")

    primary_artist_ids = Column(JSONType, nullable=False, default=list, comment="Primary artist ids")
    featured_artist_ids = Column(JSONType, nullable=False, default=list, comment="Featured artist ids")

    isrc = Column(String(12), nullable=True, comment="International Standard Recording Code")
    duration = Column(Integer, nullable=True, comment="Duration in seconds")
    explicit = Column(Boolean, nullable=False, default=False, comment="Parental advisory flag")

    audio_file_name = Column(String(255), nullable=True, comment="Uploaded master file name")
    audio_url = Column(String(1000), nullable=True, comment="Public URL of the audio master")

    crbt_cut_name = Column(String(255), nullable=True, comment="Caller ring-back tone cut name")
    crbt_time = Column(String(20), nullable=True, comment="Ring-back tone start offset")
    dolby_isrc = Column(String(12), nullable=True, comment="ISRC of the Dolby Atmos mix")

    composer = Column(String(255), nullable=True, comment="Composer credit")
    lyricist = Column(String(255), nullable=True, comment="Lyricist credit")
    language = Column(String(50), nullable=True, comment="Lyrics language")
    content_type = Column(String(50), nullable=False, default="Music", comment="Music, Karaoke, Melody...")

    __table_args__ = (
        Index("idx_tracks_release_number", "release_id", "track_number"),
    )

    def __repr__(self) -> str:
        return f"<Track(id={self.id}, release={self.release_id}, number={self.track_number})>"


class InteractionNote(Base):
    """Append-only audit message attached to a release."""

    __tablename__ = "interaction_notes"

    id = id_column()

    release_id = Column(
        String(36),
        ForeignKey("releases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Release the note belongs to"
    )

    author_id = Column(String(36), nullable=False, comment="User who wrote the note")
    author_name = Column(String(255), nullable=False, comment="Author display name at write time")
    author_role = Column(String(30), nullable=False, comment="Author role at write time")
    message = Column(Text, nullable=False, comment="Note body")

    timestamp = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="Time the note was written"
    )

    def __repr__(self) -> str:
        return f"<InteractionNote(id={self.id}, release={self.release_id})>"
