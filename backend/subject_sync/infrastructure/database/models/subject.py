"""SQLAlchemy ORM model for the Subject entity."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from subject_sync.infrastructure.database.base import Base


class SubjectModel(Base):
    """Maps to the 'subjects' table, one row per subject and owner."""

    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    birth_datetime: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    city: Mapped[str] = mapped_column(String(60), nullable=False, default="")
    nation: Mapped[str] = mapped_column(String(60), nullable=False, default="")
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    timezone: Mapped[str] = mapped_column(String(80), nullable=False, default="UTC")
    rodens_rating: Mapped[str | None] = mapped_column(String(2), nullable=True)
    tags: Mapped[list | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_subjects_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<SubjectModel(id={self.id}, name='{self.name}', owner='{self.owner_id}')>"
