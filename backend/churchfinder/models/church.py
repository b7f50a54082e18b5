"""
ChurchFinder Backend — Church, ServiceTime and Review ORM Models
=================================================================

What:  The three tables behind the directory: `churches`, `service_times`,
       `reviews`.
How:   SQLAlchemy 2.0 declarative mapping; Alembic migration
       001_create_church_tables creates the same schema.

Table Design:
    - churches.place_id: the places provider's identifier. UNIQUE, set once
      at creation, never updated. It is the only external identity.
    - lat/lng/rating: stored as text exactly as received, so no float
      rounding happens between the provider and the client.
    - service_times / reviews: child rows keyed by church_id. Churches are
      never deleted, so no cascade-delete is configured.
    - reviews.created_at: assigned at insert; display order is newest first.
"""

from datetime import datetime, time, timezone
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from churchfinder.database import Base

DEFAULT_SERVICE_LANGUAGE = "English"


class Church(Base):
    """
    A place of worship known to the directory.

    Lifecycle:
        1. Created the first time its place id is looked up (find-or-create)
           or through an explicit POST
        2. Business fields (phone, website, denomination, description) change
           only through PATCH
        3. Never deleted
    """

    __tablename__ = "churches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    place_id: Mapped[str] = mapped_column(
        Text,
        unique=True,
        nullable=False,
        comment="External place identifier assigned by the places provider",
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)
    vicinity: Mapped[str] = mapped_column(Text, nullable=False)
    lat: Mapped[str] = mapped_column(Text, nullable=False)
    lng: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Business fields (PATCH only) ─────────────────────────────────────
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    denomination: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    service_times: Mapped[List["ServiceTime"]] = relationship(
        back_populates="church",
        order_by=lambda: [ServiceTime.day_of_week, ServiceTime.start_time, ServiceTime.id],
    )
    reviews: Mapped[List["Review"]] = relationship(
        back_populates="church",
        order_by=lambda: [Review.created_at.desc(), Review.id.desc()],
    )

    def __repr__(self) -> str:
        return f"<Church(id={self.id}, place_id='{self.place_id}', name='{self.name}')>"


class ServiceTime(Base):
    """A recurring weekly service window. day_of_week: 0 = Sunday .. 6 = Saturday."""

    __tablename__ = "service_times"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("churches.id"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    service_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=DEFAULT_SERVICE_LANGUAGE,
        server_default=text(f"'{DEFAULT_SERVICE_LANGUAGE}'"),
    )

    church: Mapped[Church] = relationship(back_populates="service_times")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_service_times_day_of_week"),
    )

    def __repr__(self) -> str:
        return (
            f"<ServiceTime(id={self.id}, church_id={self.church_id}, "
            f"day={self.day_of_week}, start='{self.start_time}')>"
        )


class Review(Base):
    """A visitor review. Immutable once written."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("churches.id"), nullable=False, index=True
    )
    user_name: Mapped[str] = mapped_column(Text, nullable=False)
    # numeric(2,1): 1.0 .. 5.0; read back as float
    rating: Mapped[float] = mapped_column(Numeric(2, 1, asdecimal=False), nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    church: Mapped[Church] = relationship(back_populates="reviews")

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        Index("idx_reviews_church_created_at", "church_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, church_id={self.church_id}, rating={self.rating})>"
