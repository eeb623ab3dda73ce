"""SQLAlchemy models for LinkFolio."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    Boolean,
    Text,
    ForeignKey,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator, CHAR

from .database import Base


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class GUID(TypeDecorator):
    """Platform-independent GUID type using String for SQLite."""

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID())
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, UUID):
            return UUID(str(value))
        return value


class User(Base):
    """An account owning one public profile page."""

    __tablename__ = "users"

    id = Column(GUID(), primary_key=True, default=uuid4)
    email = Column(String(255), nullable=False, unique=True)
    username = Column(String(30), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    password_salt = Column(String(64), nullable=False)
    name = Column(String(100), nullable=True)
    bio = Column(String(500), nullable=True)
    avatar_url = Column(Text, nullable=True)
    plan = Column(String(20), nullable=False, default="free")
    theme = Column(String(20), nullable=False, default="default")
    button_style = Column(String(20), nullable=False, default="rounded")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    links = relationship(
        "Link", back_populates="user", cascade="all, delete-orphan", order_by="Link.order"
    )
    social_links = relationship(
        "SocialLink",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="SocialLink.order",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"


class Link(Base):
    """An outbound link listed on a profile page."""

    __tablename__ = "links"

    id = Column(GUID(), primary_key=True, default=uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(100), nullable=False)
    url = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = relationship("User", back_populates="links")

    __table_args__ = (Index("ix_links_user_order", "user_id", "order"),)

    def __repr__(self) -> str:
        return f"<Link(id={self.id}, title='{self.title}')>"


class SocialLink(Base):
    """A social icon shown on a profile page."""

    __tablename__ = "social_links"

    id = Column(GUID(), primary_key=True, default=uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    platform = Column(String(20), nullable=False)
    url = Column(Text, nullable=False)
    order = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="social_links")

    def __repr__(self) -> str:
        return f"<SocialLink(platform='{self.platform}', url='{self.url}')>"


class ProfileView(Base):
    """One public profile page load. Append-only."""

    __tablename__ = "profile_views"

    id = Column(GUID(), primary_key=True, default=uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    device = Column(String(20), nullable=False, default="desktop")
    browser = Column(String(20), nullable=False, default="Other")
    referrer = Column(Text, nullable=True)

    __table_args__ = (Index("ix_profile_views_user_created", "user_id", "created_at"),)


class LinkClick(Base):
    """One tracked outbound link click. Append-only.

    ``link_id`` carries no foreign key so clicks outlive a deleted link.
    """

    __tablename__ = "link_clicks"

    id = Column(GUID(), primary_key=True, default=uuid4)
    link_id = Column(GUID(), nullable=False)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    device = Column(String(20), nullable=False, default="desktop")
    browser = Column(String(20), nullable=False, default="Other")
    referrer = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_link_clicks_user_created", "user_id", "created_at"),
        Index("ix_link_clicks_link", "link_id"),
    )
