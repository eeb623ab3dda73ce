"""SQLAlchemy concrete implementations of repository interfaces."""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .interfaces import (
    UserRepository,
    LinkRepository,
    SocialLinkRepository,
    AnalyticsRepository,
)
from ..db.models import User, Link, SocialLink, ProfileView, LinkClick


class BaseSQLAlchemyRepository:
    """Base SQLAlchemy repository implementation."""

    def __init__(self, session: Session):
        self._session = session

    async def save(self, entity) -> None:
        """Save an entity to the repository."""
        self._session.add(entity)

    async def delete(self, entity) -> None:
        """Delete an entity from the repository."""
        self._session.delete(entity)

    async def commit(self) -> None:
        """Commit the current transaction."""
        self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        self._session.rollback()

    async def _persist(self, entity):
        """Add, commit and refresh an entity, rolling back on failure."""
        try:
            await self.save(entity)
            await self.commit()
        except Exception:
            await self.rollback()
            raise
        self._session.refresh(entity)
        return entity


class SQLAlchemyUserRepository(BaseSQLAlchemyRepository, UserRepository):
    """SQLAlchemy implementation of UserRepository."""

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        return self._session.query(User).filter(User.id == user_id).first()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        return self._session.query(User).filter(User.email == email.lower()).first()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get a user by username (case-insensitive)."""
        return (
            self._session.query(User)
            .filter(func.lower(User.username) == username.lower())
            .first()
        )

    async def find_conflict(self, email: str, username: str) -> Optional[User]:
        """Get a user holding either the email or the username."""
        return (
            self._session.query(User)
            .filter(or_(User.email == email.lower(), User.username == username.lower()))
            .first()
        )

    async def create(
        self,
        email: str,
        username: str,
        password_hash: str,
        password_salt: str,
        name: Optional[str] = None,
    ) -> User:
        """Create a new user."""
        user = User(
            email=email.lower(),
            username=username.lower(),
            password_hash=password_hash,
            password_salt=password_salt,
            name=name,
        )
        return await self._persist(user)

    async def update(self, user: User, **fields) -> User:
        """Apply field changes to a user."""
        for key, value in fields.items():
            setattr(user, key, value)
        return await self._persist(user)


class SQLAlchemyLinkRepository(BaseSQLAlchemyRepository, LinkRepository):
    """SQLAlchemy implementation of LinkRepository."""

    async def get_for_user(self, link_id: UUID, user_id: UUID) -> Optional[Link]:
        """Get a link by ID if it belongs to the user."""
        return (
            self._session.query(Link)
            .filter(Link.id == link_id, Link.user_id == user_id)
            .first()
        )

    async def get_active_for_user(self, link_id: UUID, user_id: UUID) -> Optional[Link]:
        """Get an active link by ID if it belongs to the user."""
        return (
            self._session.query(Link)
            .filter(
                Link.id == link_id,
                Link.user_id == user_id,
                Link.is_active.is_(True),
            )
            .first()
        )

    async def list_for_user(self, user_id: UUID, active_only: bool = False) -> List[Link]:
        """Get a user's links ordered by position."""
        query = self._session.query(Link).filter(Link.user_id == user_id)
        if active_only:
            query = query.filter(Link.is_active.is_(True))
        return query.order_by(Link.order, Link.created_at).all()

    async def list_by_ids(self, link_ids: Sequence[UUID]) -> List[Link]:
        """Get the links that still exist among the given IDs."""
        if not link_ids:
            return []
        return self._session.query(Link).filter(Link.id.in_(list(link_ids))).all()

    async def count_for_user(self, user_id: UUID) -> int:
        """Count a user's links."""
        return self._session.query(Link).filter(Link.user_id == user_id).count()

    async def max_order(self, user_id: UUID) -> Optional[int]:
        """Highest order value among a user's links."""
        return (
            self._session.query(func.max(Link.order))
            .filter(Link.user_id == user_id)
            .scalar()
        )

    async def create(self, user_id: UUID, title: str, url: str, order: int) -> Link:
        """Create a new link."""
        link = Link(user_id=user_id, title=title, url=url, order=order, is_active=True)
        return await self._persist(link)

    async def update(self, link: Link, **fields) -> Link:
        """Apply field changes to a link."""
        for key, value in fields.items():
            setattr(link, key, value)
        return await self._persist(link)

    async def remove(self, link: Link) -> None:
        """Delete a link and commit."""
        try:
            await self.delete(link)
            await self.commit()
        except Exception:
            await self.rollback()
            raise

    async def reorder(self, orders: Dict[UUID, int]) -> None:
        """Set the order of several links in one transaction."""
        try:
            links = self._session.query(Link).filter(Link.id.in_(list(orders))).all()
            for link in links:
                link.order = orders[link.id]
            await self.commit()
        except Exception:
            await self.rollback()
            raise

    async def click_counts(self, link_ids: Sequence[UUID]) -> Dict[UUID, int]:
        """All-time click counts per link."""
        if not link_ids:
            return {}
        rows = (
            self._session.query(LinkClick.link_id, func.count(LinkClick.id))
            .filter(LinkClick.link_id.in_(list(link_ids)))
            .group_by(LinkClick.link_id)
            .all()
        )
        return {link_id: count for link_id, count in rows}


class SQLAlchemySocialLinkRepository(BaseSQLAlchemyRepository, SocialLinkRepository):
    """SQLAlchemy implementation of SocialLinkRepository."""

    async def list_for_user(self, user_id: UUID) -> List[SocialLink]:
        """Get a user's social links ordered by position."""
        return (
            self._session.query(SocialLink)
            .filter(SocialLink.user_id == user_id)
            .order_by(SocialLink.order)
            .all()
        )

    async def replace_for_user(
        self, user_id: UUID, items: Sequence[Tuple[str, str]]
    ) -> List[SocialLink]:
        """Replace a user's social links in one transaction."""
        try:
            self._session.query(SocialLink).filter(
                SocialLink.user_id == user_id
            ).delete(synchronize_session="fetch")
            for index, (platform, url) in enumerate(items):
                self._session.add(
                    SocialLink(user_id=user_id, platform=platform, url=url, order=index)
                )
            await self.commit()
        except Exception:
            await self.rollback()
            raise
        return await self.list_for_user(user_id)


class SQLAlchemyAnalyticsRepository(BaseSQLAlchemyRepository, AnalyticsRepository):
    """SQLAlchemy implementation of AnalyticsRepository."""

    async def get_views(
        self, user_id: UUID, since: datetime, until: Optional[datetime] = None
    ) -> List[ProfileView]:
        """Get a user's profile views in a time range."""
        query = self._session.query(ProfileView).filter(
            ProfileView.user_id == user_id, ProfileView.created_at >= since
        )
        if until is not None:
            query = query.filter(ProfileView.created_at <= until)
        return query.order_by(ProfileView.created_at).all()

    async def get_clicks(
        self, user_id: UUID, since: datetime, until: Optional[datetime] = None
    ) -> List[LinkClick]:
        """Get a user's link clicks in a time range."""
        query = self._session.query(LinkClick).filter(
            LinkClick.user_id == user_id, LinkClick.created_at >= since
        )
        if until is not None:
            query = query.filter(LinkClick.created_at <= until)
        return query.order_by(LinkClick.created_at).all()

    async def count_views(self, user_id: UUID, since: datetime, before: datetime) -> int:
        """Count a user's profile views in a half-open range."""
        return (
            self._session.query(ProfileView)
            .filter(
                ProfileView.user_id == user_id,
                ProfileView.created_at >= since,
                ProfileView.created_at < before,
            )
            .count()
        )

    async def count_clicks(self, user_id: UUID, since: datetime, before: datetime) -> int:
        """Count a user's link clicks in a half-open range."""
        return (
            self._session.query(LinkClick)
            .filter(
                LinkClick.user_id == user_id,
                LinkClick.created_at >= since,
                LinkClick.created_at < before,
            )
            .count()
        )

    async def record_view(
        self, user_id: UUID, device: str, browser: str, referrer: Optional[str]
    ) -> ProfileView:
        """Append a profile view event."""
        view = ProfileView(
            user_id=user_id, device=device, browser=browser, referrer=referrer
        )
        return await self._persist(view)

    async def record_click(
        self,
        link_id: UUID,
        user_id: UUID,
        device: str,
        browser: str,
        referrer: Optional[str],
    ) -> LinkClick:
        """Append a link click event."""
        click = LinkClick(
            link_id=link_id,
            user_id=user_id,
            device=device,
            browser=browser,
            referrer=referrer,
        )
        return await self._persist(click)
