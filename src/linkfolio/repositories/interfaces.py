"""Abstract repository interfaces for data access layer."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from ..db.models import User, Link, SocialLink, ProfileView, LinkClick


class BaseRepository(ABC):
    """Base repository interface with common operations."""

    @abstractmethod
    async def save(self, entity) -> None:
        """Save an entity to the repository."""
        pass

    @abstractmethod
    async def delete(self, entity) -> None:
        """Delete an entity from the repository."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the current transaction."""
        pass


class UserRepository(BaseRepository):
    """Repository interface for User entities."""

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by (lowercase) email."""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get a user by username, case-insensitively."""
        pass

    @abstractmethod
    async def find_conflict(self, email: str, username: str) -> Optional[User]:
        """Get a user holding either the email or the username."""
        pass

    @abstractmethod
    async def create(
        self,
        email: str,
        username: str,
        password_hash: str,
        password_salt: str,
        name: Optional[str] = None,
    ) -> User:
        """Create a new user."""
        pass

    @abstractmethod
    async def update(self, user: User, **fields) -> User:
        """Apply field changes to a user."""
        pass


class LinkRepository(BaseRepository):
    """Repository interface for Link entities."""

    @abstractmethod
    async def get_for_user(self, link_id: UUID, user_id: UUID) -> Optional[Link]:
        """Get a link by ID if it belongs to the user."""
        pass

    @abstractmethod
    async def get_active_for_user(self, link_id: UUID, user_id: UUID) -> Optional[Link]:
        """Get an active link by ID if it belongs to the user."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: UUID, active_only: bool = False) -> List[Link]:
        """Get a user's links ordered by position."""
        pass

    @abstractmethod
    async def list_by_ids(self, link_ids: Sequence[UUID]) -> List[Link]:
        """Get the links that still exist among the given IDs."""
        pass

    @abstractmethod
    async def count_for_user(self, user_id: UUID) -> int:
        """Count a user's links."""
        pass

    @abstractmethod
    async def max_order(self, user_id: UUID) -> Optional[int]:
        """Highest order value among a user's links, or None."""
        pass

    @abstractmethod
    async def create(self, user_id: UUID, title: str, url: str, order: int) -> Link:
        """Create a new link."""
        pass

    @abstractmethod
    async def update(self, link: Link, **fields) -> Link:
        """Apply field changes to a link."""
        pass

    @abstractmethod
    async def remove(self, link: Link) -> None:
        """Delete a link and commit."""
        pass

    @abstractmethod
    async def reorder(self, orders: Dict[UUID, int]) -> None:
        """Set the order of several links in one transaction."""
        pass

    @abstractmethod
    async def click_counts(self, link_ids: Sequence[UUID]) -> Dict[UUID, int]:
        """All-time click counts per link."""
        pass


class SocialLinkRepository(BaseRepository):
    """Repository interface for SocialLink entities."""

    @abstractmethod
    async def list_for_user(self, user_id: UUID) -> List[SocialLink]:
        """Get a user's social links ordered by position."""
        pass

    @abstractmethod
    async def replace_for_user(
        self, user_id: UUID, items: Sequence[Tuple[str, str]]
    ) -> List[SocialLink]:
        """Replace a user's social links with ``(platform, url)`` pairs in order."""
        pass


class AnalyticsRepository(BaseRepository):
    """Repository interface for profile view and link click events."""

    @abstractmethod
    async def get_views(
        self, user_id: UUID, since: datetime, until: Optional[datetime] = None
    ) -> List[ProfileView]:
        """Get a user's profile views with ``since <= created_at [<= until]``."""
        pass

    @abstractmethod
    async def get_clicks(
        self, user_id: UUID, since: datetime, until: Optional[datetime] = None
    ) -> List[LinkClick]:
        """Get a user's link clicks with ``since <= created_at [<= until]``."""
        pass

    @abstractmethod
    async def count_views(self, user_id: UUID, since: datetime, before: datetime) -> int:
        """Count a user's profile views with ``since <= created_at < before``."""
        pass

    @abstractmethod
    async def count_clicks(self, user_id: UUID, since: datetime, before: datetime) -> int:
        """Count a user's link clicks with ``since <= created_at < before``."""
        pass

    @abstractmethod
    async def record_view(
        self, user_id: UUID, device: str, browser: str, referrer: Optional[str]
    ) -> ProfileView:
        """Append a profile view event."""
        pass

    @abstractmethod
    async def record_click(
        self,
        link_id: UUID,
        user_id: UUID,
        device: str,
        browser: str,
        referrer: Optional[str],
    ) -> LinkClick:
        """Append a link click event."""
        pass


class RepositoryContainer:
    """Container for all repository interfaces to support dependency injection."""

    def __init__(
        self,
        user_repo: UserRepository,
        link_repo: LinkRepository,
        social_link_repo: SocialLinkRepository,
        analytics_repo: AnalyticsRepository,
    ):
        self.user = user_repo
        self.link = link_repo
        self.social_link = social_link_repo
        self.analytics = analytics_repo
