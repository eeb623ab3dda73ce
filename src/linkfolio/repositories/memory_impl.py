"""In-memory implementations of repository interfaces for testing."""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from .interfaces import (
    UserRepository,
    LinkRepository,
    SocialLinkRepository,
    AnalyticsRepository,
    RepositoryContainer,
)
from ..db.models import User, Link, SocialLink, ProfileView, LinkClick


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BaseMemoryRepository:
    """Base in-memory repository implementation."""

    async def save(self, entity) -> None:
        """Save an entity to the repository."""
        # In memory implementation doesn't need explicit saves
        pass

    async def delete(self, entity) -> None:
        """Delete an entity from the repository."""
        # Handled by specific implementations
        pass

    async def commit(self) -> None:
        """Commit the current transaction."""
        # In memory - changes are immediate
        pass

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        pass


class MemoryUserRepository(BaseMemoryRepository, UserRepository):
    """In-memory implementation of UserRepository."""

    def __init__(self):
        self._users: Dict[UUID, User] = {}

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        for user in self._users.values():
            if user.email == email.lower():
                return user
        return None

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get a user by username (case-insensitive)."""
        for user in self._users.values():
            if user.username.lower() == username.lower():
                return user
        return None

    async def find_conflict(self, email: str, username: str) -> Optional[User]:
        """Get a user holding either the email or the username."""
        return await self.get_by_email(email) or await self.get_by_username(username)

    async def create(
        self,
        email: str,
        username: str,
        password_hash: str,
        password_salt: str,
        name: Optional[str] = None,
    ) -> User:
        """Create a new user."""
        now = _now()
        user = User(
            id=uuid4(),
            email=email.lower(),
            username=username.lower(),
            password_hash=password_hash,
            password_salt=password_salt,
            name=name,
            plan="free",
            theme="default",
            button_style="rounded",
            created_at=now,
            updated_at=now,
        )
        self._users[user.id] = user
        return user

    async def update(self, user: User, **fields) -> User:
        """Apply field changes to a user."""
        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = _now()
        return user


class MemoryLinkRepository(BaseMemoryRepository, LinkRepository):
    """In-memory implementation of LinkRepository."""

    def __init__(self, analytics: Optional["MemoryAnalyticsRepository"] = None):
        self._links: Dict[UUID, Link] = {}
        self._analytics = analytics

    async def get_for_user(self, link_id: UUID, user_id: UUID) -> Optional[Link]:
        """Get a link by ID if it belongs to the user."""
        link = self._links.get(link_id)
        if link and link.user_id == user_id:
            return link
        return None

    async def get_active_for_user(self, link_id: UUID, user_id: UUID) -> Optional[Link]:
        """Get an active link by ID if it belongs to the user."""
        link = await self.get_for_user(link_id, user_id)
        if link and link.is_active:
            return link
        return None

    async def list_for_user(self, user_id: UUID, active_only: bool = False) -> List[Link]:
        """Get a user's links ordered by position."""
        links = [
            link
            for link in self._links.values()
            if link.user_id == user_id and (link.is_active or not active_only)
        ]
        return sorted(links, key=lambda link: (link.order, link.created_at))

    async def list_by_ids(self, link_ids: Sequence[UUID]) -> List[Link]:
        """Get the links that still exist among the given IDs."""
        return [self._links[link_id] for link_id in link_ids if link_id in self._links]

    async def count_for_user(self, user_id: UUID) -> int:
        """Count a user's links."""
        return len(await self.list_for_user(user_id))

    async def max_order(self, user_id: UUID) -> Optional[int]:
        """Highest order value among a user's links."""
        orders = [link.order for link in await self.list_for_user(user_id)]
        return max(orders) if orders else None

    async def create(self, user_id: UUID, title: str, url: str, order: int) -> Link:
        """Create a new link."""
        now = _now()
        link = Link(
            id=uuid4(),
            user_id=user_id,
            title=title,
            url=url,
            order=order,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self._links[link.id] = link
        return link

    async def update(self, link: Link, **fields) -> Link:
        """Apply field changes to a link."""
        for key, value in fields.items():
            setattr(link, key, value)
        link.updated_at = _now()
        return link

    async def remove(self, link: Link) -> None:
        """Delete a link."""
        self._links.pop(link.id, None)

    async def reorder(self, orders: Dict[UUID, int]) -> None:
        """Set the order of several links."""
        for link_id, order in orders.items():
            if link_id in self._links:
                self._links[link_id].order = order

    async def click_counts(self, link_ids: Sequence[UUID]) -> Dict[UUID, int]:
        """All-time click counts per link."""
        counts: Dict[UUID, int] = {}
        if self._analytics is None:
            return counts
        wanted = set(link_ids)
        for click in self._analytics.clicks:
            if click.link_id in wanted:
                counts[click.link_id] = counts.get(click.link_id, 0) + 1
        return counts


class MemorySocialLinkRepository(BaseMemoryRepository, SocialLinkRepository):
    """In-memory implementation of SocialLinkRepository."""

    def __init__(self):
        self._social_links: Dict[UUID, List[SocialLink]] = {}

    async def list_for_user(self, user_id: UUID) -> List[SocialLink]:
        """Get a user's social links ordered by position."""
        return sorted(self._social_links.get(user_id, []), key=lambda s: s.order)

    async def replace_for_user(
        self, user_id: UUID, items: Sequence[Tuple[str, str]]
    ) -> List[SocialLink]:
        """Replace a user's social links."""
        self._social_links[user_id] = [
            SocialLink(id=uuid4(), user_id=user_id, platform=platform, url=url, order=index)
            for index, (platform, url) in enumerate(items)
        ]
        return await self.list_for_user(user_id)


class MemoryAnalyticsRepository(BaseMemoryRepository, AnalyticsRepository):
    """In-memory implementation of AnalyticsRepository."""

    def __init__(self):
        self.views: List[ProfileView] = []
        self.clicks: List[LinkClick] = []

    @staticmethod
    def _in_range(
        created_at: datetime, since: datetime, until: Optional[datetime]
    ) -> bool:
        return created_at >= since and (until is None or created_at <= until)

    async def get_views(
        self, user_id: UUID, since: datetime, until: Optional[datetime] = None
    ) -> List[ProfileView]:
        """Get a user's profile views in a time range."""
        return [
            view
            for view in self.views
            if view.user_id == user_id and self._in_range(view.created_at, since, until)
        ]

    async def get_clicks(
        self, user_id: UUID, since: datetime, until: Optional[datetime] = None
    ) -> List[LinkClick]:
        """Get a user's link clicks in a time range."""
        return [
            click
            for click in self.clicks
            if click.user_id == user_id and self._in_range(click.created_at, since, until)
        ]

    async def count_views(self, user_id: UUID, since: datetime, before: datetime) -> int:
        """Count a user's profile views in a half-open range."""
        return sum(
            1
            for view in self.views
            if view.user_id == user_id and since <= view.created_at < before
        )

    async def count_clicks(self, user_id: UUID, since: datetime, before: datetime) -> int:
        """Count a user's link clicks in a half-open range."""
        return sum(
            1
            for click in self.clicks
            if click.user_id == user_id and since <= click.created_at < before
        )

    async def record_view(
        self,
        user_id: UUID,
        device: str,
        browser: str,
        referrer: Optional[str],
        created_at: Optional[datetime] = None,
    ) -> ProfileView:
        """Append a profile view event."""
        view = ProfileView(
            id=uuid4(),
            user_id=user_id,
            device=device,
            browser=browser,
            referrer=referrer,
            created_at=created_at or _now(),
        )
        self.views.append(view)
        return view

    async def record_click(
        self,
        link_id: UUID,
        user_id: UUID,
        device: str,
        browser: str,
        referrer: Optional[str],
        created_at: Optional[datetime] = None,
    ) -> LinkClick:
        """Append a link click event."""
        click = LinkClick(
            id=uuid4(),
            link_id=link_id,
            user_id=user_id,
            device=device,
            browser=browser,
            referrer=referrer,
            created_at=created_at or _now(),
        )
        self.clicks.append(click)
        return click


def create_memory_container() -> RepositoryContainer:
    """Build a repository container backed entirely by memory."""
    analytics = MemoryAnalyticsRepository()
    return RepositoryContainer(
        user_repo=MemoryUserRepository(),
        link_repo=MemoryLinkRepository(analytics),
        social_link_repo=MemorySocialLinkRepository(),
        analytics_repo=analytics,
    )
