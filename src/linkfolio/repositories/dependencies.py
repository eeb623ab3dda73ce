"""Dependency injection for repository layer."""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..db.database import get_db
from .interfaces import RepositoryContainer
from .sqlalchemy_impl import (
    SQLAlchemyUserRepository,
    SQLAlchemyLinkRepository,
    SQLAlchemySocialLinkRepository,
    SQLAlchemyAnalyticsRepository,
)


def build_repository_container(db: Session) -> RepositoryContainer:
    """Repository container with SQLAlchemy implementations over one session."""
    return RepositoryContainer(
        user_repo=SQLAlchemyUserRepository(db),
        link_repo=SQLAlchemyLinkRepository(db),
        social_link_repo=SQLAlchemySocialLinkRepository(db),
        analytics_repo=SQLAlchemyAnalyticsRepository(db),
    )


def get_repository_container(
    db: Session = Depends(get_db),
) -> RepositoryContainer:
    """
    Create and configure a repository container with SQLAlchemy implementations.

    This is the main dependency injection point for repositories.
    """
    return build_repository_container(db)
