"""Process-wide resources handed to request handlers."""

from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .auth.jwt_auth import JWTTokenManager
from .config import LinkFolioConfig


@dataclass
class AppContext:
    """Built once by ``create_app`` and stored on ``app.state.context``."""

    config: LinkFolioConfig
    engine: Engine
    session_factory: sessionmaker
    jwt_manager: JWTTokenManager

    def dispose(self) -> None:
        self.engine.dispose()


def get_app_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application's context."""
    return request.app.state.context
