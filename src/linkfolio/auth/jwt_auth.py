"""JWT session tokens carried in the ``auth-token`` cookie."""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone, timedelta
from typing import Any, Dict, Optional
from uuid import UUID

import jwt

from ..db.models import User


@dataclass(frozen=True)
class UserSession:
    """Identity claims of an authenticated caller."""

    id: str
    email: str
    username: str
    name: Optional[str]
    plan: str

    @property
    def user_id(self) -> UUID:
        return UUID(self.id)

    @classmethod
    def from_user(cls, user: User) -> "UserSession":
        return cls(
            id=str(user.id),
            email=user.email,
            username=user.username,
            name=user.name,
            plan=user.plan,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class JWTTokenManager:
    """Issues and verifies signed session tokens."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", ttl_days: int = 7):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.ttl = timedelta(days=ttl_days)

    def create_token(self, session: UserSession, now: Optional[datetime] = None) -> str:
        """
        Create a signed token for a session.

        Args:
            session: Identity claims to embed under the ``user`` claim
            now: Issue time (defaults to the current UTC time)

        Returns:
            Encoded JWT
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "user": session.to_dict(),
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Optional[UserSession]:
        """
        Decode a token into a session.

        Returns:
            The session, or None if the token is expired, forged or malformed
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            claims = payload["user"]
            session = UserSession(
                id=str(claims["id"]),
                email=claims["email"],
                username=claims["username"],
                name=claims.get("name"),
                plan=claims.get("plan", "free"),
            )
            UUID(session.id)
        except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
            return None
        return session
