"""Account sign-up and sign-in."""

from typing import Optional

from fastapi import HTTPException, status

from ..repositories.interfaces import UserRepository
from .jwt_auth import UserSession
from .security import hash_password, verify_password, DEFAULT_ITERATIONS


async def sign_up(
    users: UserRepository,
    email: str,
    password: str,
    username: str,
    name: Optional[str] = None,
    iterations: int = DEFAULT_ITERATIONS,
) -> UserSession:
    """
    Create an account.

    Raises:
        HTTPException: 400 if the email or username is already taken
    """
    existing = await users.find_conflict(email, username)
    if existing:
        if existing.email == email.lower():
            detail = "Email already in use"
        else:
            detail = "Username already taken"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    salt_hex, hash_hex = hash_password(password, iterations=iterations)
    user = await users.create(
        email=email,
        username=username,
        password_hash=hash_hex,
        password_salt=salt_hex,
        name=name,
    )
    return UserSession.from_user(user)


async def sign_in(
    users: UserRepository,
    email: str,
    password: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> UserSession:
    """
    Check credentials.

    Raises:
        HTTPException: 401 with the same message for unknown email and wrong
            password
    """
    user = await users.get_by_email(email)
    if not user or not verify_password(
        password, user.password_salt, user.password_hash, iterations=iterations
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return UserSession.from_user(user)
