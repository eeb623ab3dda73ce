"""Account API endpoints: sign-up, sign-in and sign-out."""

from fastapi import APIRouter, Depends, Response

from ..auth.accounts import sign_in, sign_up
from ..auth.jwt_auth import UserSession
from ..context import AppContext, get_app_context
from ..repositories.dependencies import get_repository_container
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger
from .schemas import (
    ProblemDetails,
    SessionUserResponse,
    SigninRequest,
    SignupRequest,
    SuccessResponse,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = get_logger("auth")


def set_session_cookie(
    response: Response, context: AppContext, session: UserSession
) -> None:
    """Issue a token for ``session`` and store it in the session cookie."""
    app_config = context.config.app
    response.set_cookie(
        key=app_config.session_cookie_name,
        value=context.jwt_manager.create_token(session),
        max_age=app_config.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=app_config.cookie_secure,
        samesite="strict",
        path="/",
    )


def _session_response(session: UserSession) -> SessionUserResponse:
    return SessionUserResponse.model_validate({"user": session.to_dict()})


@router.post(
    "/signup",
    response_model=SessionUserResponse,
    responses={400: {"model": ProblemDetails, "description": "Invalid or taken"}},
)
async def signup(
    payload: SignupRequest,
    response: Response,
    repos: RepositoryContainer = Depends(get_repository_container),
    context: AppContext = Depends(get_app_context),
) -> SessionUserResponse:
    """Create an account and start a session for it."""
    session = await sign_up(
        repos.user,
        email=payload.email,
        password=payload.password,
        username=payload.username,
        name=payload.name,
        iterations=context.config.app.password_hash_iterations,
    )
    set_session_cookie(response, context, session)
    logger.info(f"Created account {session.username} ({session.id})")
    return _session_response(session)


@router.post(
    "/signin",
    response_model=SessionUserResponse,
    responses={401: {"model": ProblemDetails, "description": "Invalid credentials"}},
)
async def signin(
    payload: SigninRequest,
    response: Response,
    repos: RepositoryContainer = Depends(get_repository_container),
    context: AppContext = Depends(get_app_context),
) -> SessionUserResponse:
    """Check credentials and start a session."""
    session = await sign_in(
        repos.user,
        email=payload.email,
        password=payload.password,
        iterations=context.config.app.password_hash_iterations,
    )
    set_session_cookie(response, context, session)
    logger.info(f"User {session.username} signed in")
    return _session_response(session)


@router.post("/signout", response_model=SuccessResponse)
async def signout(
    response: Response, context: AppContext = Depends(get_app_context)
) -> SuccessResponse:
    """End the session by clearing the cookie."""
    response.delete_cookie(
        key=context.config.app.session_cookie_name,
        path="/",
        httponly=True,
        secure=context.config.app.cookie_secure,
        samesite="strict",
    )
    return SuccessResponse(success=True)
