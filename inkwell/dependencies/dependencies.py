"""Request dependencies: sessions, repositories, services and the actor."""

from typing import Annotated

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED

from inkwell.db import get_session
from inkwell.managers.token_manager import decode_access_token
from inkwell.models import UserDB
from inkwell.repositories import PostRepository, UserRepository
from inkwell.services import MembershipToggle, ThumbnailService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_post_repository(session: SessionDep) -> PostRepository:
    """
    Dependency to get PostRepository instance.

    Args:
        session: Database session

    Returns:
        PostRepository: Repository bound to the request session
    """
    return PostRepository(session)


PostRepoDep = Annotated[PostRepository, Depends(get_post_repository)]


def get_membership_toggle(repo: PostRepoDep) -> MembershipToggle:
    """Dependency to get the like toggle bound to the request repository."""
    return MembershipToggle(repo)


MembershipToggleDep = Annotated[MembershipToggle, Depends(get_membership_toggle)]


def get_thumbnail_service() -> ThumbnailService:
    """Dependency to get the thumbnail service."""
    return ThumbnailService()


ThumbnailServiceDep = Annotated[ThumbnailService, Depends(get_thumbnail_service)]


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: SessionDep,
) -> UserDB:
    """
    Get current authenticated user using user_id from token claims.

    Parameters
    ----------
    token : str
        Bearer token.
    session : AsyncSession
        Database session.

    Returns
    -------
    UserDB
        Current authenticated user.

    Raises
    ------
    HTTPException
        401 if the token is invalid or names an unknown user.
    """
    token_data = decode_access_token(token)
    if not token_data:
        raise _credentials_error("Could not validate credentials")

    user = await UserRepository(session).get_by_id(token_data.user_id)
    if not user:
        raise _credentials_error("User not found")

    return user


CurrentUserDep = Annotated[UserDB, Depends(get_current_user)]
