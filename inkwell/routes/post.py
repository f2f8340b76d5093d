"""
Post Routes.

Provides CRUD endpoints for posts plus the two engagement operations.

Summary
-------
Endpoints include:
  - Create post (multipart, optional thumbnail upload)
  - List posts
  - Get post by id
  - Update post
  - Delete post
  - Record a view
  - Toggle a like

Dependencies
------------
  - `PostOpsDeps`: Bundles repository and current user for authenticated operations.

Every response carries the post enriched with its author and topic summaries.
"""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from fastapi.responses import ORJSONResponse
from pydantic import ValidationError
from starlette.status import HTTP_201_CREATED

from inkwell.dependencies import (
    CurrentUserDep,
    MembershipToggleDep,
    PostRepoDep,
    ThumbnailServiceDep,
)
from inkwell.errors import (
    PostForbiddenError,
    PostNotFoundError,
    PostValidationError,
    format_validation_errors,
)
from inkwell.models import PostDB
from inkwell.monitoring import get_logger
from inkwell.repositories import PostRepository
from inkwell.schemas import PostCreate, PostDeleteResponse, PostResponse, PostUpdate

router = APIRouter(prefix="/posts", tags=["📝 Posts"])

logger = get_logger(__name__)

POST_EXAMPLE = {
    "id": "550e8400-e29b-41d4-a716-446655440000",
    "title": "Writing async Python that reads well",
    "content": "Coroutines are easiest to follow when...",
    "author": {
        "id": "123e4567-e89b-12d3-a456-426614174000",
        "username": "ada",
        "displayName": "Ada L.",
    },
    "topic": {"id": "9b2d7c1e-6f0a-4a57-8f63-0d7e1b2a4c11", "name": "python"},
    "thumbnail": "/uploads/thumbnails/1735689600000-cover.png",
    "views": 42,
    "likedBy": ["123e4567-e89b-12d3-a456-426614174000"],
    "likeCount": 1,
    "createdAt": "2025-01-01T00:00:00Z",
    "updatedAt": None,
}

NOT_FOUND_RESPONSE = {
    "description": "Not found",
    "content": {
        "application/json": {"example": {"detail": "Post with ID <uuid> not found"}},
    },
}
UNAUTHORIZED_RESPONSE = {
    "description": "Missing or invalid bearer token",
    "content": {"application/json": {"example": {"detail": "Could not validate credentials"}}},
}
BAD_REQUEST_RESPONSE = {
    "description": "Bad request",
    "content": {
        "application/json": {
            "example": {
                "detail": "Validation failed",
                "errors": [{"field": "title", "message": "Field required", "type": "missing"}],
            },
        },
    },
}


@dataclass(frozen=True)
class PostOpsDeps:
    """Dependencies for authenticated post operations."""

    repo: PostRepoDep
    current_user: CurrentUserDep


async def _get_owned_post(deps: PostOpsDeps, post_id: UUID, action: str) -> PostDB:
    post = await deps.repo.get_or_raise(post_id)
    if post.author_id != deps.current_user.id:
        raise PostForbiddenError(action)
    return post


async def _ensure_topic(repo: PostRepository, topic_id: UUID) -> None:
    if not await repo.topic_exists(topic_id):
        raise PostValidationError(
            f"Topic with ID {topic_id} not found",
            errors=[{"field": "topicId", "message": "Unknown topic", "type": "not_found"}],
        )


async def _enriched_response(repo: PostRepository, post_id: UUID) -> PostResponse:
    enriched = await repo.get_enriched(post_id)
    if enriched is None:
        raise PostNotFoundError(post_id)
    return PostResponse.from_enriched(enriched)


@router.post(
    "",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    status_code=HTTP_201_CREATED,
    summary="Create a new post",
    description=(
        "Create a post authored by the current user. Send a multipart form; the "
        "thumbnail is either an uploaded image file or a URI in `thumbnailUrl`."
    ),
    responses={
        201: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        400: BAD_REQUEST_RESPONSE,
        401: UNAUTHORIZED_RESPONSE,
        413: {
            "description": "Thumbnail too large",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Your image is too large. Please use an image smaller than 5MB.",
                    },
                },
            },
        },
        415: {
            "description": "Unsupported thumbnail type",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "This image format isn't supported. "
                        "Please use JPEG, PNG, WebP or GIF images.",
                    },
                },
            },
        },
    },
    operation_id="posts_create",
)
async def create_post(
    title: Annotated[str, Form(description="Post title")],
    content: Annotated[str, Form(description="Post content")],
    topic_id: Annotated[str, Form(alias="topicId", description="Topic ID")],
    deps: Annotated[PostOpsDeps, Depends()],
    thumbnails: ThumbnailServiceDep,
    thumbnail: Annotated[UploadFile | None, File(description="Thumbnail image")] = None,
    thumbnail_url: Annotated[
        str | None,
        Form(alias="thumbnailUrl", description="Thumbnail URI when not uploading a file"),
    ] = None,
) -> PostResponse:
    """
    Create a new post.

    Parameters
    ----------
    title : str
        Post title.
    content : str
        Post content.
    topic_id : str
        ID of an existing topic.
    deps : PostOpsDeps
        Operation dependencies (repo + current_user).
    thumbnails : ThumbnailService
        Thumbnail validation and storage.
    thumbnail : UploadFile | None
        Optional uploaded image; takes precedence over `thumbnail_url`.
    thumbnail_url : str | None
        Optional pre-hosted thumbnail URI.

    Returns
    -------
    PostResponse
        Created post, enriched.

    Raises
    ------
    PostValidationError
        If a field is invalid or the topic does not exist.
    UploadError
        If the uploaded thumbnail is rejected or cannot be stored.
    """
    has_upload = thumbnail is not None and bool(thumbnail.filename)
    try:
        command = PostCreate(
            title=title,
            content=content,
            topicId=topic_id,
            thumbnail=None if has_upload else (thumbnail_url or None),
        )
    except ValidationError as e:
        raise PostValidationError(errors=format_validation_errors(e.errors())) from e

    await _ensure_topic(deps.repo, command.topic_id)

    if has_upload and thumbnail is not None:
        command.thumbnail = await thumbnails.store(thumbnail)

    try:
        post = await deps.repo.create(command, author_id=deps.current_user.id)
    except Exception:
        if has_upload:
            await thumbnails.discard(command.thumbnail)
        raise

    logger.info("Post %s created by %s", post.id, deps.current_user.id)
    return await _enriched_response(deps.repo, post.id)


@router.get(
    "",
    response_class=ORJSONResponse,
    response_model=list[PostResponse],
    summary="List posts",
    description="List every post, newest first.",
    responses={200: {"content": {"application/json": {"example": [POST_EXAMPLE]}}}},
    operation_id="posts_list",
)
async def list_posts(repo: PostRepoDep) -> list[PostResponse]:
    """
    List all posts.

    Parameters
    ----------
    repo : PostRepository
        Repository dependency.

    Returns
    -------
    list[PostResponse]
        Posts ordered by creation time, newest first.
    """
    return [PostResponse.from_enriched(enriched) for enriched in await repo.list_enriched()]


@router.get(
    "/{post_id}",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Get post by ID",
    description="Retrieve a single post by its UUID.",
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        400: BAD_REQUEST_RESPONSE,
        404: NOT_FOUND_RESPONSE,
    },
    operation_id="posts_get_by_id",
)
async def get_post(post_id: UUID, repo: PostRepoDep) -> PostResponse:
    """
    Get a post by ID.

    Parameters
    ----------
    post_id : UUID
        Post identifier.
    repo : PostRepository
        Repository dependency.

    Returns
    -------
    PostResponse
        Post data.

    Raises
    ------
    PostNotFoundError
        If the post does not exist.
    """
    return await _enriched_response(repo, post_id)


@router.put(
    "/{post_id}",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Update post",
    description="Update a post you authored. Only provided fields are changed.",
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        400: BAD_REQUEST_RESPONSE,
        401: UNAUTHORIZED_RESPONSE,
        403: {
            "description": "Forbidden",
            "content": {
                "application/json": {"example": {"detail": "You can only update your own posts"}},
            },
        },
        404: NOT_FOUND_RESPONSE,
    },
    operation_id="posts_update",
)
async def update_post(
    post_id: UUID,
    post_update: Annotated[
        PostUpdate,
        Body(
            examples=[
                {"title": "Writing async Python that reads well (revised)"},
                {"thumbnail": None},
            ],
        ),
    ],
    deps: Annotated[PostOpsDeps, Depends()],
) -> PostResponse:
    """
    Update post information.

    Parameters
    ----------
    post_id : UUID
        Post identifier.
    post_update : PostUpdate
        Partial update payload.
    deps : PostOpsDeps
        Operation dependencies (repo + current_user).

    Returns
    -------
    PostResponse
        Updated post.

    Raises
    ------
    PostNotFoundError
        If the post does not exist.
    PostForbiddenError
        If the current user is not the author.
    PostValidationError
        If the new topic does not exist.
    """
    post = await _get_owned_post(deps, post_id, "update")
    if post_update.topic_id is not None:
        await _ensure_topic(deps.repo, post_update.topic_id)

    await deps.repo.update(post, post_update)
    logger.info("Post %s updated by %s", post_id, deps.current_user.id)
    return await _enriched_response(deps.repo, post_id)


@router.delete(
    "/{post_id}",
    response_class=ORJSONResponse,
    response_model=PostDeleteResponse,
    summary="Delete post",
    description="Delete a post you authored.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "message": "Post deleted",
                        "id": "550e8400-e29b-41d4-a716-446655440000",
                    },
                },
            },
        },
        401: UNAUTHORIZED_RESPONSE,
        403: {
            "description": "Forbidden",
            "content": {
                "application/json": {"example": {"detail": "You can only delete your own posts"}},
            },
        },
        404: NOT_FOUND_RESPONSE,
    },
    operation_id="posts_delete",
)
async def delete_post(
    post_id: UUID,
    deps: Annotated[PostOpsDeps, Depends()],
    thumbnails: ThumbnailServiceDep,
) -> PostDeleteResponse:
    """
    Delete post by ID.

    Parameters
    ----------
    post_id : UUID
        Post identifier.
    deps : PostOpsDeps
        Operation dependencies (repo + current_user).
    thumbnails : ThumbnailService
        Used to remove a thumbnail stored by this service.

    Returns
    -------
    PostDeleteResponse
        Confirmation message.
    """
    post = await _get_owned_post(deps, post_id, "delete")
    thumbnail = post.thumbnail
    await deps.repo.delete(post)
    await thumbnails.discard(thumbnail)
    logger.info("Post %s deleted by %s", post_id, deps.current_user.id)
    return PostDeleteResponse(id=post_id)


@router.post(
    "/{post_id}/view",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Record a view",
    description="Increment the view counter of a post by one.",
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        404: NOT_FOUND_RESPONSE,
    },
    operation_id="posts_view",
)
async def view_post(post_id: UUID, membership: MembershipToggleDep) -> PostResponse:
    """
    Record one view of a post.

    Parameters
    ----------
    post_id : UUID
        Post identifier.
    membership : MembershipToggle
        Engagement service dependency.

    Returns
    -------
    PostResponse
        Post with the incremented counter.
    """
    return await membership.increment_view(post_id)


@router.post(
    "/{post_id}/like",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Toggle like",
    description="Like the post, or remove your like if you already liked it.",
    responses={
        200: {"content": {"application/json": {"example": POST_EXAMPLE}}},
        401: UNAUTHORIZED_RESPONSE,
        404: NOT_FOUND_RESPONSE,
        500: {
            "description": "Concurrent updates exhausted the retry budget",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Post with ID <uuid> was modified concurrently",
                        "post_id": "<uuid>",
                    },
                },
            },
        },
    },
    operation_id="posts_like",
)
async def like_post(
    post_id: UUID,
    membership: MembershipToggleDep,
    current_user: CurrentUserDep,
) -> PostResponse:
    """
    Toggle the current user's like on a post.

    Parameters
    ----------
    post_id : UUID
        Post identifier.
    membership : MembershipToggle
        Engagement service dependency.
    current_user : UserDB
        Authenticated user.

    Returns
    -------
    PostResponse
        Post with the updated like set.
    """
    return await membership.toggle(post_id, current_user.id)
