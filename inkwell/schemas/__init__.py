from inkwell.schemas.auth import TokenData
from inkwell.schemas.health import HealthCheckResponse
from inkwell.schemas.post import (
    AuthorSummary,
    EnrichedPost,
    PostCreate,
    PostDeleteResponse,
    PostResponse,
    PostUpdate,
    TopicSummary,
)

__all__ = [
    "AuthorSummary",
    "EnrichedPost",
    "HealthCheckResponse",
    "PostCreate",
    "PostDeleteResponse",
    "PostResponse",
    "PostUpdate",
    "TokenData",
    "TopicSummary",
]
