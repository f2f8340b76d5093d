from inkwell.dependencies.dependencies import (
    CurrentUserDep,
    MembershipToggleDep,
    PostRepoDep,
    SessionDep,
    ThumbnailServiceDep,
    get_current_user,
    get_membership_toggle,
    get_post_repository,
    get_thumbnail_service,
    oauth2_scheme,
)

__all__ = [
    "CurrentUserDep",
    "MembershipToggleDep",
    "PostRepoDep",
    "SessionDep",
    "ThumbnailServiceDep",
    "get_current_user",
    "get_membership_toggle",
    "get_post_repository",
    "get_thumbnail_service",
    "oauth2_scheme",
]
