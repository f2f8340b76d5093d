from inkwell.configs.settings import (
    MAX_CONTENT_LENGTH,
    MAX_THUMBNAIL_URL_LENGTH,
    MAX_TITLE_LENGTH,
    Settings,
    settings,
)

__all__ = [
    "MAX_CONTENT_LENGTH",
    "MAX_THUMBNAIL_URL_LENGTH",
    "MAX_TITLE_LENGTH",
    "Settings",
    "settings",
]
