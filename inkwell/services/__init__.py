from inkwell.services.membership import MembershipToggle, toggle_member
from inkwell.services.thumbnail import ThumbnailService

__all__ = ["MembershipToggle", "ThumbnailService", "toggle_member"]
