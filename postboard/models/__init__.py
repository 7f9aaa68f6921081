# Models package init; importing it registers every table on Base.metadata
from postboard.models.post import Post
from postboard.models.user import DEFAULT_STATUS, User

__all__ = ["DEFAULT_STATUS", "Post", "User"]
