from .meta import Meta
from .option import Option
from .post import Post
from .term import Term
from .user import User

__all__ = [
    "Meta",
    "Option",
    "Post",
    "Term",
    "User",
]
