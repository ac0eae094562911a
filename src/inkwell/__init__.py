"""
Inkwell Backend
GraphQL API for posts, comments and the users who write them
"""

__version__ = "1.0.0"

from .config import settings

__all__ = ["settings", "__version__"]
