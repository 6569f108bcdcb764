"""
Comic Client: page loaders for the comics site API.

Fetches comics, chapters, comments, users and posts from the JSON API and
reshapes them for display, including threaded comment trees.
"""

from comic_client.core.comment_tree import build_comment_tree
from comic_client.core.models import LoadResult
from comic_client.loaders import DependentLoader, FetchStep
from comic_client.services.page_service import PageService

__version__ = "0.1.0"

__all__ = [
    "DependentLoader",
    "FetchStep",
    "LoadResult",
    "PageService",
    "build_comment_tree",
    "__version__",
]
