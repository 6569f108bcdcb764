"""
Page loader definitions.

Each function returns the DependentLoader behind one page of the comics
site. Pages that show comments fetch the comic or chapter first, then its
comments by id, and nest them with the comment tree builder.
"""

from functools import partial
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel

from comic_client.config import get_config
from comic_client.constants import (
    CHAPTER_BY_SLUG_ENDPOINT,
    CHAPTER_COMMENTS_ENDPOINT,
    COMIC_BY_SLUG_ENDPOINT,
    COMIC_COMMENTS_ENDPOINT,
    COMIC_GENRES_ENDPOINT,
    CONFIRM_EMAIL_ENDPOINT,
    CURRENT_USER_ENDPOINT,
    EMAIL_VERIFICATION_ENDPOINT,
    POST_ENDPOINT,
    POSTS_ENDPOINT,
    USER_COMICS_ENDPOINT,
    USER_POSTS_ENDPOINT,
    CredentialsMode,
    HTTPMethod,
)
from comic_client.core.comment_tree import build_comment_tree
from comic_client.core.models import Chapter, Comic, ComicGenre
from comic_client.loaders.runner import DependentLoader
from comic_client.loaders.steps import FetchStep
from comic_client.utils.logging import get_logger

logger = get_logger(__name__)


def validated(model: Type[BaseModel], many: bool = False) -> Callable[[Any], Any]:
    """
    Step transform checking a payload against ``model``.

    The payload stays plain JSON data; fields the API did not send are not
    added. A payload that does not fit raises pydantic's ValidationError,
    which the loader reports as an invalid response.
    """
    def check(payload: Any) -> Any:
        if many:
            if not isinstance(payload, list):
                raise TypeError(f"Expected a list of {model.__name__}, got {type(payload).__name__}")
            return [model.model_validate(item).model_dump(exclude_unset=True) for item in payload]
        return model.model_validate(payload).model_dump(exclude_unset=True)

    return check


def comments_step(name: str, path: str, depth: Optional[int] = None) -> FetchStep:
    """Step fetching a flat comment list and nesting it into a tree."""
    if depth is None:
        depth = get_config().comments.max_depth
    return FetchStep(
        name=name,
        path=path,
        transform=partial(build_comment_tree, depth=depth),
    )


def current_user() -> DependentLoader:
    """Signed-in user for the site layout; ``user`` is None when anonymous."""
    return DependentLoader(
        "current_user",
        [
            FetchStep(
                name="user",
                path=CURRENT_USER_ENDPOINT,
                credentials=CredentialsMode.INCLUDE,
                optional=True,
            )
        ],
    )


def posts_index() -> DependentLoader:
    """Latest posts."""
    return DependentLoader("posts_index", [FetchStep(name="posts", path=POSTS_ENDPOINT)])


def post_page() -> DependentLoader:
    """Single post. Params: ``username``, ``post_id``."""
    return DependentLoader(
        "post_page",
        [FetchStep(name="post", path=POST_ENDPOINT, credentials=CredentialsMode.BEARER)],
    )


def user_posts() -> DependentLoader:
    """Posts of a user. Params: ``username``."""
    return DependentLoader(
        "user_posts",
        [FetchStep(name="posts", path=USER_POSTS_ENDPOINT, credentials=CredentialsMode.BEARER)],
    )


def user_comics() -> DependentLoader:
    """Comics of a user. Params: ``username``."""
    return DependentLoader(
        "user_comics",
        [
            FetchStep(
                name="comics",
                path=USER_COMICS_ENDPOINT,
                credentials=CredentialsMode.INCLUDE,
                transform=validated(Comic, many=True),
            )
        ],
    )


def comic_page(depth: Optional[int] = None) -> DependentLoader:
    """
    Comic with its comment tree.

    Params: ``username``, ``comic_slug``. Result data: ``comic``, ``comments``.
    """
    return DependentLoader(
        "comic_page",
        [
            FetchStep(name="comic", path=COMIC_BY_SLUG_ENDPOINT, transform=validated(Comic)),
            comments_step("comments", COMIC_COMMENTS_ENDPOINT, depth),
        ],
    )


def chapter_page(depth: Optional[int] = None) -> DependentLoader:
    """
    Chapter with its comment tree.

    Params: ``username``, ``comic_slug``, ``chapter_number``.
    Result data: ``chapter``, ``comments``.
    """
    return DependentLoader(
        "chapter_page",
        [
            FetchStep(name="chapter", path=CHAPTER_BY_SLUG_ENDPOINT, transform=validated(Chapter)),
            comments_step("comments", CHAPTER_COMMENTS_ENDPOINT, depth),
        ],
    )


def chapter_settings() -> DependentLoader:
    """Chapter settings; only the owner may open it, anyone else is redirected."""
    return DependentLoader(
        "chapter_settings",
        [
            FetchStep(
                name="chapter",
                path=CHAPTER_BY_SLUG_ENDPOINT,
                credentials=CredentialsMode.INCLUDE,
                transform=validated(Chapter),
            )
        ],
        requires_auth=True,
    )


def new_chapter() -> DependentLoader:
    """Comic a new chapter is being added to. Params: ``username``, ``comic_slug``."""
    return DependentLoader(
        "new_chapter",
        [
            FetchStep(
                name="comic",
                path=COMIC_BY_SLUG_ENDPOINT,
                credentials=CredentialsMode.INCLUDE,
                transform=validated(Comic),
            )
        ],
    )


def comic_genres() -> DependentLoader:
    """Genres offered when creating a comic."""
    return DependentLoader(
        "comic_genres",
        [
            FetchStep(
                name="genres",
                path=COMIC_GENRES_ENDPOINT,
                transform=validated(ComicGenre, many=True),
            )
        ],
    )


def confirm_email() -> DependentLoader:
    """Confirm an email address. Params: ``verification_id``."""
    return DependentLoader(
        "confirm_email",
        [
            FetchStep(
                name="confirmation",
                path=CONFIRM_EMAIL_ENDPOINT,
                method=HTTPMethod.POST,
                credentials=CredentialsMode.INCLUDE,
                expect_json=False,
            )
        ],
    )


def send_email_verification() -> DependentLoader:
    """Send a new verification email to the signed-in user."""
    return DependentLoader(
        "send_email_verification",
        [
            FetchStep(
                name="verification",
                path=EMAIL_VERIFICATION_ENDPOINT,
                method=HTTPMethod.POST,
                credentials=CredentialsMode.INCLUDE,
                expect_json=False,
            )
        ],
    )


# Registry of page loader factories
_page_registry: Dict[str, Callable[..., DependentLoader]] = {
    "current_user": current_user,
    "posts_index": posts_index,
    "post_page": post_page,
    "user_posts": user_posts,
    "user_comics": user_comics,
    "comic_page": comic_page,
    "chapter_page": chapter_page,
    "chapter_settings": chapter_settings,
    "new_chapter": new_chapter,
    "comic_genres": comic_genres,
    "confirm_email": confirm_email,
    "send_email_verification": send_email_verification,
}


def create_loader(page: str, **options) -> DependentLoader:
    """
    Create the loader for a page by name.

    Args:
        page: Page name, see ``get_available_pages``
        **options: Passed to the page factory (e.g. ``depth``)

    Raises:
        ValueError: If the page is unknown
    """
    if page not in _page_registry:
        raise ValueError(f"Unsupported page: {page}")
    logger.debug(f"Creating loader for page '{page}'")
    return _page_registry[page](**options)


def get_available_pages() -> Dict[str, str]:
    """Map page names to the first line of their factory's docstring."""
    pages = {}
    for name, factory in _page_registry.items():
        lines = (factory.__doc__ or "").strip().splitlines()
        pages[name] = lines[0] if lines else ""
    return pages
