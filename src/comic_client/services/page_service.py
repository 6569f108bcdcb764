"""
Page service for Comic Client.

This service binds one API client and one credential provider to the page
loaders, so callers load a page by calling a method with its route
parameters and get a single LoadResult back.
"""

from typing import Any, Dict, Optional, Union

from comic_client.config import get_config
from comic_client.constants import (
    EMAIL_CONFIRM_FAILED_MESSAGE,
    EMAIL_CONFIRMED_MESSAGE,
    EMAIL_LINK_EXPIRED_MESSAGE,
    EMAIL_SEND_FAILED_MESSAGE,
    EMAIL_SENT_MESSAGE,
    HTTP_GONE,
)
from comic_client.core.models import LoadResult
from comic_client.exceptions import ValidationError
from comic_client.loaders import pages
from comic_client.loaders.auth import CredentialProvider, NoCredentialProvider
from comic_client.utils.http import APIClient
from comic_client.utils.logging import get_logger
from comic_client.utils.validators import (
    validate_chapter_number,
    validate_slug,
    validate_username,
)

logger = get_logger(__name__)


def _check_username(username: str) -> None:
    if not validate_username(username):
        raise ValidationError(f"Invalid username '{username}'")


def _check_slug(comic_slug: str) -> None:
    if not validate_slug(comic_slug):
        raise ValidationError(f"Invalid comic slug '{comic_slug}'")


def _check_chapter_number(chapter_number: Union[int, str]) -> None:
    if not validate_chapter_number(chapter_number):
        raise ValidationError(f"Invalid chapter number '{chapter_number}'")


class PageService:
    """
    Loads the data behind each page of the comics site.

    Attributes:
        client (APIClient): Client used for every request.
        credentials (CredentialProvider): Source of the session token.
        depth (int): Levels of the comment trees built for comic and chapter pages.
    """

    def __init__(
        self,
        client: Optional[APIClient] = None,
        credentials: Optional[CredentialProvider] = None,
        depth: Optional[int] = None,
    ):
        """
        Initialize the page service.

        Args:
            client: API client (a default one is created from config if None)
            credentials: Credential provider (anonymous if None)
            depth: Comment tree depth (config ``COMMENT_MAX_DEPTH`` if None)
        """
        self.client = client or APIClient()
        self.credentials = credentials or NoCredentialProvider()
        self.depth = depth if depth is not None else get_config().comments.max_depth
        logger.debug(f"PageService initialized for {self.client.base_url}")

    def _load(self, page: str, params: Optional[Dict[str, Any]] = None, **options) -> LoadResult:
        loader = pages.create_loader(page, **options)
        return loader.load(self.client, params or {}, self.credentials)

    def current_user(self) -> Optional[Dict[str, Any]]:
        """Return the signed-in user, or None for anonymous sessions."""
        result = self._load("current_user")
        if not result.ok:
            return None
        return result.data.get("user")

    def load_posts(self) -> LoadResult:
        return self._load("posts_index")

    def load_post(self, username: str, post_id: str) -> LoadResult:
        _check_username(username)
        return self._load("post_page", {"username": username, "post_id": post_id})

    def load_user_posts(self, username: str) -> LoadResult:
        _check_username(username)
        return self._load("user_posts", {"username": username})

    def load_user_comics(self, username: str) -> LoadResult:
        _check_username(username)
        return self._load("user_comics", {"username": username})

    def load_comic(self, username: str, comic_slug: str) -> LoadResult:
        """
        Load a comic and its comment tree.

        Returns:
            LoadResult whose data holds ``comic`` and ``comments`` (top-level
            comments with nested ``child_comments``)
        """
        _check_username(username)
        _check_slug(comic_slug)
        return self._load(
            "comic_page",
            {"username": username, "comic_slug": comic_slug},
            depth=self.depth,
        )

    def load_chapter(
        self, username: str, comic_slug: str, chapter_number: Union[int, str]
    ) -> LoadResult:
        """
        Load a chapter and its comment tree.

        Returns:
            LoadResult whose data holds ``chapter`` and ``comments``
        """
        _check_username(username)
        _check_slug(comic_slug)
        _check_chapter_number(chapter_number)
        return self._load(
            "chapter_page",
            {"username": username, "comic_slug": comic_slug, "chapter_number": chapter_number},
            depth=self.depth,
        )

    def load_chapter_settings(
        self, username: str, comic_slug: str, chapter_number: Union[int, str]
    ) -> LoadResult:
        """
        Load a chapter for its settings page.

        Unauthenticated sessions get a REDIRECT result. On success the data
        also carries ``comic_id`` and ``username`` for the settings form.
        """
        _check_username(username)
        _check_slug(comic_slug)
        _check_chapter_number(chapter_number)
        result = self._load(
            "chapter_settings",
            {"username": username, "comic_slug": comic_slug, "chapter_number": chapter_number},
        )
        if not result.ok:
            return result

        chapter = result.data["chapter"]
        comic_id = chapter.get("comic_id") if isinstance(chapter, dict) else None
        return result.model_copy(
            update={"data": {**result.data, "comic_id": comic_id, "username": username}}
        )

    def load_new_chapter(self, username: str, comic_slug: str) -> LoadResult:
        _check_username(username)
        _check_slug(comic_slug)
        result = self._load("new_chapter", {"username": username, "comic_slug": comic_slug})
        if not result.ok:
            return result
        return result.model_copy(update={"data": {**result.data, "username": username}})

    def load_comic_genres(self) -> LoadResult:
        return self._load("comic_genres")

    def confirm_email(self, verification_id: str) -> str:
        """Confirm an email address and return the message to show."""
        result = self._load("confirm_email", {"verification_id": verification_id})
        if result.ok:
            return EMAIL_CONFIRMED_MESSAGE
        if result.status == HTTP_GONE:
            return EMAIL_LINK_EXPIRED_MESSAGE
        return EMAIL_CONFIRM_FAILED_MESSAGE

    def send_email_verification(self) -> str:
        """Ask the API to send a verification email and return the message to show."""
        result = self._load("send_email_verification")
        return EMAIL_SENT_MESSAGE if result.ok else EMAIL_SEND_FAILED_MESSAGE
