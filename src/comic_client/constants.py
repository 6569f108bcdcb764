"""
Application-wide constants for Comic Client.

This module defines constants that are used throughout the application
to avoid magic numbers and strings, improving maintainability.
"""

from enum import Enum
from typing import Tuple

# API constants
DEFAULT_API_BASE_URL = "http://localhost:6060/api"
DEFAULT_TIMEOUT = 30
DEFAULT_USER_AGENT = "comic-client/0.1.0"

# The core never retries; a retry adapter is opt-in through config
HTTP_RETRY_TOTAL = 0
HTTP_RETRY_BACKOFF_FACTOR = 1.0
HTTP_RETRY_STATUS_FORCELIST = [429, 500, 502, 503, 504]

# Comment tree constants
DEFAULT_COMMENT_DEPTH = 3
MAX_COMMENT_DEPTH = 100

# Auth constants
DEFAULT_AUTH_COOKIE = "auth_key"
DEFAULT_TOKEN_ENV_VAR = "COMIC_AUTH_TOKEN"
DEFAULT_LOGIN_REDIRECT = "/"
DEFAULT_REDIRECT_STATUS = 307

# HTTP status codes the loaders treat specially
HTTP_OK = 200
HTTP_UNAUTHORIZED = 401
HTTP_GONE = 410

SUCCESS_STATUSES: Tuple[int, ...] = (HTTP_OK,)

# API endpoints, relative to the API base URL
CURRENT_USER_ENDPOINT = "/v1/users/me"
POSTS_ENDPOINT = "/posts"
POST_ENDPOINT = "/posts/{username}/{post_id}"
USER_POSTS_ENDPOINT = "/users/{username}"
USER_COMICS_ENDPOINT = "/v1/users/comics/{username}"
COMIC_BY_SLUG_ENDPOINT = "/v1/comics/by_slug/{comic_slug}/{username}"
COMIC_COMMENTS_ENDPOINT = "/v1/comics/{comic[id]}/comments"
CHAPTER_BY_SLUG_ENDPOINT = (
    "/v1/comics/chapters/by_slug/{username}/{comic_slug}/{chapter_number}/"
)
CHAPTER_COMMENTS_ENDPOINT = "/v1/comics/chapters/{chapter[id]}/comments"
COMIC_GENRES_ENDPOINT = "/v1/comic-genres"
CONFIRM_EMAIL_ENDPOINT = "/v1/users/confirm_email/{verification_id}"
EMAIL_VERIFICATION_ENDPOINT = "/v1/users/email_verification"

# User-facing messages for the email verification pages
EMAIL_CONFIRMED_MESSAGE = "Your email has been verified! You may close this page."
EMAIL_LINK_EXPIRED_MESSAGE = "This link has expired, try to resend the email."
EMAIL_CONFIRM_FAILED_MESSAGE = "Something went wrong."
EMAIL_SENT_MESSAGE = "Email Has been sent! Check your inbox or junk folder."
EMAIL_SEND_FAILED_MESSAGE = "Email failed to be sent"


class HTTPMethod(str, Enum):
    """Enumeration of HTTP methods used by fetch steps."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class CredentialsMode(str, Enum):
    """How a fetch step attaches the session credential."""

    OMIT = "omit"
    INCLUDE = "include"  # sent as the auth cookie
    BEARER = "bearer"  # sent as an Authorization header


class LoaderState(str, Enum):
    """States of a single loader invocation."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    REDIRECT = "redirect"


class FailureKind(str, Enum):
    """Origin of a loader failure."""

    REMOTE = "remote"
    TRANSPORT = "transport"
    INVALID = "invalid"  # request could not be built from params or payloads
