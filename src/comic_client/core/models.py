"""
Core data models for Comic Client.

This module defines Pydantic models for the API resources the page loaders
consume, and the single outcome model every loader invocation returns.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from comic_client.constants import FailureKind, LoaderState
from comic_client.exceptions import AuthRedirect, LoadFailedError


class UserBrief(BaseModel):
    """Public view of a user, embedded in comics and comments."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="User identifier")
    username: str = Field(..., description="Username")
    email: Optional[str] = Field(None, description="Email, only for the current user")


class Comment(BaseModel):
    """
    A comment on a comic or a chapter.

    ``child_comments`` is derived: the API returns it empty and the comment
    tree builder fills it. Unknown display fields are kept as extras.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "id": "0187f1e2-0000-7000-8000-000000000001",
                "content": "Great first chapter!",
                "user": {"id": "0186f673-7916-7535-96bb-705423e84002", "username": "lmfao"},
                "parent_comment": None,
                "child_comments_ids": ["0187f1e2-0000-7000-8000-000000000002"],
                "child_comments": [],
            }
        },
    )

    id: str = Field(..., description="Unique identifier")
    content: Optional[str] = Field(None, description="Comment body")
    user: Optional[UserBrief] = Field(None, description="Author")
    parent_comment: Optional[str] = Field(None, description="ID of the parent comment")
    child_comments_ids: List[str] = Field(
        default_factory=list, description="IDs of direct replies, in display order"
    )
    child_comments: List["Comment"] = Field(
        default_factory=list, description="Nested replies"
    )

    @property
    def is_top_level(self) -> bool:
        return self.parent_comment is None


class ComicGenre(BaseModel):
    """A genre a comic can be tagged with."""

    id: int
    name: str


class ChapterBrief(BaseModel):
    """Chapter summary listed on a comic."""

    model_config = ConfigDict(extra="allow")

    id: str
    number: int
    title: Optional[str] = None
    description: Optional[str] = None


class Comic(BaseModel):
    """Model representing a comic."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    description: Optional[str] = None
    created_at: Optional[str] = None
    author: Optional[UserBrief] = None
    chapters: List[ChapterBrief] = Field(default_factory=list)
    genres: List[ComicGenre] = Field(default_factory=list)


class Chapter(BaseModel):
    """Model representing a chapter of a comic."""

    model_config = ConfigDict(extra="allow")

    id: str
    comic_id: Optional[str] = None
    number: int
    title: Optional[str] = None
    description: Optional[str] = None


class LoadResult(BaseModel):
    """
    Terminal outcome of one loader invocation.

    Exactly one of three shapes:

    - ``SUCCESS``: ``data`` maps each step name to its (transformed) payload.
    - ``FAILURE``: ``status`` and ``error`` describe the first failing step.
      ``status`` is None for transport failures.
    - ``REDIRECT``: ``location`` and ``status`` tell the caller where to go.
    """

    state: LoaderState
    loader: str = Field(..., description="Name of the loader that produced this result")
    data: Dict[str, Any] = Field(default_factory=dict)
    status: Optional[int] = None
    error: Optional[Dict[str, Any]] = None
    kind: Optional[FailureKind] = None
    location: Optional[str] = None
    step: Optional[str] = Field(None, description="Step that ended the loader early")

    @classmethod
    def success(cls, loader: str, data: Dict[str, Any]) -> "LoadResult":
        return cls(state=LoaderState.SUCCESS, loader=loader, data=data)

    @classmethod
    def failure(
        cls,
        loader: str,
        step: str,
        error: Dict[str, Any],
        status: Optional[int] = None,
        kind: FailureKind = FailureKind.REMOTE,
    ) -> "LoadResult":
        return cls(
            state=LoaderState.FAILURE,
            loader=loader,
            step=step,
            status=status,
            error=error,
            kind=kind,
        )

    @classmethod
    def redirect(cls, loader: str, step: str, location: str, status: int) -> "LoadResult":
        return cls(
            state=LoaderState.REDIRECT,
            loader=loader,
            step=step,
            location=location,
            status=status,
        )

    @property
    def ok(self) -> bool:
        return self.state == LoaderState.SUCCESS

    @property
    def message(self) -> Optional[str]:
        """Error message of a failure, if any."""
        if self.error is None:
            return None
        return str(self.error.get("error", ""))

    def unwrap(self) -> Dict[str, Any]:
        """
        Return the success data or raise.

        Raises:
            LoadFailedError: If the loader failed
            AuthRedirect: If the loader asked for a redirect
        """
        if self.state == LoaderState.SUCCESS:
            return self.data
        if self.state == LoaderState.REDIRECT:
            raise AuthRedirect(self.location or "/", self.status or 307, step=self.step)
        raise LoadFailedError(
            self.message or "Load failed",
            status_code=self.status,
            error=self.error,
            step=self.step,
        )
