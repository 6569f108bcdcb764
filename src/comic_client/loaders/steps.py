"""
Fetch step descriptors.

A step names one remote call. Its path and body may depend on the loader
parameters and on the payloads of the steps before it, which are available
under their step names (``"/v1/comics/{comic[id]}/comments"``).
"""

from string import Formatter
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from comic_client.constants import CredentialsMode, HTTPMethod
from comic_client.exceptions import ValidationError
from comic_client.utils.validators import quote_segment

StepContext = Mapping[str, Any]


class PathFormatter(Formatter):
    """``str.format`` that quotes every substituted value as a path segment."""

    def format_field(self, value: Any, format_spec: str) -> str:
        return quote_segment(super().format_field(value, format_spec))


_formatter = PathFormatter()


class FetchStep(BaseModel):
    """One remote call in a dependent loader."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Key of this step's payload in the loader context")
    path: Union[str, Callable[[StepContext], str]] = Field(
        ..., description="Path template or callable building the path"
    )
    method: HTTPMethod = HTTPMethod.GET
    headers: Dict[str, str] = Field(default_factory=dict)
    credentials: CredentialsMode = CredentialsMode.OMIT
    body: Any = Field(None, description="JSON body, or a callable building it from the context")
    requires_auth: bool = Field(
        False, description="Treat 401 as a redirect even if the loader does not require auth"
    )
    optional: bool = Field(
        False, description="On failure store None for this step instead of failing the loader"
    )
    expect_json: bool = Field(
        True, description="Decode the success body as JSON; otherwise keep the raw text"
    )
    transform: Optional[Callable[[Any], Any]] = Field(
        None, description="Applied to the parsed payload before it enters the context"
    )

    def render_path(self, context: StepContext) -> str:
        """
        Build the request path for this step.

        Raises:
            ValidationError: If the template refers to a missing value
        """
        try:
            if callable(self.path):
                return self.path(context)
            return _formatter.vformat(self.path, (), context)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ValidationError(
                f"Cannot build path for step '{self.name}'",
                {"template": str(self.path), "missing": str(e)},
            ) from e

    def render_body(self, context: StepContext) -> Any:
        """
        Build the JSON body for this step.

        Raises:
            ValidationError: If a body callable cannot read what it needs
        """
        if not callable(self.body):
            return self.body
        try:
            return self.body(context)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ValidationError(
                f"Cannot build body for step '{self.name}'", {"missing": str(e)}
            ) from e
