"""
Dependent resource loader.

A loader runs a short, ordered list of fetch steps. Each step may use the
payloads of the steps before it to build its request, so steps always run
one after another. The first failing step ends the invocation:

    PENDING -> (step ok) -> PENDING -> ... -> SUCCESS
    PENDING -> FAILURE
    PENDING -> REDIRECT   (401 on a page that requires authentication)

Nothing is retried and no partial data is returned on failure.
"""

from typing import Any, Dict, Mapping, Optional, Sequence

from comic_client.config import get_config
from comic_client.constants import (
    HTTP_UNAUTHORIZED,
    SUCCESS_STATUSES,
    FailureKind,
    LoaderState,
)
from comic_client.core.models import LoadResult
from comic_client.exceptions import TransportError, ValidationError
from comic_client.loaders.auth import (
    CredentialProvider,
    NoCredentialProvider,
    credential_options,
)
from comic_client.loaders.steps import FetchStep
from comic_client.utils.http import APIClient, decode_json, parse_error_body
from comic_client.utils.logging import get_logger

logger = get_logger(__name__)


class DependentLoader:
    """
    Reusable stage runner for one page.

    Attributes:
        name: Loader name used in logs and results
        steps: Fetch steps in execution order
        requires_auth: Whether a 401 from any step becomes a redirect
        redirect_to: Redirect location for unauthenticated requests
        redirect_status: HTTP status of the redirect instruction
    """

    def __init__(
        self,
        name: str,
        steps: Sequence[FetchStep],
        requires_auth: bool = False,
        redirect_to: Optional[str] = None,
        redirect_status: Optional[int] = None,
    ):
        if not steps:
            raise ValueError(f"Loader '{name}' needs at least one step")
        names = [step.name for step in steps]
        if len(set(names)) != len(names):
            raise ValueError(f"Loader '{name}' has duplicate step names: {names}")

        auth_config = get_config().auth
        self.name = name
        self.steps = list(steps)
        self.requires_auth = requires_auth
        self.redirect_to = redirect_to or auth_config.login_redirect
        self.redirect_status = redirect_status or auth_config.redirect_status

    def __repr__(self) -> str:
        return f"DependentLoader({self.name!r}, steps={[step.name for step in self.steps]})"

    def load(
        self,
        client: APIClient,
        params: Optional[Mapping[str, Any]] = None,
        credentials: Optional[CredentialProvider] = None,
    ) -> LoadResult:
        """
        Run every step in order and return the single outcome.

        Args:
            client: API client used for every request
            params: Page parameters available to every step's templates
            credentials: Source of the session token (anonymous if None)

        Returns:
            LoadResult in state SUCCESS, FAILURE or REDIRECT
        """
        provider = credentials or NoCredentialProvider()
        context: Dict[str, Any] = dict(params or {})
        data: Dict[str, Any] = {}

        logger.debug(f"Loader '{self.name}' started with {len(self.steps)} step(s)")

        for step in self.steps:
            outcome = self._run_step(step, client, context, provider)
            if isinstance(outcome, LoadResult):
                if step.optional and outcome.state == LoaderState.FAILURE:
                    logger.debug(f"Optional step '{step.name}' failed, continuing without it")
                    context[step.name] = data[step.name] = None
                    continue
                logger.info(
                    f"Loader '{self.name}' ended in {outcome.state.value} at step "
                    f"'{step.name}' (status={outcome.status})"
                )
                return outcome
            context[step.name] = data[step.name] = outcome
            logger.debug(f"Loader '{self.name}' step '{step.name}' ok")

        logger.debug(f"Loader '{self.name}' succeeded")
        return LoadResult.success(self.name, data)

    def _run_step(
        self,
        step: FetchStep,
        client: APIClient,
        context: Mapping[str, Any],
        provider: CredentialProvider,
    ) -> Any:
        """Return the step payload, or a terminal LoadResult."""
        try:
            path = step.render_path(context)
            body = step.render_body(context)
        except ValidationError as e:
            logger.error(f"Loader '{self.name}' could not build step '{step.name}': {e}")
            return LoadResult.failure(
                self.name, step.name, {"error": e.message, **e.details}, kind=FailureKind.INVALID
            )

        auth_headers, cookies = credential_options(step.credentials, provider)
        headers = {**step.headers, **auth_headers}

        try:
            response = client.request(
                step.method.value,
                path,
                json=body,
                headers=headers or None,
                cookies=cookies or None,
            )
        except TransportError as e:
            return LoadResult.failure(
                self.name, step.name, {"error": e.message}, kind=FailureKind.TRANSPORT
            )

        status = response.status_code
        if status == HTTP_UNAUTHORIZED and (self.requires_auth or step.requires_auth):
            logger.info(f"Step '{step.name}' unauthenticated, redirecting to {self.redirect_to}")
            return LoadResult.redirect(self.name, step.name, self.redirect_to, self.redirect_status)

        if status not in SUCCESS_STATUSES:
            error = parse_error_body(response)
            logger.warning(f"Step '{step.name}' failed with {status}: {error.get('error')}")
            return LoadResult.failure(self.name, step.name, error, status=status)

        if not step.expect_json:
            return response.text or None

        try:
            payload = decode_json(response)
        except TransportError as e:
            return LoadResult.failure(
                self.name, step.name, {"error": e.message}, status=status, kind=FailureKind.TRANSPORT
            )

        if step.transform is not None:
            try:
                payload = step.transform(payload)
            except (TypeError, ValueError, AttributeError) as e:
                logger.error(f"Step '{step.name}' returned an unexpected payload: {e}")
                return LoadResult.failure(
                    self.name, step.name, {"error": f"Unexpected payload: {e}"},
                    status=status, kind=FailureKind.INVALID,
                )
        return payload
