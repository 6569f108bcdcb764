"""
HTTP utilities for Comic Client.

This module provides the requests session setup, consistent transport
error handling, error-body parsing and a small API client used by the
page loaders.
"""

from functools import wraps
from http import HTTPStatus
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from comic_client.config import get_config
from comic_client.constants import (
    HTTP_RETRY_BACKOFF_FACTOR,
    HTTP_RETRY_STATUS_FORCELIST,
)
from comic_client.exceptions import TransportError
from comic_client.utils.logging import RequestsLogger, get_logger

logger = get_logger(__name__)


def create_session(
    retries: int = 0,
    backoff_factor: float = HTTP_RETRY_BACKOFF_FACTOR,
    status_forcelist: Optional[list] = None,
    session: Optional[requests.Session] = None,
) -> requests.Session:
    """
    Create a requests Session with request logging.

    A retry adapter is mounted only when ``retries`` is positive; by
    default every request is attempted exactly once.

    Args:
        retries: Maximum number of transport-level retries
        backoff_factor: Backoff factor for retry delay calculation
        status_forcelist: List of HTTP status codes to retry on
        session: Existing session to configure (creates new one if None)

    Returns:
        Configured requests Session
    """
    session = session or requests.Session()

    if retries > 0:
        retry = Retry(
            total=retries,
            backoff_factor=backoff_factor,
            status_forcelist=status_forcelist or HTTP_RETRY_STATUS_FORCELIST,
            allowed_methods=["GET", "HEAD"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

    session.hooks = RequestsLogger().get_hooks()
    return session


def reason_phrase(status_code: int) -> str:
    """Return the standard reason phrase for a status code."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown Error"


def parse_error_body(response: requests.Response) -> Dict[str, Any]:
    """
    Best-effort extraction of an ``{"error": ...}`` body from a failed response.

    Falls back to the response's reason phrase when the body is not JSON.
    This function never raises.

    Args:
        response: The non-success response

    Returns:
        Dictionary that always carries an ``error`` key
    """
    try:
        fallback = response.reason or reason_phrase(response.status_code)
    except Exception:
        fallback = "Unknown Error"

    try:
        body = response.json()
    except Exception:
        return {"error": fallback}

    if isinstance(body, dict):
        error = dict(body)
        if error.get("error") in (None, ""):
            error["error"] = fallback
        return error
    if body is None or body == "":
        return {"error": fallback}
    return {"error": str(body)}


def decode_json(response: requests.Response) -> Any:
    """
    Decode a success response body.

    Raises:
        TransportError: If the body is not valid JSON
    """
    try:
        return response.json()
    except ValueError as e:
        raise TransportError(
            message=f"Invalid JSON in response from {response.url}: {e}",
            status_code=response.status_code,
            response_text=response.text,
        ) from e


def handle_request_errors(func):
    """
    Decorator to handle request errors consistently.

    Catches requests-related exceptions and transforms them into
    TransportError with helpful context.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error: {e}")
            raise TransportError(message=f"Connection error: {e}") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timed out: {e}")
            raise TransportError(message=f"Request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise TransportError(message=f"Request failed: {e}") from e
    return wrapper


class APIClient:
    """
    Client for the comics JSON API.

    Holds the base URL, default headers and the underlying session. It does
    not interpret status codes: the loaders decide what a response means.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Base URL for API requests (defaults to config)
            session: Optional pre-configured session
            user_agent: Optional custom user agent
            headers: Optional additional headers
            timeout: Request timeout in seconds (defaults to config)
        """
        api_config = get_config().api
        self.base_url = (base_url or api_config.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else api_config.timeout
        self.session = session if session is not None else create_session(retries=api_config.retries)

        self.headers = {
            "User-Agent": user_agent or api_config.user_agent,
            "Accept": "application/json",
        }
        if headers:
            self.headers.update(headers)

        self.logger = get_logger(self.__class__.__name__)

    def url_for(self, endpoint: str) -> str:
        """Join an endpoint path onto the base URL."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    @handle_request_errors
    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        cookies: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (appended to base_url)
            params: Optional query parameters
            json: Optional JSON body
            headers: Optional additional headers
            cookies: Optional cookies for this request only
            timeout: Request timeout in seconds

        Returns:
            requests.Response object, whatever its status

        Raises:
            TransportError: If the request could not complete
        """
        url = self.url_for(endpoint)

        request_headers = self.headers.copy()
        if headers:
            request_headers.update(headers)

        self.logger.debug(f"Making {method} request to {url}")

        return self.session.request(
            method=method,
            url=url,
            params=params,
            json=json,
            headers=request_headers,
            cookies=cookies,
            timeout=timeout if timeout is not None else self.timeout,
        )

    def get(self, endpoint: str, **kwargs) -> requests.Response:
        """Make a GET request to the API."""
        return self.request("GET", endpoint, **kwargs)

    def post(self, endpoint: str, **kwargs) -> requests.Response:
        """Make a POST request to the API."""
        return self.request("POST", endpoint, **kwargs)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
