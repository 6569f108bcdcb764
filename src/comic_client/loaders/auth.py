"""
Credential providers for the page loaders.

The hosting session owns the bearer token; loaders only ask for it through
``get_credential()`` and attach it the way each fetch step requests.
"""

import os
from typing import Dict, Optional, Protocol, Tuple

from comic_client.config import get_config
from comic_client.constants import CredentialsMode


class CredentialProvider(Protocol):
    """Anything that can hand out the current session token."""

    def get_credential(self) -> Optional[str]:
        ...


class NoCredentialProvider:
    """Provider for anonymous sessions."""

    def get_credential(self) -> Optional[str]:
        return None


class StaticCredentialProvider:
    """Provider wrapping a token known up front."""

    def __init__(self, token: Optional[str]):
        self.token = token or None

    def get_credential(self) -> Optional[str]:
        return self.token


class EnvCredentialProvider:
    """Provider reading the token from an environment variable on every call."""

    def __init__(self, var_name: Optional[str] = None):
        self.var_name = var_name or get_config().auth.token_env_var

    def get_credential(self) -> Optional[str]:
        return os.getenv(self.var_name) or None


def credential_options(
    mode: CredentialsMode,
    provider: CredentialProvider,
    cookie_name: Optional[str] = None,
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Build the headers and cookies that carry the credential for one request.

    Args:
        mode: How the step wants the credential sent
        provider: Source of the token
        cookie_name: Cookie name for ``INCLUDE`` mode (defaults to config)

    Returns:
        ``(headers, cookies)``; both empty when there is no token or the
        mode is ``OMIT``
    """
    if mode == CredentialsMode.OMIT:
        return {}, {}

    token = provider.get_credential()
    if not token:
        return {}, {}

    if mode == CredentialsMode.BEARER:
        return {"Authorization": f"Bearer {token}"}, {}
    return {}, {cookie_name or get_config().auth.cookie_name: token}
