"""
Dependent resource loaders.

Page loaders run one or two sequential fetch steps and return a single
LoadResult: the combined payloads, one failure, or a login redirect.
"""

from comic_client.loaders.auth import (
    CredentialProvider,
    EnvCredentialProvider,
    NoCredentialProvider,
    StaticCredentialProvider,
)
from comic_client.loaders.pages import create_loader, get_available_pages
from comic_client.loaders.runner import DependentLoader
from comic_client.loaders.steps import FetchStep

__all__ = [
    "CredentialProvider",
    "DependentLoader",
    "EnvCredentialProvider",
    "FetchStep",
    "NoCredentialProvider",
    "StaticCredentialProvider",
    "create_loader",
    "get_available_pages",
]
