"""Shared fixtures: canned API responses and a recording fake session."""

import json as jsonlib
from http import HTTPStatus
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union
from urllib.parse import urlsplit

import pytest
import requests

from comic_client.config import get_config
from comic_client.utils.http import APIClient

BASE_URL = "http://api.test/api"


def make_response(
    status: int,
    body: Any = None,
    text: Optional[str] = None,
    reason: Optional[str] = None,
    url: str = BASE_URL,
) -> requests.Response:
    """Build a requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status
    response.reason = reason if reason is not None else HTTPStatus(status).phrase
    response.url = url
    response.encoding = "utf-8"
    if body is not None:
        response._content = jsonlib.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
    return response


class Call(NamedTuple):
    method: str
    path: str
    headers: Dict[str, str]
    cookies: Optional[Dict[str, str]]
    json: Any


class FakeSession:
    """Stands in for requests.Session, answering from a route table."""

    def __init__(self, routes: Dict[Tuple[str, str], Union[requests.Response, Exception]]):
        self.routes = routes
        self.calls: List[Call] = []
        self.hooks = {}

    def request(self, method, url, params=None, json=None, headers=None, cookies=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append(Call(method, path, dict(headers or {}), cookies, json))
        outcome = self.routes.get((method, path))
        if outcome is None:
            return make_response(404, {"error": "Not Found"}, url=url)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def paths(self) -> List[str]:
        return [call.path for call in self.calls]

    def close(self):
        pass


@pytest.fixture(autouse=True)
def fresh_config():
    """Make every test read the environment again."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def make_client():
    def factory(routes) -> Tuple[APIClient, FakeSession]:
        session = FakeSession(routes)
        return APIClient(base_url=BASE_URL, session=session), session
    return factory


def comment(comment_id: str, parent: Optional[str] = None, children: Optional[List[str]] = None, **extra):
    record = {
        "id": comment_id,
        "parent_comment": parent,
        "child_comments_ids": children if children is not None else [],
        "child_comments": [],
        "content": f"comment {comment_id}",
    }
    record.update(extra)
    return record
