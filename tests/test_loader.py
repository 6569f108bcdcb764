"""Tests for the dependent loader state machine."""

import pytest
import requests

from comic_client.constants import CredentialsMode, FailureKind, HTTPMethod, LoaderState
from comic_client.exceptions import AuthRedirect, LoadFailedError
from comic_client.loaders import DependentLoader, FetchStep, StaticCredentialProvider
from comic_client.loaders.auth import EnvCredentialProvider, NoCredentialProvider, credential_options
from conftest import make_response

COMIC = {"id": "c-1", "title": "Night Shift"}


def two_step_loader(**kwargs):
    return DependentLoader(
        "comic",
        [
            FetchStep(name="comic", path="/comics/{slug}"),
            FetchStep(name="comments", path="/comics/{comic[id]}/comments"),
        ],
        **kwargs,
    )


class TestSuccess:
    def test_second_step_uses_first_payload(self, make_client):
        client, session = make_client({
            ("GET", "/api/comics/night-shift"): make_response(200, COMIC),
            ("GET", "/api/comics/c-1/comments"): make_response(200, [{"id": "x"}]),
        })

        result = two_step_loader().load(client, {"slug": "night-shift"})

        assert result.state == LoaderState.SUCCESS
        assert result.ok
        assert result.data == {"comic": COMIC, "comments": [{"id": "x"}]}
        assert session.paths == ["/api/comics/night-shift", "/api/comics/c-1/comments"]

    def test_transform_is_applied_to_payload(self, make_client):
        client, _ = make_client({("GET", "/api/n"): make_response(200, [1, 2, 3])})
        loader = DependentLoader("sum", [FetchStep(name="total", path="/n", transform=sum)])

        assert loader.load(client).data == {"total": 6}

    def test_path_values_are_quoted(self, make_client):
        client, session = make_client({})

        two_step_loader().load(client, {"slug": "a/b c"})

        assert session.paths == ["/api/comics/a%2Fb%20c"]

    def test_callable_path_and_body(self, make_client):
        client, session = make_client({("POST", "/api/things/7"): make_response(200, {})})
        loader = DependentLoader(
            "things",
            [
                FetchStep(
                    name="thing",
                    path=lambda ctx: f"/things/{ctx['n']}",
                    method=HTTPMethod.POST,
                    body=lambda ctx: {"n": ctx["n"]},
                )
            ],
        )

        assert loader.load(client, {"n": 7}).ok
        assert session.calls[0].json == {"n": 7}

    def test_raw_text_step(self, make_client):
        client, _ = make_client({("POST", "/api/ping"): make_response(200, text="")})
        loader = DependentLoader(
            "ping", [FetchStep(name="ping", path="/ping", method=HTTPMethod.POST, expect_json=False)]
        )

        assert loader.load(client).data == {"ping": None}


class TestFailure:
    def test_first_step_failure_short_circuits(self, make_client):
        client, session = make_client({
            ("GET", "/api/comics/gone"): make_response(404, {"error": "Comic not found"}),
        })

        result = two_step_loader().load(client, {"slug": "gone"})

        assert result.state == LoaderState.FAILURE
        assert result.status == 404
        assert result.error == {"error": "Comic not found"}
        assert result.step == "comic"
        assert result.kind == FailureKind.REMOTE
        assert result.data == {}
        assert len(session.calls) == 1

    def test_fallback_message_when_body_is_not_json(self, make_client):
        client, session = make_client({
            ("GET", "/api/comics/x"): make_response(502, text="upstream down"),
        })

        result = two_step_loader().load(client, {"slug": "x"})

        assert result.status == 502
        assert result.message == "Bad Gateway"
        assert len(session.calls) == 1

    def test_second_step_failure_reports_no_partial_data(self, make_client):
        client, _ = make_client({
            ("GET", "/api/comics/x"): make_response(200, COMIC),
            ("GET", "/api/comics/c-1/comments"): make_response(500, {"error": "db down"}),
        })

        result = two_step_loader().load(client, {"slug": "x"})

        assert result.state == LoaderState.FAILURE
        assert result.step == "comments"
        assert result.data == {}

    def test_401_without_auth_requirement_is_a_failure(self, make_client):
        client, _ = make_client({
            ("GET", "/api/comics/x"): make_response(401, {"error": "Unauthorized"}),
        })

        result = two_step_loader().load(client, {"slug": "x"})

        assert result.state == LoaderState.FAILURE
        assert result.status == 401

    def test_transport_error_is_a_failure(self, make_client):
        client, _ = make_client({
            ("GET", "/api/comics/x"): requests.exceptions.ConnectionError("refused"),
        })

        result = two_step_loader().load(client, {"slug": "x"})

        assert result.state == LoaderState.FAILURE
        assert result.kind == FailureKind.TRANSPORT
        assert result.status is None
        assert "refused" in result.message

    def test_invalid_success_body_is_a_failure(self, make_client):
        client, _ = make_client({("GET", "/api/comics/x"): make_response(200, text="<html>")})

        result = two_step_loader().load(client, {"slug": "x"})

        assert result.kind == FailureKind.TRANSPORT
        assert result.status == 200

    def test_payload_missing_template_field_is_a_failure(self, make_client):
        client, session = make_client({
            ("GET", "/api/comics/x"): make_response(200, {"title": "no id"}),
        })

        result = two_step_loader().load(client, {"slug": "x"})

        assert result.state == LoaderState.FAILURE
        assert result.kind == FailureKind.INVALID
        assert result.step == "comments"
        assert len(session.calls) == 1

    def test_callable_path_missing_context_key_is_a_failure(self, make_client):
        client, session = make_client({})
        loader = DependentLoader("t", [FetchStep(name="t", path=lambda ctx: f"/t/{ctx['missing']}")])

        result = loader.load(client)

        assert result.state == LoaderState.FAILURE
        assert result.kind == FailureKind.INVALID
        assert result.step == "t"
        assert "missing" in result.error["missing"]
        assert session.calls == []

    def test_callable_body_reading_bad_payload_is_a_failure(self, make_client):
        client, session = make_client({("GET", "/api/comics/x"): make_response(200, COMIC)})
        loader = DependentLoader(
            "rate",
            [
                FetchStep(name="comic", path="/comics/{slug}"),
                FetchStep(
                    name="rating",
                    path="/ratings",
                    method=HTTPMethod.POST,
                    body=lambda ctx: {"score": int(ctx["comic"]["title"])},
                ),
            ],
        )

        result = loader.load(client, {"slug": "x"})

        assert result.kind == FailureKind.INVALID
        assert result.step == "rating"
        assert result.data == {}
        assert len(session.calls) == 1

    def test_transform_rejecting_payload_is_a_failure(self, make_client):
        client, _ = make_client({("GET", "/api/n"): make_response(200, {"not": "a list"})})
        loader = DependentLoader(
            "n", [FetchStep(name="n", path="/n", transform=lambda p: [dict(x) for x in p])]
        )

        result = loader.load(client)

        assert result.kind == FailureKind.INVALID

    def test_unwrap_raises_load_failed(self, make_client):
        client, _ = make_client({})

        with pytest.raises(LoadFailedError) as exc_info:
            two_step_loader().load(client, {"slug": "x"}).unwrap()

        assert exc_info.value.status_code == 404
        assert exc_info.value.step == "comic"


class TestRedirect:
    def test_401_on_auth_page_redirects_without_second_step(self, make_client):
        client, session = make_client({
            ("GET", "/api/comics/x"): make_response(401, {"error": "Unauthorized"}),
        })

        result = two_step_loader(requires_auth=True).load(client, {"slug": "x"})

        assert result.state == LoaderState.REDIRECT
        assert result.location == "/"
        assert result.status == 307
        assert result.error is None
        assert len(session.calls) == 1

    def test_step_level_auth_requirement(self, make_client):
        client, _ = make_client({
            ("GET", "/api/private"): make_response(401, text="Unauthorized"),
        })
        loader = DependentLoader("p", [FetchStep(name="p", path="/private", requires_auth=True)])

        assert loader.load(client).state == LoaderState.REDIRECT

    def test_redirect_target_is_configurable(self, make_client, monkeypatch):
        monkeypatch.setenv("COMIC_LOGIN_REDIRECT", "/login")
        client, _ = make_client({("GET", "/api/comics/x"): make_response(401)})

        result = two_step_loader(requires_auth=True).load(client, {"slug": "x"})

        assert result.location == "/login"

    def test_other_errors_on_auth_page_are_failures(self, make_client):
        client, _ = make_client({("GET", "/api/comics/x"): make_response(403, {"error": "Forbidden"})})

        result = two_step_loader(requires_auth=True).load(client, {"slug": "x"})

        assert result.state == LoaderState.FAILURE

    def test_unwrap_raises_auth_redirect(self, make_client):
        client, _ = make_client({("GET", "/api/comics/x"): make_response(401)})

        with pytest.raises(AuthRedirect) as exc_info:
            two_step_loader(requires_auth=True).load(client, {"slug": "x"}).unwrap()

        assert exc_info.value.location == "/"


class TestOptionalSteps:
    def test_failed_optional_step_yields_none(self, make_client):
        client, _ = make_client({("GET", "/api/me"): make_response(401)})
        loader = DependentLoader("me", [FetchStep(name="user", path="/me", optional=True)])

        result = loader.load(client)

        assert result.ok
        assert result.data == {"user": None}


class TestCredentials:
    def test_bearer_mode_sets_authorization_header(self, make_client):
        client, session = make_client({})
        loader = DependentLoader(
            "p", [FetchStep(name="p", path="/p", credentials=CredentialsMode.BEARER)]
        )

        loader.load(client, credentials=StaticCredentialProvider("tok"))

        assert session.calls[0].headers["Authorization"] == "Bearer tok"
        assert session.calls[0].cookies is None

    def test_include_mode_sends_auth_cookie(self, make_client):
        client, session = make_client({})
        loader = DependentLoader(
            "p", [FetchStep(name="p", path="/p", credentials=CredentialsMode.INCLUDE)]
        )

        loader.load(client, credentials=StaticCredentialProvider("tok"))

        assert session.calls[0].cookies == {"auth_key": "tok"}
        assert "Authorization" not in session.calls[0].headers

    def test_omit_mode_sends_nothing(self, make_client):
        client, session = make_client({})
        loader = DependentLoader("p", [FetchStep(name="p", path="/p")])

        loader.load(client, credentials=StaticCredentialProvider("tok"))

        assert session.calls[0].cookies is None
        assert "Authorization" not in session.calls[0].headers

    def test_no_token_sends_nothing(self):
        assert credential_options(CredentialsMode.BEARER, NoCredentialProvider()) == ({}, {})
        assert credential_options(CredentialsMode.INCLUDE, StaticCredentialProvider("")) == ({}, {})

    def test_env_provider_reads_variable_each_time(self, monkeypatch):
        provider = EnvCredentialProvider("MY_TOKEN")
        monkeypatch.delenv("MY_TOKEN", raising=False)
        assert provider.get_credential() is None

        monkeypatch.setenv("MY_TOKEN", "abc")
        assert provider.get_credential() == "abc"


def test_loader_requires_steps():
    with pytest.raises(ValueError):
        DependentLoader("empty", [])


def test_loader_rejects_duplicate_step_names():
    with pytest.raises(ValueError):
        DependentLoader("dup", [FetchStep(name="a", path="/a"), FetchStep(name="a", path="/b")])
