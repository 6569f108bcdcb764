"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from comic_client.cli import main as cli
from comic_client.constants import MAX_COMMENT_DEPTH
from comic_client.core.models import LoadResult
from comic_client.exceptions import ConfigurationError
from comic_client.services.page_service import PageService
from conftest import comment

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda level=None: None)


COMIC = {"id": "comic-1", "title": "Night Shift"}


@pytest.fixture
def patch_service(monkeypatch):
    """Replace PageService methods with canned results."""
    def apply(**methods):
        for name, value in methods.items():
            monkeypatch.setattr(PageService, name, lambda self, *args, _v=value, **kwargs: _v)
    return apply


def test_version():
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert "Comic Client" in result.stdout


def test_comic_prints_comment_tree(patch_service):
    comments = [
        {**comment("a", None, ["b"], user={"username": "ink"}), "child_comments": [
            {**comment("b", "a", content="nice reply"), "user": {"username": "owl"}},
        ]},
    ]
    patch_service(load_comic=LoadResult.success("comic_page", {"comic": COMIC, "comments": comments}))

    result = runner.invoke(cli.app, ["comic", "ink", "night-shift"])

    assert result.exit_code == 0
    assert "Night Shift" in result.stdout
    assert "nice reply" in result.stdout
    assert "2 comments shown" in result.stdout


def test_comic_json_output(patch_service):
    patch_service(load_comic=LoadResult.success("comic_page", {"comic": COMIC, "comments": []}))

    result = runner.invoke(cli.app, ["comic", "ink", "night-shift", "--json"])

    assert result.exit_code == 0
    assert '"title": "Night Shift"' in result.stdout


def test_failure_exits_with_error(patch_service):
    patch_service(load_comic=LoadResult.failure("comic_page", "comic", {"error": "Comic not found"}, status=404))

    result = runner.invoke(cli.app, ["comic", "ink", "missing"])

    assert result.exit_code == cli.EXIT_FAILURE
    assert "Comic not found" in result.stdout


def test_redirect_exits_with_redirect_code(patch_service):
    patch_service(load_chapter=LoadResult.redirect("chapter_page", "chapter", "/", 307))

    result = runner.invoke(cli.app, ["chapter", "ink", "night-shift", "1"])

    assert result.exit_code == cli.EXIT_REDIRECT
    assert "redirect" in result.stdout


def test_validation_error_exits_with_error():
    result = runner.invoke(cli.app, ["comic", "ink", "../etc"])

    assert result.exit_code == cli.EXIT_FAILURE
    assert "Invalid comic slug" in result.stdout


def test_whoami_anonymous(patch_service):
    patch_service(current_user=None)

    result = runner.invoke(cli.app, ["whoami"])

    assert result.exit_code == 0
    assert "Not signed in" in result.stdout


def test_pages_lists_loaders():
    result = runner.invoke(cli.app, ["pages"])

    assert result.exit_code == 0
    assert "chapter_settings" in result.stdout


def test_chapter_prints_title(patch_service):
    chapter = {"id": "chapter-9", "comic_id": "comic-1", "number": 2, "title": "Dawn"}
    patch_service(load_chapter=LoadResult.success("chapter_page", {"chapter": chapter, "comments": []}))

    result = runner.invoke(cli.app, ["chapter", "ink", "night-shift", "2"])

    assert result.exit_code == 0
    assert "Dawn" in result.stdout


def test_genres_table(patch_service):
    genres = [{"id": 1, "name": "Horror"}, {"id": 2, "name": "Slice of life"}]
    patch_service(load_comic_genres=LoadResult.success("comic_genres", {"genres": genres}))

    result = runner.invoke(cli.app, ["genres"])

    assert result.exit_code == 0
    assert "Slice of life" in result.stdout


def test_depth_above_cap_is_rejected():
    result = runner.invoke(cli.app, ["comic", "ink", "night-shift", "--depth", str(MAX_COMMENT_DEPTH + 1)])

    assert result.exit_code != 0
    assert result.exit_code != cli.EXIT_FAILURE


def test_invalid_environment_exits_with_error(monkeypatch):
    monkeypatch.setenv("COMIC_API_TIMEOUT", "soon")

    result = runner.invoke(cli.app, ["comic", "ink", "night-shift"])

    assert result.exit_code == cli.EXIT_FAILURE
    assert "Error" in result.stdout
    assert not isinstance(result.exception, ConfigurationError)


def test_invalid_environment_on_whoami(monkeypatch):
    monkeypatch.setenv("COMMENT_MAX_DEPTH", "-5")

    result = runner.invoke(cli.app, ["whoami"])

    assert result.exit_code == cli.EXIT_FAILURE


def test_logging_setup_error_exits_with_error(monkeypatch):
    def broken(level=None):
        raise ConfigurationError("Invalid configuration", {"LOG_LEVEL": "LOUD"})

    monkeypatch.setattr(cli, "configure_logging", broken)

    result = runner.invoke(cli.app, ["pages"])

    assert result.exit_code == cli.EXIT_FAILURE
    assert "Invalid configuration" in result.stdout
