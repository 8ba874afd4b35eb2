"""Tests for the serve command's option defaults."""

import pytest
from click.testing import CliRunner

from ratemyportfolio import cli as cli_module
from ratemyportfolio.config import settings


@pytest.fixture
def uvicorn_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(
        cli_module.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs))
    )
    return calls


@pytest.mark.unit
def test_serve_binds_to_configured_address(monkeypatch, uvicorn_calls):
    monkeypatch.setattr(settings, "api_host", "127.0.0.1")
    monkeypatch.setattr(settings, "api_port", 4100)
    monkeypatch.setattr(settings, "api_reload", True)

    result = CliRunner().invoke(cli_module.cli, ["serve"])

    assert result.exit_code == 0, result.output
    app, kwargs = uvicorn_calls[0]
    assert app == "ratemyportfolio.api.app:app"
    assert (kwargs["host"], kwargs["port"], kwargs["reload"]) == ("127.0.0.1", 4100, True)


@pytest.mark.unit
def test_command_line_overrides_settings(monkeypatch, uvicorn_calls):
    monkeypatch.setattr(settings, "api_port", 4100)
    monkeypatch.setattr(settings, "api_reload", True)

    result = CliRunner().invoke(
        cli_module.cli, ["serve", "--host", "localhost", "--port", "5000", "--no-reload"]
    )

    assert result.exit_code == 0, result.output
    _, kwargs = uvicorn_calls[0]
    assert (kwargs["host"], kwargs["port"], kwargs["reload"]) == ("localhost", 5000, False)
