"""Tests for the grove-central CLI.

This module tests the command-line interface using click.testing.CliRunner,
with the HTTP transport replaced by an httpx.MockTransport.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from grove_central.cli import cli
from grove_central.client import CentralClient
from grove_central.config import CentralConfig

URL_ARGS = ["--url", "http://central.test"]


TransportPatcher = Callable[[Any], None]


@pytest.fixture
def patch_transport(monkeypatch: pytest.MonkeyPatch) -> Iterator[TransportPatcher]:
    """Make the CLI build clients wired to a MockTransport handler.

    The injected transports are not owned by the clients, so they are closed
    here after the test.
    """
    transports: list[httpx.AsyncClient] = []

    def patch(handler: Any) -> None:
        def factory(config: CentralConfig) -> CentralClient:
            transport_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            transports.append(transport_client)
            return CentralClient(config, http_client=transport_client)

        monkeypatch.setattr("grove_central.cli.CentralClient", factory)

    yield patch

    for transport_client in transports:
        asyncio.run(transport_client.aclose())


class TestCLI:
    """Test class for CLI command structure and output."""

    @pytest.fixture
    def runner(self) -> CliRunner:
        """Create a CliRunner for testing."""
        return CliRunner()

    def test_help_displays_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Grove Central" in result.output
        assert "memberships" in result.output
        assert "user" in result.output
        assert "application" in result.output

    def test_missing_url_fails(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["user", "7"], env={"GROVE_CENTRAL_URL": None})

        assert result.exit_code != 0
        assert "--url" in result.output

    def test_invalid_url_reports_error(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--url", "not-a-url", "user", "7"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_user_prints_json(self, runner: CliRunner, patch_transport: TransportPatcher) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/central/v1/users/by-identity/7"
            assert request.headers["cookie"] == "checkpoint.session=tok"
            return httpx.Response(200, json={"id": 3, "name": "Ada", "identity_id": 7})

        patch_transport(handler)

        result = runner.invoke(cli, [*URL_ARGS, "--session-key", "tok", "user", "7"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["name"] == "Ada"
        assert payload["identity_id"] == 7

    def test_session_key_from_environment(
        self, runner: CliRunner, patch_transport: TransportPatcher
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["cookie"] == "checkpoint.session=from-env"
            return httpx.Response(404)

        patch_transport(handler)

        result = runner.invoke(
            cli,
            ["user", "7"],
            env={"GROVE_CENTRAL_URL": "http://central.test", "GROVE_CENTRAL_SESSION_KEY": "from-env"},
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) is None

    def test_memberships_not_found_prints_empty_list(
        self, runner: CliRunner, patch_transport: TransportPatcher
    ) -> None:
        patch_transport(lambda request: httpx.Response(404))

        result = runner.invoke(cli, [*URL_ARGS, "memberships", "42"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == []

    def test_memberships_prints_roles(
        self, runner: CliRunner, patch_transport: TransportPatcher
    ) -> None:
        patch_transport(
            lambda request: httpx.Response(200, json=[{"id": 1, "role": "admin"}]),
        )

        result = runner.invoke(cli, [*URL_ARGS, "memberships", "42"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)[0]["role"] == "admin"

    def test_application_by_key(self, runner: CliRunner, patch_transport: TransportPatcher) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/central/v1/applications/keys/billing"
            return httpx.Response(200, json={"id": 9, "name": "billing", "write_access": True})

        patch_transport(handler)

        result = runner.invoke(cli, [*URL_ARGS, "application", "billing"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["write_access"] is True

    def test_server_error_exits_with_message(
        self, runner: CliRunner, patch_transport: TransportPatcher
    ) -> None:
        patch_transport(lambda request: httpx.Response(500))

        result = runner.invoke(cli, [*URL_ARGS, "user", "7"])

        assert result.exit_code == 1
        assert "Error: Grove: GET" in result.output
        assert "HTTP 500" in result.output

    def test_identity_must_be_integer(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [*URL_ARGS, "user", "abc"])

        assert result.exit_code != 0
