"""Command-line probe."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import pytest
from github_mcp_e2e import __main__ as cli

from .conftest import FakeSession, text_result


def _install_session(monkeypatch: pytest.MonkeyPatch, session: FakeSession) -> None:
    @asynccontextmanager
    async def fake_open_session(config) -> AsyncIterator[FakeSession]:
        yield session

    monkeypatch.setenv("GITHUB_MCP_SERVER_E2E_TOKEN", "tok")
    monkeypatch.setattr(cli, "open_session", fake_open_session)


def test_parse_args() -> None:
    args = cli.parse_args(["--list-tools", "--check", "get_me", "--check", "get_teams", "-v"])

    assert args.list_tools is True
    assert args.check == ["get_me", "get_teams"]
    assert args.verbose is True
    assert args.whoami is False


@pytest.mark.asyncio
async def test_probe_lists_tools(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _install_session(monkeypatch, FakeSession(tools=["get_me", "create_issue"]))

    code = await cli.probe(cli.parse_args(["--list-tools"]))

    assert code == 0
    assert capsys.readouterr().out.splitlines() == ["create_issue", "get_me"]


@pytest.mark.asyncio
async def test_probe_reports_missing_tools(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _install_session(monkeypatch, FakeSession(tools=["get_me"]))

    code = await cli.probe(cli.parse_args(["--check", "get_me", "--check", "get_teams"]))

    assert code == 1
    assert "missing: get_teams" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_probe_whoami(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _install_session(monkeypatch, FakeSession(handlers={"get_me": lambda _: text_result({"login": "octocat"})}))
    monkeypatch.delenv("GITHUB_MCP_SERVER_E2E_CALL_LOG", raising=False)

    code = await cli.probe(cli.parse_args(["--whoami"]))

    assert code == 0
    assert capsys.readouterr().out.strip() == "octocat"


def test_main_exits_2_on_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_MCP_SERVER_E2E_TOKEN", raising=False)
    monkeypatch.setattr("sys.argv", ["github-mcp-e2e", "--list-tools"])

    with pytest.raises(SystemExit) as exc:
        cli.main()

    assert exc.value.code == 2
