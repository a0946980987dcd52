"""Tests for the command-line entry point."""

import pytest
from click.testing import CliRunner

from codeforge_action import cli
from codeforge_action.cli import escape_command_data, main
from codeforge_action.runner import RunOutcome


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def captured(monkeypatch):
    """Replace the orchestrator with a stub that records its inputs."""
    seen = {}
    outcome = {"value": RunOutcome(success=True)}

    async def fake_run(config, sink, console=None):
        seen["config"] = config
        seen["sink"] = sink
        return outcome["value"]

    monkeypatch.setattr(cli, "run", fake_run)
    seen["outcome"] = outcome
    return seen


def test_escape_command_data():
    assert escape_command_data("100% done\r\nnext") == "100%25 done%0D%0Anext"


def test_cli_success_exits_zero(runner, captured, monkeypatch):
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)

    result = runner.invoke(main, [])

    assert result.exit_code == 0
    assert type(captured["sink"]).__name__ == "ConsoleOutputSink"


def test_cli_uses_github_output_file(runner, captured, monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_OUTPUT", str(tmp_path / "out"))

    result = runner.invoke(main, [])

    assert result.exit_code == 0
    assert type(captured["sink"]).__name__ == "GitHubOutputSink"
    assert captured["sink"].path == str(tmp_path / "out")


def test_cli_options_override_environment(runner, captured, monkeypatch):
    monkeypatch.setenv("INPUT_SPEC_ID", "from-env")
    monkeypatch.setenv("INPUT_API_TOKEN", "env-token")

    result = runner.invoke(main, ["--spec-id", "from-cli", "--no-wait", "--max-poll-attempts", "3"])

    assert result.exit_code == 0
    config = captured["config"]
    assert config.get_input("spec_id") == "from-cli"
    assert config.get_input("api_token") == "env-token"
    assert config.get_input("wait_for_completion") == "false"
    assert config.get_input("max_poll_attempts") == "3"


def test_cli_failure_reports_error_and_exits_one(runner, captured):
    captured["outcome"]["value"] = RunOutcome(success=False, message="Action failed: boom")

    result = runner.invoke(main, [])

    assert result.exit_code == 1
    assert "::error::Action failed: boom" in result.output


def test_cli_version(runner):
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert "codeforge-action" in result.output
