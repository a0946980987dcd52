"""Tests for output projection and sinks."""

import json

from rich.console import Console

from codeforge_action.models import GenerationResult
from codeforge_action.outputs import (
    ConsoleOutputSink,
    GitHubOutputSink,
    build_outputs,
    render_summary,
    set_outputs,
)
from tests.helpers import MemoryOutputSink, run_body, sdk_body

PACKAGE = {"name": "sdk-a", "version": "1.0.0", "registry_url": "https://x"}


def two_sdk_result(status="completed"):
    return GenerationResult.model_validate(run_body(status=status, sdks=[
        sdk_body("s1", "python", logs_url="https://logs/1", package=PACKAGE),
        sdk_body("s2", "go", status="failed", logs_url="https://logs/2"),
    ]))


def test_build_outputs_lists_only_published_packages():
    outputs = build_outputs(two_sdk_result())

    assert json.loads(outputs["published_packages"]) == [PACKAGE]
    assert outputs["generation_urls"] == "https://logs/1,https://logs/2"
    assert outputs["status"] == "completed"
    assert outputs["generation_run_id"] == "r1"


def test_build_outputs_without_sdks():
    outputs = build_outputs(GenerationResult.model_validate(run_body()))

    assert outputs["published_packages"] == "[]"
    assert outputs["generation_urls"] == ""
    assert outputs["status"] == "queued"


def test_set_outputs_writes_every_output():
    sink = MemoryOutputSink()

    set_outputs(two_sdk_result(), sink)

    assert set(sink.outputs) == {"generation_run_id", "status", "generation_urls", "published_packages"}


def test_github_output_sink_uses_delimited_blocks(tmp_path):
    path = tmp_path / "github_output"
    path.write_text("existing=1\n")
    sink = GitHubOutputSink(str(path))

    sink.set_output("status", "completed")
    sink.set_output("published_packages", "[]")

    lines = path.read_text().splitlines()
    assert lines[0] == "existing=1"
    name, delimiter = lines[1].split("<<")
    assert name == "status"
    assert lines[2] == "completed"
    assert lines[3] == delimiter
    assert lines[4].startswith("published_packages<<")
    assert lines[5] == "[]"


def test_console_output_sink_prints_values():
    console = Console(record=True, width=200)

    ConsoleOutputSink(console).set_output("published_packages", json.dumps([PACKAGE]))

    assert '"name": "sdk-a"' in console.export_text()


def test_render_summary_lists_sdks():
    console = Console(record=True, width=200)

    render_summary(two_sdk_result(), console)

    text = console.export_text()
    assert "python" in text
    assert "sdk-a@1.0.0" in text
    assert "https://logs/2" in text
