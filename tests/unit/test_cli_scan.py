"""Tests for the scan command and the CLI launcher."""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO
from pathlib import Path

import msgspec
import pytest
from cyclopts.exceptions import CycloptsError
from rich.console import Console

from metricscan.cli.app import app, meta_launcher
from metricscan.cli.commands.scan import ScanCommandOptions, scan_command
from metricscan.cli.exit_codes import ExitCode
from metricscan.cli.output import FINDINGS_HEADER, display_tokens
from metricscan.cli.result import CliResult

SourceWriter = Callable[[str, str], Path]

MIXED_SOURCE = """\
fn record(x: u64) {
    counter!("requests_total");
    gauge!(x);
    histogram!(1);
    counter!("labelled_total", 2);
}
"""


def test_scan_command_text_output(
    tmp_path: Path,
    write_source: SourceWriter,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Ensure progress lines, diagnostics and the summary are written."""
    write_source("src/lib.rs", MIXED_SOURCE)
    exit_code = scan_command(tmp_path)
    captured = capsys.readouterr()
    assert exit_code == ExitCode.SUCCESS
    assert captured.out.splitlines() == [
        'metric macro ident counter Tokens: "requests_total"',
        "metric macro ident gauge Tokens: x",
        "Not a literal expression gauge",
        "metric macro ident histogram Tokens: 1",
        "Not a string literal: histogram",
        'metric macro ident counter Tokens: "labelled_total", 2',
        FINDINGS_HEADER,
        "requests_total",
    ]
    assert captured.err.startswith("Error while parsing tokens: ")
    assert captured.err.rstrip().endswith('. Tokens: "labelled_total", 2')


def test_scan_command_json_output(
    tmp_path: Path,
    write_source: SourceWriter,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Ensure the JSON format writes one document with entries and diagnostics."""
    write_source("src/lib.rs", MIXED_SOURCE)
    exit_code = scan_command(tmp_path, options=ScanCommandOptions(output_format="json"))
    captured = capsys.readouterr()
    assert exit_code == ExitCode.SUCCESS
    payload = msgspec.json.decode(captured.out)
    assert payload["files_scanned"] == 1
    assert [entry["name"] for entry in payload["metrics"]] == ["requests_total"]
    assert payload["metrics"][0]["path"] == "src/lib.rs"
    assert [item["kind"] for item in payload["diagnostics"]] == [
        "not_a_literal_expression",
        "not_a_literal_expression",
        "argument_parse_error",
    ]
    assert "Error while parsing tokens" in captured.err


def test_scan_command_empty_tree(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure an empty project still prints the header."""
    assert scan_command(tmp_path) == ExitCode.SUCCESS
    assert capsys.readouterr().out == f"{FINDINGS_HEADER}\n"


def test_scan_command_parse_failure(
    tmp_path: Path,
    write_source: SourceWriter,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Ensure a syntax error aborts without a findings summary."""
    write_source("a.rs", 'fn a() { counter!("first"); }\n')
    write_source("b.rs", "fn broken( {\n")
    result = scan_command(tmp_path)
    captured = capsys.readouterr()
    assert isinstance(result, CliResult)
    assert result.exit_code == ExitCode.SOURCE_PARSE_ERROR
    assert result.summary is not None
    assert result.summary.startswith("Error parsing file b.rs:")
    assert 'metric macro ident counter Tokens: "first"' in captured.out
    assert FINDINGS_HEADER not in captured.out


def test_scan_command_missing_root(tmp_path: Path) -> None:
    """Ensure a missing project path maps to the source load exit code."""
    result = scan_command(tmp_path / "missing")
    assert isinstance(result, CliResult)
    assert result.exit_code == ExitCode.SOURCE_LOAD_ERROR


def test_scan_command_source_options(tmp_path: Path, write_source: SourceWriter) -> None:
    """Ensure CLI options translate into source listing options."""
    options = ScanCommandOptions(extensions=("rs", "ron"), exclude_dirs=("target",))
    source_options = options.source_options()
    assert source_options.extensions == (".rs", ".ron")
    assert source_options.exclude_dirs == ("target",)
    write_source("target/gen.rs", "fn broken( {\n")
    assert scan_command(tmp_path, options=options) == ExitCode.SUCCESS


def test_meta_launcher_runs_scan(
    tmp_path: Path,
    write_source: SourceWriter,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Ensure the launcher dispatches to the scan command."""
    write_source("main.rs", 'fn main() { gauge!("up"); }\n')
    monkeypatch.chdir(tmp_path)
    exit_code = meta_launcher("scan", str(tmp_path))
    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.out.splitlines()[-2:] == [FINDINGS_HEADER, "up"]


def test_meta_launcher_reports_fatal_error_on_stderr(
    tmp_path: Path,
    write_source: SourceWriter,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Ensure fatal scan errors become a non-zero exit and a stderr message."""
    write_source("bad.rs", "fn broken( {\n")
    monkeypatch.chdir(tmp_path)
    exit_code = meta_launcher("scan", str(tmp_path))
    captured = capsys.readouterr()
    assert exit_code == ExitCode.SOURCE_PARSE_ERROR
    assert "Error parsing file bad.rs:" in captured.err
    assert FINDINGS_HEADER not in captured.out


def test_meta_launcher_reads_config_file(
    tmp_path: Path,
    write_source: SourceWriter,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Ensure an explicit config file supplies scan defaults."""
    write_source("src/lib.rs", 'fn f() { counter!("kept"); }\n')
    write_source("vendor/dep.rs", 'fn f() { counter!("vendored"); }\n')
    config = write_source("scan.toml", '[scan]\nexclude-dirs = ["vendor"]\nformat = "json"\n')
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(app, "config", list(app.config))
    exit_code = meta_launcher("--config", str(config), "scan", str(tmp_path))
    payload = msgspec.json.decode(capsys.readouterr().out)
    assert exit_code == 0
    assert [entry["name"] for entry in payload["metrics"]] == ["kept"]


def test_meta_launcher_invalid_config(
    tmp_path: Path,
    write_source: SourceWriter,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Ensure an invalid config file maps to the config exit code."""
    config = write_source("scan.toml", "[scan]\nunknown-option = 1\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(app, "config", list(app.config))
    exit_code = meta_launcher("--config", str(config), "scan", str(tmp_path))
    assert exit_code == ExitCode.CONFIG_ERROR
    assert "Config validation failed" in capsys.readouterr().err


def test_missing_project_path_is_a_parse_error() -> None:
    """Ensure a missing positional argument is rejected by the parser."""
    buffer = StringIO()
    error_console = Console(file=buffer, force_terminal=False, color_system=None, width=120)
    with pytest.raises(CycloptsError) as exc_info:
        app.parse_args(
            ["scan"], exit_on_error=False, print_error=True, error_console=error_console
        )
    assert ExitCode.from_exception(exc_info.value) == ExitCode.PARSE_ERROR
    assert buffer.getvalue()


def test_display_tokens_folds_lines() -> None:
    """Ensure multi-line argument tokens print on one line."""
    assert display_tokens('\n    "a",\n    "b"\n') == '"a", "b"'
