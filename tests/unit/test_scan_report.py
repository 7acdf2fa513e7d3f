"""Tests for the scan report payload and version output."""

from __future__ import annotations

from pathlib import Path

import msgspec
import pytest

from metricscan.cli.commands.version import get_version_info, version_command
from metricscan.extract.scan_report import ScanReportPayload
from metricscan.extract.scan_run import scan_source
from metricscan.serde_msgspec import dumps_json, validation_error_payload


def test_report_payload_decodes_strictly() -> None:
    """Ensure the JSON document decodes back into the report contract."""
    report = scan_source(
        'fn f() { counter!("hits"); gauge!(depth); }',
        path=Path("src/lib.rs"),
    )
    payload = msgspec.json.decode(
        dumps_json(report.to_payload("."), pretty=True),
        type=ScanReportPayload,
        strict=True,
    )
    assert payload.root == "."
    assert payload.files_scanned == 1
    assert [entry.name for entry in payload.metrics] == ["hits"]
    assert payload.diagnostics[0].kind == "not_a_literal_expression"
    assert payload.diagnostics[0].tokens == "depth"


def test_dumps_json_encodes_paths() -> None:
    """Ensure paths serialize in POSIX form."""
    assert dumps_json({"path": Path("src") / "lib.rs"}) == b'{"path":"src/lib.rs"}'


def test_validation_error_payload_extracts_path() -> None:
    """Ensure msgspec validation errors are split into summary and path."""
    with pytest.raises(msgspec.ValidationError) as exc_info:
        msgspec.convert({"root": ".", "files_scanned": "x"}, type=ScanReportPayload)
    payload = validation_error_payload(exc_info.value)
    assert payload["type"] == "ValidationError"
    assert payload["path"] == "$.files_scanned"
    assert "Expected `int`" in payload["summary"]


def test_version_command_writes_json(capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure the version command prints the version payload."""
    assert version_command() == 0
    payload = msgspec.json.decode(capsys.readouterr().out)
    assert set(payload) == set(get_version_info())
    assert isinstance(payload["rust_grammar_abi"], int)
