"""Version reporting for the metricscan CLI."""

from __future__ import annotations

import platform
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from metricscan.extract.rust_parse import RUST_LANGUAGE
from metricscan.serde_msgspec import dumps_json


def get_version() -> str:
    """Get the metricscan package version string.

    Returns
    -------
    str
        Version string, or "0.0.0-dev" if not installed.
    """
    return _package_version("metricscan") or "0.0.0-dev"


def get_version_info() -> dict[str, object]:
    """Get detailed version information.

    Returns
    -------
    dict[str, object]
        Structured version payload.
    """
    return {
        "metricscan": get_version(),
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "rust_grammar_abi": RUST_LANGUAGE.abi_version,
        "dependencies": {
            "cyclopts": _package_version("cyclopts"),
            "tree-sitter": _package_version("tree-sitter"),
            "tree-sitter-rust": _package_version("tree-sitter-rust"),
        },
    }


def version_command() -> int:
    """Show version and parser information.

    Returns
    -------
    int
        Exit status code.
    """
    payload = dumps_json(get_version_info(), pretty=True)
    sys.stdout.write(payload.decode("utf-8") + "\n")
    return 0


def _package_version(name: str) -> str | None:
    try:
        return pkg_version(name)
    except PackageNotFoundError:
        return None


__all__ = ["get_version", "get_version_info", "version_command"]
