"""Config loading and validation for an explicit ``--config`` file."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import cast

import msgspec

from metricscan.cli.config_models import RootConfigSpec
from metricscan.serde_msgspec import validation_error_payload

logger = logging.getLogger(__name__)

TOOL_KEY = "metricscan"


class ConfigError(ValueError):
    """Raised when a configuration file is missing or invalid."""


def load_config_file(path: Path) -> dict[str, object]:
    """Load and validate a metricscan config file.

    Parameters
    ----------
    path
        A ``metricscan.toml``-style file, or a ``pyproject.toml`` with a
        ``[tool.metricscan]`` table.

    Returns
    -------
    dict[str, object]
        Command-keyed configuration contents with unset values omitted.

    Raises
    ------
    ConfigError
        Raised when the file is missing, malformed, or fails validation.
    """
    if not path.is_file():
        msg = f"Config file not found: {str(path)!r}."
        raise ConfigError(msg)
    raw = _read_toml(path)
    location = str(path)
    if path.name == "pyproject.toml":
        nested = _extract_tool_config(raw)
        if nested is None:
            msg = f"Config validation failed for {path}: missing [tool.{TOOL_KEY}] section."
            raise ConfigError(msg)
        raw = nested
        location = f"{path}:tool.{TOOL_KEY}"
    root = _decode_root_config(raw, location=location)
    logger.debug("Loaded configuration from %s", location)
    return cast("dict[str, object]", msgspec.to_builtins(root, str_keys=True))


def _read_toml(path: Path) -> dict[str, object]:
    try:
        payload = msgspec.toml.decode(path.read_text(encoding="utf-8"), type=object, strict=True)
    except (OSError, msgspec.DecodeError) as exc:
        msg = f"Cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(payload, dict):
        msg = f"Expected TOML mapping in {path}, got {type(payload).__name__}."
        raise ConfigError(msg)
    return cast("dict[str, object]", payload)


def _extract_tool_config(raw: Mapping[str, object]) -> dict[str, object] | None:
    tool_section = raw.get("tool")
    if not isinstance(tool_section, dict):
        return None
    nested = tool_section.get(TOOL_KEY)
    if not isinstance(nested, dict):
        return None
    return cast("dict[str, object]", nested)


def _decode_root_config(raw: Mapping[str, object], *, location: str) -> RootConfigSpec:
    try:
        return msgspec.convert(raw, type=RootConfigSpec, strict=True)
    except msgspec.ValidationError as exc:
        details = validation_error_payload(exc)
        msg = f"Config validation failed for {location}: {details}"
        raise ConfigError(msg) from exc


__all__ = ["ConfigError", "load_config_file"]
