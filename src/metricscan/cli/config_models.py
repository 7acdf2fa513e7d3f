"""Typed configuration models for metricscan."""

from __future__ import annotations

from typing import Literal

import msgspec

from metricscan.serde_msgspec import StructBaseStrict


class ScanConfigSpec(StructBaseStrict, frozen=True):
    """Defaults for the ``scan`` command.

    Keys use the command's option names, so a ``[scan]`` table can be handed
    to Cyclopts unchanged.
    """

    extensions: tuple[str, ...] | None = None
    exclude_dirs: tuple[str, ...] | None = msgspec.field(default=None, name="exclude-dirs")
    exclude_globs: tuple[str, ...] | None = msgspec.field(default=None, name="exclude-globs")
    respect_gitignore: bool | None = msgspec.field(default=None, name="respect-gitignore")
    follow_symlinks: bool | None = msgspec.field(default=None, name="follow-symlinks")
    output_format: Literal["text", "json"] | None = msgspec.field(default=None, name="format")


class RootConfigSpec(StructBaseStrict, frozen=True):
    """Root configuration document."""

    scan: ScanConfigSpec | None = None


__all__ = ["RootConfigSpec", "ScanConfigSpec"]
