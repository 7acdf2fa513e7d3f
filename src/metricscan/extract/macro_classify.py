"""Classify macro invocation names against the metrics macro family."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final


class MetricKind(StrEnum):
    """Metric kinds recognized by the scanner."""

    GAUGE = "gauge"
    COUNTER = "counter"
    HISTOGRAM = "histogram"


class MacroDisposition(StrEnum):
    """What the scanner does with an invocation of a given name."""

    RECOGNIZED = "recognized"
    EXPLICITLY_SKIPPED = "explicitly_skipped"
    IGNORED = "ignored"


@dataclass(frozen=True)
class MacroClass:
    """Classification of a macro name."""

    disposition: MacroDisposition
    kind: MetricKind | None = None

    @property
    def recognized(self) -> bool:
        """Return whether the name is a supported metric macro.

        Returns
        -------
        bool
            ``True`` when the invocation should be extracted.
        """
        return self.disposition is MacroDisposition.RECOGNIZED


IGNORED = MacroClass(MacroDisposition.IGNORED)
EXPLICITLY_SKIPPED = MacroClass(MacroDisposition.EXPLICITLY_SKIPPED)

# Registration macros belong to the same family but are not supported yet.
MACRO_TABLE: Final[dict[str, MacroClass]] = {
    **{kind.value: MacroClass(MacroDisposition.RECOGNIZED, kind) for kind in MetricKind},
    "register_counter": EXPLICITLY_SKIPPED,
    "register_gauge": EXPLICITLY_SKIPPED,
}


def classify_macro(name: str) -> MacroClass:
    """Classify an invocation name, verbatim and case-sensitive.

    Returns
    -------
    MacroClass
        Recognized kind, explicit skip, or ignored.
    """
    return MACRO_TABLE.get(name, IGNORED)


__all__ = [
    "EXPLICITLY_SKIPPED",
    "IGNORED",
    "MACRO_TABLE",
    "MacroClass",
    "MacroDisposition",
    "MetricKind",
    "classify_macro",
]
