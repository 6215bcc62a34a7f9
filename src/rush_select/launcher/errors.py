"""Launcher error types."""

from __future__ import annotations


class SelectionAborted(Exception):
    """Operator cancelled the picker; ends the run loop cleanly."""


class PhaseFailedError(RuntimeError):
    """A workspace-wide phase failed, so main scripts were not started."""

    def __init__(self, failed_phases: tuple[str, ...]) -> None:
        super().__init__(
            "there was an error in " + ", ".join(failed_phases)
            + "; main scripts were not started",
        )
        self.failed_phases = failed_phases
