"""Wait for a batch of spawned processes and reduce their outcome."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from rush_select.launcher.process.base import CompletionEvent, ProcessHandle
from rush_select.launcher.process.runner import MISSING_EXECUTABLE_EXIT_CODE

logger = logging.getLogger(__name__)

MISSING_TOOL_HINT = (
    "There was an error. Double-check that you have installed rush via "
    '"npm install -g @microsoft/rush"'
)


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Aggregated outcome of one batch of processes."""

    error: bool
    exit_codes: tuple[int | None, ...] = ()


def await_all(handles: Sequence[ProcessHandle]) -> BatchResult:
    """Wait for every handle in submission order; never raises.

    The processes already run concurrently, so observing them one by one does
    not delay the batch. ``error`` is True iff any handle failed.
    """

    error = False
    exit_codes: list[int | None] = []
    for handle in handles:
        try:
            completion = handle.wait()
        except Exception:  # noqa: BLE001
            logger.exception("Lost track of process %s", handle.label)
            error = True
            exit_codes.append(None)
            continue

        exit_codes.append(completion.exit_code)
        if not completion.failed:
            continue
        error = True
        logger.debug(
            "Process %s failed: event=%s exit_code=%s",
            handle.label,
            completion.event.value,
            completion.exit_code,
        )
        if (
            completion.event is CompletionEvent.CLOSE
            and completion.exit_code == MISSING_EXECUTABLE_EXIT_CODE
        ):
            logger.warning(MISSING_TOOL_HINT)

    return BatchResult(error=error, exit_codes=tuple(exit_codes))
