"""
Target Runners
==============

Execution seam between the fleet orchestrator and a target's sync. A runner
turns one invocation into a ``RunOutcome``; it never raises for a failed
target.
"""

import re
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from ..config.settings import CreatorSyncSettings
from ..ingestion.sync import sync_target
from ..utils.exceptions import CreatorSyncError, TargetExecutionError, ErrorCode, handle_exception
from ..utils.logging import get_logger_for_component
from .discovery import Target


ELLIPSIS = "…"

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


def bound_snippet(text: Optional[str], limit: int = 200) -> str:
    """Trim error output to ``limit`` characters, marking the cut with an ellipsis."""
    text = (text or "").strip()
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def last_line(text: Optional[str]) -> str:
    lines = (text or "").strip().splitlines()
    return lines[-1] if lines else ""


def tail_snippet(text: Optional[str], limit: int = 200) -> str:
    """Last non-empty lines of process output that fit in ``limit`` characters.

    Colour codes are removed. The final line is always kept and is bounded
    like ``bound_snippet``.
    """
    lines = [line.rstrip() for line in ANSI_ESCAPE.sub("", text or "").splitlines() if line.strip()]
    if not lines:
        return ""

    kept = [lines.pop()]
    size = len(kept[0])
    while lines and size + 1 + len(lines[-1]) <= limit:
        line = lines.pop()
        kept.insert(0, line)
        size += 1 + len(line)
    return bound_snippet("\n".join(kept), limit)


@dataclass
class RunOutcome:
    """Result of invoking one target."""

    success: bool
    error_snippet: str = ""
    output: str = ""

    @classmethod
    def failed(cls, error: CreatorSyncError, limit: int = 200) -> "RunOutcome":
        return cls(success=False, error_snippet=bound_snippet(str(error), limit))


class TargetRunner(ABC):
    """Runs a single target's sync."""

    @abstractmethod
    def run(self, target: Target) -> RunOutcome:
        """Invoke ``target`` and report the outcome."""


class SubprocessRunner(TargetRunner):
    """Runs the target's entry point with the current interpreter.

    The target directory is the working directory; stdout and stderr are
    captured. A non-zero exit, a timeout or a launch failure is a failed
    outcome.
    """

    def __init__(self, settings: CreatorSyncSettings):
        self.settings = settings
        self.logger = get_logger_for_component("subprocess_runner")

    def run(self, target: Target) -> RunOutcome:
        fleet = self.settings.fleet
        command = [sys.executable, fleet.entry_point]

        try:
            completed = subprocess.run(
                command,
                cwd=str(target.path),
                capture_output=True,
                text=True,
                timeout=fleet.target_timeout,
            )
        except subprocess.TimeoutExpired:
            error = TargetExecutionError(
                f"Timed out after {fleet.target_timeout}s",
                target=target.name,
                error_code=ErrorCode.TARGET_TIMEOUT,
            )
            return RunOutcome.failed(error, fleet.error_snippet_length)
        except OSError as e:
            error = TargetExecutionError(
                f"Could not launch {fleet.entry_point}: {e}",
                target=target.name,
                error_code=ErrorCode.TARGET_LAUNCH_FAILED,
            )
            return RunOutcome.failed(error, fleet.error_snippet_length)

        if completed.returncode == 0:
            return RunOutcome(success=True, output=last_line(completed.stdout) or "ok")

        self.logger.debug(f"{target.name} exited with status {completed.returncode}")
        return RunOutcome(
            success=False,
            # the error is reported last, after any progress logging
            error_snippet=tail_snippet(completed.stderr or completed.stdout, fleet.error_snippet_length),
            output=completed.stdout or "",
        )


class InProcessRunner(TargetRunner):
    """Calls the sync function directly in this process."""

    def __init__(self, settings: CreatorSyncSettings, sync: Optional[Callable] = None):
        self.settings = settings
        self.sync = sync or sync_target
        self.logger = get_logger_for_component("in_process_runner")

    def run(self, target: Target) -> RunOutcome:
        try:
            result = self.sync(target.path, self.settings)
        except Exception as e:
            # every failure becomes a failed outcome
            error = handle_exception(e, self.logger, "sync", {"target": target.name})
            return RunOutcome.failed(error, self.settings.fleet.error_snippet_length)

        summary = result.summary() if hasattr(result, "summary") else "ok"
        return RunOutcome(success=True, output=summary)
