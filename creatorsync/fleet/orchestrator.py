"""
Fleet Orchestrator
==================

Runs every discovered target in sequence, retries failures in later rounds
and records whatever still fails in the failure manifest.

Target lifecycle::

    pending -> running -> succeeded
                       -> failed -> retry -> running -> ...

Execution is sequential and paced by a configurable delay so that upstream
hosts are not hit in bursts.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config.settings import CreatorSyncSettings
from ..utils.exceptions import StorageError
from ..utils.logging import get_logger_for_component
from .discovery import Target, discover_targets
from .runner import SubprocessRunner, TargetRunner


class TargetState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    RETRY = "retry"


@dataclass
class FailureRecord:
    """Latest failure of one target."""

    target: str
    error_snippet: str = ""


@dataclass
class SweepResult:
    """Outcome of a whole fleet sweep."""

    targets: List[str] = field(default_factory=list)
    states: Dict[str, TargetState] = field(default_factory=dict)
    failures: Dict[str, FailureRecord] = field(default_factory=dict)
    outputs: Dict[str, str] = field(default_factory=dict)
    rounds_run: int = 0
    manifest_path: Optional[Path] = None

    @property
    def succeeded(self) -> List[str]:
        return [t for t in self.targets if self.states.get(t) == TargetState.SUCCEEDED]

    @property
    def failed(self) -> List[str]:
        return [t for t in self.targets if t in self.failures]

    @property
    def success(self) -> bool:
        return not self.failures


class FleetOrchestrator:
    """Sequential, paced sweep over all targets with retry rounds."""

    def __init__(
        self,
        settings: CreatorSyncSettings,
        runner: Optional[TargetRunner] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize orchestrator.

        Args:
            settings: Application settings (paths and fleet sections)
            runner: Target runner, subprocess-based by default
            sleep: Pause function, replaceable in tests
        """
        self.settings = settings
        self.runner = runner or SubprocessRunner(settings)
        self.sleep = sleep
        self.logger = get_logger_for_component("fleet")
        self._invocations = 0

    def discover(self) -> List[Target]:
        fleet = self.settings.fleet
        return discover_targets(
            self.settings.paths.resolve_targets_dir(),
            config_filename=fleet.config_filename,
            entry_point=fleet.entry_point,
        )

    def run(self, targets: Optional[List[Target]] = None) -> SweepResult:
        """Sweep all targets.

        Round 1 runs every target; each later round re-runs only the
        targets still failing, until none fail or the round budget is spent.
        Remaining failures are reported, never raised.

        Raises:
            StorageError: If the failure manifest cannot be written
        """
        if targets is None:
            targets = self.discover()

        result = SweepResult(targets=[t.name for t in targets])
        result.states = {t.name: TargetState.PENDING for t in targets}
        self._invocations = 0

        if not targets:
            self.logger.info("No targets found")
        else:
            self.logger.info(f"Syncing {len(targets)} target(s)...")
            self._sweep(targets, result)

        self.logger.info(
            f"Done: {len(result.succeeded)} ok, {len(result.failed)} failed "
            f"after {result.rounds_run} round(s)"
        )
        result.manifest_path = self.update_failure_manifest(result)
        return result

    def _sweep(self, targets: List[Target], result: SweepResult) -> None:
        pending = list(targets)
        for round_number in range(1, self.settings.fleet.retry_rounds + 1):
            if not pending:
                break
            if round_number > 1:
                self.logger.info(f"Retry round {round_number}: {len(pending)} target(s)")
                for target in pending:
                    result.states[target.name] = TargetState.RETRY

            result.rounds_run = round_number
            for target in pending:
                self._run_target(target, result)

            pending = [t for t in pending if t.name in result.failures]

    def _run_target(self, target: Target, result: SweepResult) -> None:
        if self._invocations:
            self.sleep(self.settings.fleet.delay_seconds)
        self._invocations += 1

        result.states[target.name] = TargetState.RUNNING
        outcome = self.runner.run(target)

        if outcome.success:
            result.states[target.name] = TargetState.SUCCEEDED
            result.failures.pop(target.name, None)
            result.outputs[target.name] = outcome.output
            self.logger.info(f"{target.name}: {outcome.output or 'ok'}")
        else:
            result.states[target.name] = TargetState.FAILED
            result.failures[target.name] = FailureRecord(target.name, outcome.error_snippet)
            self.logger.error(f"{target.name}: failed")
            if outcome.error_snippet:
                self.logger.error(outcome.error_snippet)

    def update_failure_manifest(self, result: SweepResult) -> Optional[Path]:
        """Write remaining failures, or remove a stale manifest.

        Returns:
            Manifest path when one was written, else None
        """
        path = self.settings.paths.resolve_failure_manifest()

        try:
            if result.failures:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text("".join(f"{name}\n" for name in result.failed), encoding="utf-8")
                self.logger.warning(f"Wrote {len(result.failures)} failure(s) to {path}")
                return path

            if path.exists():
                path.unlink()
                self.logger.info(f"All targets succeeded; removed stale {path.name}")
        except OSError as e:
            raise StorageError(f"Cannot update failure manifest: {e}", path=str(path)) from e

        return None
