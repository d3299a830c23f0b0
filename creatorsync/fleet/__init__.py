"""
CreatorSync Fleet Module
========================

Sweeps every target under the index repository.

This module handles:
- Target discovery under the targets directory
- Sequential, paced invocation of each target's sync
- Retry rounds and the failure manifest
- The creators manifest summarizing all targets
"""

from .discovery import Target, discover_targets
from .orchestrator import FleetOrchestrator, FailureRecord, SweepResult, TargetState
from .runner import InProcessRunner, RunOutcome, SubprocessRunner, TargetRunner

__all__ = [
    "Target",
    "discover_targets",
    "FleetOrchestrator",
    "FailureRecord",
    "SweepResult",
    "TargetState",
    "InProcessRunner",
    "RunOutcome",
    "SubprocessRunner",
    "TargetRunner",
]
