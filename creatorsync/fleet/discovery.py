"""
Target Discovery
================

Finds the targets the fleet sweep should run.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..utils.logging import get_logger_for_component


@dataclass(frozen=True)
class Target:
    """One target directory."""

    name: str
    path: Path

    def __str__(self) -> str:
        return self.name


def discover_targets(
    targets_dir: Path,
    config_filename: str = "creator.json",
    entry_point: str = "scripts/sync_posts.py",
) -> List[Target]:
    """List runnable targets under ``targets_dir``.

    A target is a non-hidden sub-directory holding both the owner
    configuration file and the entry point. Results are sorted by name;
    a missing directory yields an empty list.
    """
    logger = get_logger_for_component("fleet_discovery")
    targets_dir = Path(targets_dir)

    if not targets_dir.is_dir():
        logger.warning(f"Targets directory not found: {targets_dir}")
        return []

    targets = []
    for entry in sorted(targets_dir.iterdir(), key=lambda p: p.name):
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        if not (entry / config_filename).is_file():
            logger.debug(f"Skipping {entry.name}: no {config_filename}")
            continue
        if not (entry / entry_point).is_file():
            logger.debug(f"Skipping {entry.name}: no {entry_point}")
            continue
        targets.append(Target(name=entry.name, path=entry))

    return targets
