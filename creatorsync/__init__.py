"""
CreatorSync - Creator Post Archive Sync
=======================================

Keeps per-creator post archives in sync with their RSS/Atom feeds.

Main Components:
- Ingestion: feed fetching, URL normalization, archive supplementation
- Storage: markdown plus JSON metadata pairs with URL-first dedup
- Fleet: sequential, paced sweep over all targets with retry rounds
- Configuration: environment variables with Pydantic validation
"""

__version__ = "0.3.0"
__author__ = "CreatorSync Development Team"
__description__ = "Creator post archive sync"

# Core imports for easy access
from .config.settings import load_settings
from .ingestion.sync import sync_target
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import CreatorSyncError

__all__ = [
    "load_settings",
    "sync_target",
    "configure_application_logging",
    "get_logger_for_component",
    "CreatorSyncError",
]
