"""DogWatcher package initialization."""

from .config import AppConfig, EmailSettings, load_config, load_sites
from .diff import diff_snapshots
from .models import (
    RESERVED_MARKER,
    ChangeSet,
    Listing,
    SiteConfig,
    SiteRunResult,
)
from .runner import DogWatcherRunner
from .store import SnapshotStore

__all__ = [
    "AppConfig",
    "ChangeSet",
    "DogWatcherRunner",
    "EmailSettings",
    "Listing",
    "RESERVED_MARKER",
    "SiteConfig",
    "SiteRunResult",
    "SnapshotStore",
    "diff_snapshots",
    "load_config",
    "load_sites",
]
