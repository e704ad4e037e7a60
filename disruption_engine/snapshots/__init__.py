# Snapshots module - metrics, replay captures and reset
from .manager import SnapshotManager, DEFAULT_SNAPSHOT_LABEL

__all__ = ["SnapshotManager", "DEFAULT_SNAPSHOT_LABEL"]
