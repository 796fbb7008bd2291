"""I/O utilities for catalog snapshots."""

from src.io.snapshotting import get_latest_snapshot_path, load_latest_snapshot_df

__all__ = ["get_latest_snapshot_path", "load_latest_snapshot_df"]
