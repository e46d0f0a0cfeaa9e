"""
Artifact IO

Snapshot and distribution files on disk.
"""

from orchestrator.artifacts.io import (
    dump_json,
    load_distribution,
    load_snapshot,
    save_distribution,
    save_snapshot,
)

__all__ = [
    "dump_json",
    "load_distribution",
    "load_snapshot",
    "save_distribution",
    "save_snapshot",
]
