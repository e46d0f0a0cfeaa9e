"""
Artifact IO

Purpose: Save and load snapshot and distribution files.

- Snapshot: JSON list of {"user", "balance", "isContract"} records
- Distribution: JSON object with camelCase keys (merkleRoot, tokenTotal,
  claims, ...)

Writes go to a temporary file in the target directory and are moved
into place, so a reader never sees a half-written file.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from core.amounts import DEFAULT_DECIMALS
from core.schemas.distribution import Distribution
from core.schemas.errors import SnapshotFormatException
from core.schemas.holders import HolderBalance
from core.snapshot.holders import holders_from_records, holders_to_records


def dump_json(obj: Any) -> str:
    """Serialize to pretty, key-sorted JSON."""
    if hasattr(obj, "model_dump"):
        obj = obj.model_dump(mode="json", by_alias=True)
    return json.dumps(obj, indent=2, sort_keys=True) + "\n"


def _write_atomic(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path


def _read_json_file(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SnapshotFormatException(f"Invalid JSON in {path}: {e}", path=str(path)) from e


def save_snapshot(
    holders: Iterable[HolderBalance],
    path: str | Path,
    decimals: int = DEFAULT_DECIMALS,
) -> Path:
    """Write holders as a snapshot file."""
    return _write_atomic(Path(path), dump_json(holders_to_records(holders, decimals)))


def load_snapshot(
    path: str | Path,
    decimals: int = DEFAULT_DECIMALS,
    *,
    exclude_contracts: bool = False,
) -> list[HolderBalance]:
    """
    Read a snapshot file.

    Raises:
        FileNotFoundError: If the file does not exist
        SnapshotFormatException: If the file is not a list of holder records
    """
    path = Path(path)
    data = _read_json_file(path)
    if not isinstance(data, list):
        raise SnapshotFormatException(
            f"Snapshot {path} must contain a JSON list of holder records",
            path=str(path),
        )
    return holders_from_records(data, decimals, exclude_contracts=exclude_contracts)


def save_distribution(distribution: Distribution, path: str | Path) -> Path:
    """Write a distribution file."""
    return _write_atomic(Path(path), dump_json(distribution))


def load_distribution(path: str | Path) -> Distribution:
    """
    Read a distribution file.

    Raises:
        FileNotFoundError: If the file does not exist
        SnapshotFormatException: If the content is not a valid distribution
    """
    path = Path(path)
    data = _read_json_file(path)
    try:
        return Distribution.model_validate(data)
    except ValidationError as e:
        raise SnapshotFormatException(
            f"Invalid distribution file {path}: {e.error_count()} error(s)",
            path=str(path),
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


__all__ = [
    "dump_json",
    "save_snapshot",
    "load_snapshot",
    "save_distribution",
    "load_distribution",
]
