"""
Reads the feature table of a cargo manifest.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Tuple

logger = logging.getLogger(__name__)

DEFAULT_FEATURE = "default"


@dataclass(frozen=True)
class ManifestFeatures:
    declared: Tuple[str, ...] = ()
    default_enabled: FrozenSet[str] = field(default_factory=frozenset)


def read_manifest_features(manifest_path: Path) -> ManifestFeatures:
    """Declared features of ``manifest_path`` and those the default set turns on.

    A missing or unreadable manifest yields no features; planning then falls
    back to the default, bare and full builds.
    """
    if not manifest_path.is_file():
        logger.warning(f"Cargo.toml not found at {manifest_path}; assuming no declared features.")
        return ManifestFeatures()
    try:
        with open(manifest_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to parse {manifest_path}: {e}. Assuming no declared features.")
        return ManifestFeatures()
    return features_from_table(data.get("features") or {})


def features_from_table(table: Dict[str, List[str]]) -> ManifestFeatures:
    declared = tuple(name for name in table if name != DEFAULT_FEATURE)
    return ManifestFeatures(
        declared=declared,
        default_enabled=frozenset(_enabled_by(DEFAULT_FEATURE, table)),
    )


def _enabled_by(root: str, table: Dict[str, List[str]]) -> set:
    enabled = set()
    stack = list(table.get(root) or [])
    while stack:
        entry = stack.pop()
        # "dep:foo" and "foo/bar" enable dependencies, not features of this crate
        if entry.startswith("dep:") or "/" in entry:
            continue
        if entry in enabled or entry == root:
            continue
        enabled.add(entry)
        stack.extend(table.get(entry) or [])
    return enabled
