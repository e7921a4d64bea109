"""
Classifies source paths as project-owned or dependency-owned.

Dependency sources live under cargo's registry source cache or its git
checkout cache. Both roots are supplied by configuration. Classification is
a pure string comparison: nothing is read from disk.
"""

from __future__ import annotations

import os
import posixpath
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class PathKind(Enum):
    LOCAL = "local"
    THIRD_PARTY = "third_party"


class PathClassifier:
    def __init__(self, registry_root: Optional[str], git_checkout_root: Optional[str] = None):
        self.registry_root = registry_root
        self.git_checkout_root = git_checkout_root
        self._prefixes: List[str] = []
        for root in (registry_root, git_checkout_root):
            if root:
                self._prefixes.extend(_root_forms(root))

    @property
    def roots(self) -> Tuple[str, ...]:
        return tuple(root for root in (self.registry_root, self.git_checkout_root) if root)

    def classify(self, path: str) -> PathKind:
        if not path or not self._prefixes:
            return PathKind.LOCAL
        for form in _path_forms(path):
            if any(form.startswith(prefix) for prefix in self._prefixes):
                return PathKind.THIRD_PARTY
        return PathKind.LOCAL

    def is_third_party(self, path: str) -> bool:
        return self.classify(path) is PathKind.THIRD_PARTY

    @staticmethod
    def normalize(path: str) -> str:
        """Canonical textual form of ``path`` used as a file key."""
        return _normalized(_expanded(path))


def _expanded(path: str) -> str:
    return os.path.expanduser(str(path)).replace("\\", "/")


def _normalized(path: str) -> str:
    return posixpath.normpath(path) if path else path


def _path_forms(path: str) -> Iterable[str]:
    expanded = _expanded(path)
    yield expanded
    yield _normalized(expanded)


def _root_forms(root: str) -> List[str]:
    expanded = _expanded(root)
    forms = {expanded, _normalized(expanded)}
    return sorted(form for form in forms if form)
