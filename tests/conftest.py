"""
Pytest configuration and shared fixtures for getdoc tests.
"""

import pytest

from getdoc.core.classifier import PathClassifier
from getdoc.core.models import FeatureConfiguration, RawDiagnostic, Span


REGISTRY_ROOT = "/home/dev/.cargo/registry/src"
GIT_ROOT = "/home/dev/.cargo/git/checkouts"
CRATE_FILE = f"{REGISTRY_ROOT}/index.crates.io-6f17d22bba15001f/crate-x-1.2.0/src/lib.rs"


def make_raw(
    message: str,
    file_path: str = "src/main.rs",
    line_start: int = 1,
    line_end: int = None,
    level: str = "error",
    code: str = None,
    explanation: str = None,
    children=(),
    extra_spans=(),
) -> RawDiagnostic:
    """Build a compiler message with one primary span."""
    primary = Span(file_path, line_start, line_end or line_start, is_primary=True)
    return RawDiagnostic(
        level=level,
        message=message,
        code=code,
        code_explanation=explanation,
        spans=(primary, *extra_spans),
        rendered=f"{level}: {message}\n --> {file_path}:{line_start}\n",
        children=tuple(children),
    )


@pytest.fixture
def classifier() -> PathClassifier:
    """Classifier with fixed cargo cache roots."""
    return PathClassifier(REGISTRY_ROOT, GIT_ROOT)


@pytest.fixture
def default_and_all() -> list:
    return [
        FeatureConfiguration("default", ()),
        FeatureConfiguration("all-features", ("--all-features",)),
    ]

