"""
Implication analysis: which third-party files do the diagnostics point into?
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .classifier import PathClassifier
from .models import Diagnostic, ImplicatedFile, LineRange, merge_ranges

logger = logging.getLogger(__name__)


class ImplicationAnalyzer:
    """Builds the file -> diagnostics back-reference index for dependency files.

    A diagnostic whose spans touch several third-party files is registered
    against each of them; files are ordered by first reference.
    """

    def __init__(self, classifier: PathClassifier):
        self.classifier = classifier

    def analyze(self, diagnostics: Iterable[Diagnostic]) -> Dict[str, ImplicatedFile]:
        referenced: Dict[str, List[Diagnostic]] = {}
        seen: Dict[str, set] = {}
        ranges: Dict[str, List[LineRange]] = {}

        for diagnostic in diagnostics:
            for span in diagnostic.spans:
                if not self.classifier.is_third_party(span.file_path):
                    continue
                path = self.classifier.normalize(span.file_path)
                if path not in referenced:
                    referenced[path] = []
                    seen[path] = set()
                    ranges[path] = []
                if diagnostic.identity not in seen[path]:
                    seen[path].add(diagnostic.identity)
                    referenced[path].append(diagnostic)
                ranges[path].append(span.line_range)

        implicated = {
            path: ImplicatedFile(
                path=path,
                diagnostics=tuple(referenced[path]),
                ranges=merge_ranges(ranges[path]),
            )
            for path in referenced
        }

        if implicated:
            logger.info(f"{len(implicated)} third-party file(s) implicated by diagnostics")
        return implicated
