"""
Accumulates compiler diagnostics across feature configurations.

Identical diagnostics (same message, code and primary span) reported by
several configurations are stored once and attributed to every configuration
that produced them. Presentation order does not depend on the order in which
configurations were recorded: each diagnostic is listed under the earliest
planned configuration that produced it, in that configuration's emission
order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    ConfigurationDiagnostics,
    Diagnostic,
    FeatureConfiguration,
    RawDiagnostic,
    Severity,
    Span,
)

logger = logging.getLogger(__name__)

KEPT_LEVELS = {severity.value: severity for severity in Severity}


@dataclass
class _Entry:
    diagnostic: Diagnostic
    # configuration index -> emission index within that configuration
    emissions: Dict[int, int] = field(default_factory=dict)


class DiagnosticStore:
    def __init__(self, configurations: Sequence[FeatureConfiguration]):
        self._configurations: List[FeatureConfiguration] = list(configurations)
        self._index: Dict[str, int] = {}
        for position, configuration in enumerate(self._configurations):
            self._index.setdefault(configuration.name, position)
        self._entries: Dict[tuple, _Entry] = {}
        self._emitted: Dict[int, int] = {}
        self._failures: Dict[int, str] = {}
        self._explanations: Dict[str, str] = {}

    @property
    def configurations(self) -> List[FeatureConfiguration]:
        return list(self._configurations)

    def record(self, configuration_name: str, records: Sequence[RawDiagnostic]) -> None:
        position = self._position(configuration_name)
        kept = 0
        for record in records:
            diagnostic = self._to_diagnostic(record)
            if diagnostic is None:
                continue
            kept += 1
            self._remember_explanation(record)

            entry = self._entries.get(diagnostic.identity)
            if entry is None:
                entry = _Entry(diagnostic=diagnostic)
                self._entries[diagnostic.identity] = entry
            if position not in entry.emissions:
                entry.emissions[position] = self._emitted.get(position, 0)
                self._emitted[position] = entry.emissions[position] + 1
        logger.debug(
            f"Recorded {kept} of {len(records)} compiler messages for '{configuration_name}'"
        )

    def record_failure(self, configuration_name: str, reason: str) -> None:
        self._failures[self._position(configuration_name)] = reason

    def all(self) -> List[Tuple[FeatureConfiguration, Diagnostic]]:
        """Every unique diagnostic with its home configuration, in presentation order."""
        ordered = sorted(self._entries.values(), key=self._sort_key)
        result = []
        for entry in ordered:
            home = min(entry.emissions)
            result.append((self._configurations[home], self._attributed(entry)))
        return result

    def diagnostics(self) -> List[Diagnostic]:
        return [diagnostic for _, diagnostic in self.all()]

    def by_configuration(self) -> List[ConfigurationDiagnostics]:
        grouped: Dict[int, List[Diagnostic]] = {}
        for entry in sorted(self._entries.values(), key=self._sort_key):
            grouped.setdefault(min(entry.emissions), []).append(self._attributed(entry))
        return [
            ConfigurationDiagnostics(
                configuration=configuration,
                diagnostics=tuple(grouped.get(position, ())),
                failure=self._failures.get(position),
            )
            for position, configuration in enumerate(self._configurations)
        ]

    def failures(self) -> Dict[str, str]:
        return {self._configurations[pos].name: reason for pos, reason in sorted(self._failures.items())}

    def explanations(self) -> Dict[str, str]:
        return dict(sorted(self._explanations.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def _position(self, configuration_name: str) -> int:
        try:
            return self._index[configuration_name]
        except KeyError:
            raise ValueError(f"Configuration was not planned: {configuration_name}") from None

    def _sort_key(self, entry: _Entry) -> Tuple[int, int]:
        home = min(entry.emissions)
        return (home, entry.emissions[home])

    def _attributed(self, entry: _Entry) -> Diagnostic:
        names = tuple(self._configurations[pos].name for pos in sorted(entry.emissions))
        return replace(entry.diagnostic, configurations=names)

    def _remember_explanation(self, record: RawDiagnostic) -> None:
        if record.code and record.code_explanation and record.code_explanation.strip():
            self._explanations.setdefault(record.code, record.code_explanation)

    @staticmethod
    def _to_diagnostic(record: RawDiagnostic) -> Optional[Diagnostic]:
        severity = KEPT_LEVELS.get(record.level)
        if severity is None:
            return None
        own = tuple(record.spans)
        related = tuple(_child_spans(record.children))
        rendered = (record.rendered or "").rstrip() or record.message
        return Diagnostic(
            severity=severity,
            message=record.message,
            code=record.code,
            spans=own + related,
            rendered=rendered,
            own_span_count=len(own),
        )


def _child_spans(children: Sequence[RawDiagnostic]):
    """Spans of notes and help messages, demoted to non-primary."""
    for child in children:
        for span in child.spans:
            yield replace(span, is_primary=False) if span.is_primary else span
        yield from _child_spans(child.children)
