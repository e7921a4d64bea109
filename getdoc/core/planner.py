"""
Feature-set planning.

Decides which ``cargo check`` feature configurations to run. Comprehensive
mode covers the default build, the bare build, the full build and each
optional feature on its own; targeted mode checks each focus feature with and
without the default features, plus the default build for reference.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Set

from .errors import ConfigurationError
from .models import FeatureConfiguration, ModeDescriptor

NO_DEFAULT_FLAG = "--no-default-features"
ALL_FEATURES_FLAG = "--all-features"
FEATURES_FLAG = "--features"


class FeatureSetPlanner:
    """Turns declared features (and an optional focus) into check configurations."""

    def plan(
        self,
        declared_features: Iterable[str],
        focus: Optional[Sequence[str]] = None,
        default_features: Iterable[str] = (),
    ) -> List[FeatureConfiguration]:
        declared = _ordered_unique(declared_features)
        focus_list = _ordered_unique(focus or ())

        if focus_list:
            unknown = [name for name in focus_list if name not in declared]
            if unknown:
                raise ConfigurationError(
                    f"Unknown feature(s) requested: {', '.join(unknown)}. "
                    f"Declared features: {', '.join(declared) or '(none)'}",
                    unknown=unknown,
                )
            candidates = self._targeted(focus_list)
        else:
            candidates = self._comprehensive(declared, set(default_features))

        return _dedupe(candidates)

    @staticmethod
    def mode_for(focus: Optional[Sequence[str]]) -> ModeDescriptor:
        return ModeDescriptor(focus=tuple(_ordered_unique(focus or ())))

    def _comprehensive(self, declared: List[str], default_enabled: Set[str]) -> List[FeatureConfiguration]:
        configurations = [
            FeatureConfiguration("default", ()),
            FeatureConfiguration("no-default", (NO_DEFAULT_FLAG,)),
            FeatureConfiguration("all-features", (ALL_FEATURES_FLAG,)),
        ]
        for feature in declared:
            if feature in default_enabled:
                continue
            configurations.append(
                FeatureConfiguration(
                    f"feature {feature} + no-default",
                    (NO_DEFAULT_FLAG, FEATURES_FLAG, feature),
                )
            )
        return configurations

    def _targeted(self, focus: List[str]) -> List[FeatureConfiguration]:
        configurations = []
        for feature in focus:
            configurations.append(
                FeatureConfiguration(
                    f"feature {feature} + no-default",
                    (NO_DEFAULT_FLAG, FEATURES_FLAG, feature),
                )
            )
            configurations.append(
                FeatureConfiguration(f"feature {feature} + default", (FEATURES_FLAG, feature))
            )
        configurations.append(FeatureConfiguration("default", ()))
        return configurations


def _ordered_unique(values: Iterable[str]) -> List[str]:
    # Sets carry no order of their own; sort them so plans are reproducible.
    if isinstance(values, (set, frozenset)):
        values = sorted(values)
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _dedupe(configurations: List[FeatureConfiguration]) -> List[FeatureConfiguration]:
    seen = set()
    unique = []
    for configuration in configurations:
        if configuration.flag_key in seen:
            continue
        seen.add(configuration.flag_key)
        unique.append(configuration)
    return unique
