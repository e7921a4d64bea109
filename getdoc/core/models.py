"""
Core data models for getdoc.

This module contains the data structures shared by the planner, the
diagnostic store, the implication analyzer, the source extractor and the
report assembler. They carry no behaviour beyond small derived properties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple


class Severity(Enum):
    """Compiler message levels that getdoc keeps."""
    ERROR = "error"
    WARNING = "warning"


class ItemKind(Enum):
    """Closed set of source item kinds extracted from Rust files."""
    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"
    TRAIT = "trait"
    IMPL_BLOCK = "impl_block"
    ASSOCIATED_ITEM = "associated_item"
    TYPE_ALIAS = "type_alias"
    CONSTANT = "constant"
    EXTERN_CRATE = "extern_crate"
    USE_STATEMENT = "use_statement"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]

    @property
    def nests(self) -> bool:
        return self in (ItemKind.IMPL_BLOCK, ItemKind.TRAIT)


_KIND_LABELS = {
    ItemKind.FUNCTION: "Function",
    ItemKind.STRUCT: "Struct",
    ItemKind.ENUM: "Enum",
    ItemKind.TRAIT: "Trait",
    ItemKind.IMPL_BLOCK: "Impl Block",
    ItemKind.ASSOCIATED_ITEM: "Associated Item",
    ItemKind.TYPE_ALIAS: "Type Alias",
    ItemKind.CONSTANT: "Constant",
    ItemKind.EXTERN_CRATE: "Extern Crate",
    ItemKind.USE_STATEMENT: "Use Statement",
}


@dataclass(frozen=True, order=True)
class LineRange:
    """Inclusive, 1-based range of source lines."""
    start: int
    end: int

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Line range ends before it starts: {self.start}-{self.end}")

    def intersects(self, other: "LineRange") -> bool:
        return self.start <= other.end and other.start <= self.end

    def intersects_any(self, ranges: Iterable["LineRange"]) -> bool:
        return any(self.intersects(r) for r in ranges)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def merge_ranges(ranges: Iterable[LineRange]) -> Tuple[LineRange, ...]:
    """Return the sorted union of ``ranges``; overlapping or adjacent ranges coalesce."""
    merged: List[LineRange] = []
    for current in sorted(ranges):
        if merged and current.start <= merged[-1].end + 1:
            last = merged[-1]
            merged[-1] = LineRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return tuple(merged)


# --- Planning ---

@dataclass(frozen=True)
class FeatureConfiguration:
    """One named set of cargo feature flags under which a check is performed."""
    name: str
    check_args: Tuple[str, ...] = ()

    @property
    def flag_key(self) -> FrozenSet[str]:
        return frozenset(self.check_args)

    @property
    def description(self) -> str:
        return " ".join(self.check_args) if self.check_args else "(no flags)"


@dataclass(frozen=True)
class ModeDescriptor:
    """Comprehensive mode when ``focus`` is empty, targeted mode otherwise."""
    focus: Tuple[str, ...] = ()

    @property
    def targeted(self) -> bool:
        return bool(self.focus)

    def describe(self) -> str:
        if self.targeted:
            return f"Targeted Mode for Features: `{', '.join(self.focus)}`"
        return "Comprehensive Mode"


# --- Diagnostics ---

@dataclass(frozen=True)
class Span:
    """A file path plus a line range implicated by a diagnostic."""
    file_path: str
    line_start: int
    line_end: int
    is_primary: bool = False
    label: Optional[str] = None

    @property
    def line_range(self) -> LineRange:
        return LineRange(self.line_start, max(self.line_start, self.line_end))

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.line_start}"


@dataclass(frozen=True)
class RawDiagnostic:
    """A compiler message as decoded from the check runner, before filtering."""
    level: str
    message: str
    code: Optional[str] = None
    code_explanation: Optional[str] = None
    spans: Tuple[Span, ...] = ()
    rendered: Optional[str] = None
    children: Tuple["RawDiagnostic", ...] = ()


@dataclass(frozen=True)
class Diagnostic:
    """One compiler-reported error or warning.

    ``configurations`` lists, in planning order, the configuration names that
    produced this diagnostic. It is not part of equality: two diagnostics are
    the same diagnostic when ``identity`` matches.
    """
    severity: Severity
    message: str
    code: Optional[str] = None
    spans: Tuple[Span, ...] = ()
    rendered: str = ""
    configurations: Tuple[str, ...] = field(default=(), compare=False)
    own_span_count: int = field(default=-1, compare=False, repr=False)

    @property
    def own_spans(self) -> Tuple[Span, ...]:
        if self.own_span_count < 0:
            return self.spans
        return self.spans[:self.own_span_count]

    @property
    def primary_span(self) -> Optional[Span]:
        own = self.own_spans
        for span in own:
            if span.is_primary:
                return span
        return own[0] if own else None

    @property
    def primary_location(self) -> str:
        span = self.primary_span
        if span is None:
            return "unknown location"
        if not span.is_primary:
            return f"{span.location} (non-primary)"
        return span.location

    @property
    def identity(self) -> Tuple[str, Optional[str], Optional[Tuple[str, int, int]]]:
        span = self.primary_span
        span_key = (span.file_path, span.line_start, span.line_end) if span else None
        return (self.message, self.code, span_key)


@dataclass(frozen=True)
class ConfigurationDiagnostics:
    """Diagnostics first produced under one configuration, or why it failed."""
    configuration: FeatureConfiguration
    diagnostics: Tuple[Diagnostic, ...] = ()
    failure: Optional[str] = None


# --- Implication ---

@dataclass(frozen=True)
class ImplicatedFile:
    """A third-party source file referenced by at least one diagnostic span."""
    path: str
    diagnostics: Tuple[Diagnostic, ...] = ()
    ranges: Tuple[LineRange, ...] = ()


# --- Parsed source ---

@dataclass(frozen=True)
class SyntaxNode:
    """One declaration as produced by a parser collaborator.

    ``header_end`` is the last line of the declaration header for nesting
    kinds (the line holding the opening brace); ``inner_comments`` is the
    container-level summary found at the start of its body.
    """
    kind: ItemKind
    name: str
    signature: str
    line_start: int
    line_end: int
    leading_comments: Tuple[str, ...] = ()
    header_end: Optional[int] = None
    children: Tuple["SyntaxNode", ...] = ()
    inner_comments: Tuple[str, ...] = ()

    @property
    def line_range(self) -> LineRange:
        return LineRange(self.line_start, self.line_end)

    @property
    def header_range(self) -> LineRange:
        end = self.header_end if self.header_end is not None else self.line_end
        return LineRange(self.line_start, max(self.line_start, end))


@dataclass(frozen=True)
class SyntaxTree:
    path: str
    items: Tuple[SyntaxNode, ...] = ()
    inner_comments: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SourceItem:
    """A declaration selected for the report, with its documentation attached."""
    kind: ItemKind
    name: str
    signature: str
    documentation: Tuple[str, ...] = ()
    children: Tuple["SourceItem", ...] = ()
    line_start: int = 0
    line_end: int = 0

    @property
    def line_range(self) -> LineRange:
        return LineRange(self.line_start, self.line_end)


@dataclass(frozen=True)
class FileExtraction:
    """Extraction result for one implicated file; ``error`` marks a failed read or parse."""
    path: str
    items: Tuple[SourceItem, ...] = ()
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


# --- Report ---

@dataclass(frozen=True)
class FileReport:
    implicated: ImplicatedFile
    extraction: FileExtraction


@dataclass(frozen=True)
class ReportDocument:
    generated_at: datetime
    mode: ModeDescriptor
    configurations: Tuple[ConfigurationDiagnostics, ...] = ()
    files: Tuple[FileReport, ...] = ()
    explanations: Tuple[Tuple[str, str], ...] = ()

    @property
    def diagnostic_count(self) -> int:
        return sum(len(group.diagnostics) for group in self.configurations)

    def explanation_map(self) -> Dict[str, str]:
        return dict(self.explanations)
