"""
Core analysis for getdoc.

Planner, diagnostic store, implication analyzer, source extractor and report
assembler, plus the collaborators that connect them to cargo, Cargo.toml and
tree-sitter.
"""

from .models import (
    ConfigurationDiagnostics,
    Diagnostic,
    FeatureConfiguration,
    FileExtraction,
    ImplicatedFile,
    ItemKind,
    LineRange,
    ModeDescriptor,
    RawDiagnostic,
    ReportDocument,
    Severity,
    SourceItem,
    Span,
    SyntaxNode,
    SyntaxTree,
)
from .errors import AssemblyError, CheckRunError, ConfigurationError, GetDocError, SourceParseError
from .planner import FeatureSetPlanner
from .diagnostic_store import DiagnosticStore
from .classifier import PathClassifier, PathKind
from .analyzer import ImplicationAnalyzer
from .extractor import SourceItemExtractor
from .report import ReportAssembler

__all__ = [
    # Models
    'ConfigurationDiagnostics',
    'Diagnostic',
    'FeatureConfiguration',
    'FileExtraction',
    'ImplicatedFile',
    'ItemKind',
    'LineRange',
    'ModeDescriptor',
    'RawDiagnostic',
    'ReportDocument',
    'Severity',
    'SourceItem',
    'Span',
    'SyntaxNode',
    'SyntaxTree',

    # Errors
    'GetDocError',
    'ConfigurationError',
    'AssemblyError',
    'CheckRunError',
    'SourceParseError',

    # Components
    'FeatureSetPlanner',
    'DiagnosticStore',
    'PathClassifier',
    'PathKind',
    'ImplicationAnalyzer',
    'SourceItemExtractor',
    'ReportAssembler',
]
