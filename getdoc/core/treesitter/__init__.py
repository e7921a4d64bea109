"""
Tree-sitter integration for getdoc.

Loads the Rust grammar and turns a Tree-sitter tree into getdoc's
``SyntaxTree`` model.
"""

from .parser import get_rust_language, get_rust_parser, parse_rust
from .rust_extractor import TreeSitterRustExtractor

__all__ = [
    "get_rust_language",
    "get_rust_parser",
    "parse_rust",
    "TreeSitterRustExtractor",
]
