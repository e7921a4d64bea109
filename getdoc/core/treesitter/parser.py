"""
Rust grammar loading and a cached Tree-sitter parser.
"""

from functools import lru_cache

from tree_sitter import Language, Parser, Tree
from tree_sitter_rust import language as rust_language


@lru_cache(maxsize=1)
def get_rust_language() -> Language:
    return Language(rust_language())


@lru_cache(maxsize=1)
def get_rust_parser() -> Parser:
    parser = Parser()
    parser.language = get_rust_language()
    return parser


def parse_rust(source: str) -> Tree:
    return get_rust_parser().parse(source.encode("utf-8"))
