"""
Tree-sitter-based Rust parser for implicated dependency files.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from ..errors import SourceParseError
from ..models import SyntaxTree
from .parser import parse_rust
from .rust_adapter import build_syntax_tree

logger = logging.getLogger(__name__)


class TreeSitterRustExtractor:
    def __init__(self, enable_performance_monitoring: bool = True):
        self.enable_performance_monitoring = enable_performance_monitoring
        self.performance_metrics = {
            "total_files": 0,
            "total_items": 0,
            "parse_time": 0.0,
            "io_time": 0.0,
        }

    def parse_file(self, file_path: Path) -> SyntaxTree:
        """Read and parse ``file_path``.

        Raises:
            OSError / UnicodeDecodeError: the file could not be read.
            SourceParseError: the parser rejected the source.
        """
        io_start = time.time()
        source = Path(file_path).read_text(encoding="utf-8")
        if self.enable_performance_monitoring:
            self.performance_metrics["io_time"] += time.time() - io_start
        return self.parse_source(source, str(file_path))

    def parse_source(self, source: str, file_path: str) -> SyntaxTree:
        parse_start = time.time()
        try:
            tree = parse_rust(source)
        except (ValueError, TypeError) as e:
            raise SourceParseError(f"Tree-sitter could not parse {file_path}: {e}", file_path=file_path) from e

        if tree.root_node.has_error:
            logger.warning(f"Syntax errors in {file_path}; extracting what parsed cleanly.")

        syntax_tree = build_syntax_tree(tree, source, file_path)
        if self.enable_performance_monitoring:
            self.performance_metrics["total_files"] += 1
            self.performance_metrics["total_items"] += len(syntax_tree.items)
            self.performance_metrics["parse_time"] += time.time() - parse_start
        return syntax_tree
