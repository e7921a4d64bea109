"""
Selects the documented source items relevant to a set of line ranges.

Works on the parser-agnostic ``SyntaxTree`` model. Items are kept when their
lines intersect a range of interest; impl blocks and traits are always
searched, and are kept as a structural label when only one of their members
matches.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from .models import LineRange, SourceItem, SyntaxNode, SyntaxTree, merge_ranges


class SourceItemExtractor:
    def extract(self, tree: SyntaxTree, ranges: Iterable[LineRange]) -> List[SourceItem]:
        interest = merge_ranges(ranges)
        if not interest:
            return []
        return self._extract_scope(tree.items, tree.inner_comments, interest)

    def _extract_scope(
        self,
        nodes: Sequence[SyntaxNode],
        summary: Sequence[str],
        interest: Tuple[LineRange, ...],
    ) -> List[SourceItem]:
        items: List[SourceItem] = []
        for position, node in enumerate(nodes):
            documentation = _documentation(node, summary if position == 0 else ())
            if node.kind.nests:
                item = self._extract_container(node, documentation, interest)
            elif node.line_range.intersects_any(interest):
                item = _to_item(node, documentation)
            else:
                item = None
            if item is not None:
                items.append(item)
        return items

    def _extract_container(
        self,
        node: SyntaxNode,
        documentation: Tuple[str, ...],
        interest: Tuple[LineRange, ...],
    ) -> Optional[SourceItem]:
        children = tuple(
            _to_item(child, _documentation(child, node.inner_comments if position == 0 else ()))
            for position, child in enumerate(node.children)
            if child.line_range.intersects_any(interest)
        )
        if node.header_range.intersects_any(interest):
            return _to_item(node, documentation, children)
        if children:
            # Only members matched: keep the container as context, without its docs.
            return _to_item(node, (), children)
        return None


def _documentation(node: SyntaxNode, summary: Sequence[str]) -> Tuple[str, ...]:
    return tuple(summary) + tuple(node.leading_comments)


def _to_item(
    node: SyntaxNode,
    documentation: Tuple[str, ...],
    children: Tuple[SourceItem, ...] = (),
) -> SourceItem:
    return SourceItem(
        kind=node.kind,
        name=node.name,
        signature=node.signature,
        documentation=documentation,
        children=children,
        line_start=node.line_start,
        line_end=node.line_end,
    )
