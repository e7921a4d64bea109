"""
Tree-sitter adapter for Rust source.

Produces SyntaxTree / SyntaxNode objects from Tree-sitter nodes. Bodies and
constant values are elided from signatures; ``///`` and ``/** */`` doc
comments are attached to the item that follows them, ``//!`` and ``/*! */``
comments at the top of a scope become that scope's summary. An item's line
range starts at the outer attributes written above it.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from tree_sitter import Node, Tree

from ..models import ItemKind, SyntaxNode, SyntaxTree

TOP_LEVEL_KINDS = {
    "function_item": ItemKind.FUNCTION,
    "function_signature_item": ItemKind.FUNCTION,
    "struct_item": ItemKind.STRUCT,
    "union_item": ItemKind.STRUCT,
    "enum_item": ItemKind.ENUM,
    "trait_item": ItemKind.TRAIT,
    "impl_item": ItemKind.IMPL_BLOCK,
    "type_item": ItemKind.TYPE_ALIAS,
    "const_item": ItemKind.CONSTANT,
    "static_item": ItemKind.CONSTANT,
    "extern_crate_declaration": ItemKind.EXTERN_CRATE,
    "use_declaration": ItemKind.USE_STATEMENT,
}

MEMBER_TYPES = {
    "function_item",
    "function_signature_item",
    "const_item",
    "static_item",
    "type_item",
    "associated_type",
    "macro_invocation",
}

COMMENT_TYPES = {"line_comment", "block_comment"}
ATTRIBUTE_TYPES = {"attribute_item", "inner_attribute_item"}
BODY_CUT_TYPES = {"function_item", "impl_item", "trait_item", "struct_item", "enum_item", "union_item"}
VALUE_CUT_TYPES = {"const_item", "static_item"}
USE_NAME_LIMIT = 70


def build_syntax_tree(tree: Tree, source: str, file_path: str) -> SyntaxTree:
    source_bytes = source.encode("utf-8")
    items, summary = _walk_scope(tree.root_node, source_bytes, nested=False)
    return SyntaxTree(path=file_path, items=tuple(items), inner_comments=tuple(summary))


def _walk_scope(container: Node, source_bytes: bytes, nested: bool) -> Tuple[List[SyntaxNode], List[str]]:
    items: List[SyntaxNode] = []
    summary: List[str] = []
    pending_docs: List[str] = []
    attribute_start: Optional[int] = None

    for child in container.children:
        if child.type in COMMENT_TYPES:
            text = _node_text(source_bytes, child)
            style = _doc_style(text)
            if style == "inner":
                if not items and not pending_docs:
                    summary.extend(_doc_lines(text))
            elif style == "outer":
                pending_docs.extend(_doc_lines(text))
            else:
                # a plain comment ends the doc run
                pending_docs = []
            continue
        if child.type == "attribute_item":
            # outer attributes belong to the item that follows them
            if attribute_start is None:
                attribute_start = child.start_point[0] + 1
            continue
        if child.type in ATTRIBUTE_TYPES or not child.is_named:
            continue

        if nested:
            node = _build_member(child, source_bytes, pending_docs, attribute_start)
        else:
            node = _build_item(child, source_bytes, pending_docs, attribute_start)
        pending_docs = []
        attribute_start = None
        if node is not None:
            items.append(node)

    return items, summary


def _build_item(
    node: Node, source_bytes: bytes, docs: List[str], attribute_start: Optional[int] = None
) -> Optional[SyntaxNode]:
    kind = TOP_LEVEL_KINDS.get(node.type)
    if kind is None:
        return None
    start_line, end_line = _line_span(node, attribute_start)
    header_end = None
    members: List[SyntaxNode] = []
    inner: List[str] = []
    if kind.nests:
        body = node.child_by_field_name("body")
        if body is not None:
            header_end = body.start_point[0] + 1
            members, inner = _walk_scope(body, source_bytes, nested=True)
    return SyntaxNode(
        kind=kind,
        name=_item_name(node, source_bytes),
        signature=_signature(node, source_bytes),
        line_start=start_line,
        line_end=end_line,
        leading_comments=tuple(docs),
        header_end=header_end,
        children=tuple(members),
        inner_comments=tuple(inner),
    )


def _build_member(
    node: Node, source_bytes: bytes, docs: List[str], attribute_start: Optional[int] = None
) -> Optional[SyntaxNode]:
    if node.type not in MEMBER_TYPES:
        return None
    start_line, end_line = _line_span(node, attribute_start)
    return SyntaxNode(
        kind=ItemKind.ASSOCIATED_ITEM,
        name=_item_name(node, source_bytes),
        signature=_signature(node, source_bytes),
        line_start=start_line,
        line_end=end_line,
        leading_comments=tuple(docs),
    )


def _item_name(node: Node, source_bytes: bytes) -> str:
    if node.type == "impl_item":
        type_text = _node_text(source_bytes, node.child_by_field_name("type"))
        trait_node = node.child_by_field_name("trait")
        if trait_node is not None:
            return f"{_node_text(source_bytes, trait_node)} for {type_text}"
        return type_text
    if node.type == "use_declaration":
        name = _node_text(source_bytes, node.child_by_field_name("argument"))
        if len(name) > USE_NAME_LIMIT:
            name = name[:USE_NAME_LIMIT - 3] + "..."
        return name
    if node.type == "extern_crate_declaration":
        alias = node.child_by_field_name("alias")
        return _node_text(source_bytes, alias or node.child_by_field_name("name"))
    if node.type == "macro_invocation":
        return _node_text(source_bytes, node.child_by_field_name("macro")) + "!"
    name_node = node.child_by_field_name("name")
    return _node_text(source_bytes, name_node) if name_node else "<anonymous>"


def _signature(node: Node, source_bytes: bytes) -> str:
    if node.type in BODY_CUT_TYPES:
        body = node.child_by_field_name("body")
        # tuple structs keep their field list: it is the whole definition
        if body is not None and body.type != "ordered_field_declaration_list":
            return _slice(source_bytes, node.start_byte, body.start_byte).rstrip()
    if node.type in VALUE_CUT_TYPES:
        value = node.child_by_field_name("value")
        if value is not None:
            return _slice(source_bytes, node.start_byte, value.start_byte).rstrip() + " ...;"
    return _node_text(source_bytes, node).strip()


def _doc_style(text: str) -> Optional[str]:
    if text.startswith("//!") or text.startswith("/*!"):
        return "inner"
    if text.startswith("///") and not text.startswith("////"):
        return "outer"
    if text.startswith("/**") and not text.startswith("/***") and not text.startswith("/**/"):
        return "outer"
    return None


def _doc_lines(text: str) -> List[str]:
    if text.startswith("//"):
        return [_strip_one_space(text[3:].rstrip("\r\n"))]

    body = text[3:-2] if text.endswith("*/") else text[3:]
    lines = []
    for line in body.splitlines():
        stripped = line.lstrip()
        if stripped.startswith("*"):
            line = stripped[1:]
        lines.append(_strip_one_space(line.rstrip()))
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def _strip_one_space(line: str) -> str:
    return line[1:] if line.startswith(" ") else line


def _line_span(node: Node, attribute_start: Optional[int] = None) -> Tuple[int, int]:
    start_row, end_row = node.start_point[0], node.end_point[0]
    # a node ending at column 0 stops at the end of the previous line
    if node.end_point[1] == 0 and end_row > start_row:
        end_row -= 1
    start_line = start_row + 1
    if attribute_start is not None:
        start_line = min(start_line, attribute_start)
    return start_line, end_row + 1


def _node_text(source_bytes: bytes, node: Optional[Node]) -> str:
    if not node:
        return ""
    return _slice(source_bytes, node.start_byte, node.end_byte)


def _slice(source_bytes: bytes, start: int, end: int) -> str:
    return source_bytes[start:end].decode("utf-8", errors="replace")
