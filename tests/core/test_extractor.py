import pytest

from getdoc.core.extractor import SourceItemExtractor
from getdoc.core.models import ItemKind, LineRange, SyntaxNode, SyntaxTree


def _fn(name, start, end, docs=(), kind=ItemKind.FUNCTION):
    return SyntaxNode(kind=kind, name=name, signature=f"fn {name}()", line_start=start,
                      line_end=end, leading_comments=tuple(docs))


@pytest.fixture
def tree():
    impl = SyntaxNode(
        kind=ItemKind.IMPL_BLOCK,
        name="Parser",
        signature="impl Parser",
        line_start=20,
        line_end=40,
        leading_comments=("Parser internals.",),
        header_end=20,
        children=(
            _fn("first", 22, 28, ["First method."], kind=ItemKind.ASSOCIATED_ITEM),
            _fn("second", 31, 39, ["Second method."], kind=ItemKind.ASSOCIATED_ITEM),
        ),
        inner_comments=("Impl summary.",),
    )
    return SyntaxTree(
        path="lib.rs",
        items=(
            _fn("parse", 9, 15, ["Parses input.", "Returns a tree."]),
            impl,
            _fn("tail", 50, 52),
        ),
        inner_comments=("Crate summary.",),
    )


def test_function_with_docs_is_extracted(tree):
    items = SourceItemExtractor().extract(tree, [LineRange(10, 12)])

    assert len(items) == 1
    assert items[0].name == "parse"
    assert items[0].documentation == ("Crate summary.", "Parses input.", "Returns a tree.")
    assert (items[0].line_start, items[0].line_end) == (9, 15)


def test_no_ranges_yield_nothing(tree):
    assert SourceItemExtractor().extract(tree, []) == []


def test_unmatched_ranges_yield_nothing(tree):
    assert SourceItemExtractor().extract(tree, [LineRange(100, 120)]) == []


def test_member_match_keeps_container_without_docs(tree):
    items = SourceItemExtractor().extract(tree, [LineRange(33, 34)])

    assert len(items) == 1
    impl = items[0]
    assert impl.kind is ItemKind.IMPL_BLOCK
    assert impl.signature == "impl Parser"
    assert impl.documentation == ()
    assert [child.name for child in impl.children] == ["second"]
    assert impl.children[0].documentation == ("Second method.",)


def test_container_summary_goes_to_first_member(tree):
    items = SourceItemExtractor().extract(tree, [LineRange(23, 23)])

    assert items[0].children[0].documentation == ("Impl summary.", "First method.")


def test_header_match_keeps_container_docs(tree):
    items = SourceItemExtractor().extract(tree, [LineRange(20, 20)])

    assert items[0].documentation == ("Parser internals.",)
    assert items[0].children == ()


def test_body_gap_between_members_matches_nothing(tree):
    assert SourceItemExtractor().extract(tree, [LineRange(29, 30)]) == []


def test_several_ranges(tree):
    items = SourceItemExtractor().extract(tree, [LineRange(51, 51), LineRange(12, 12)])
    assert [item.name for item in items] == ["parse", "tail"]


def test_extraction_is_deterministic(tree):
    extractor = SourceItemExtractor()
    ranges = [LineRange(10, 12), LineRange(33, 34)]
    assert extractor.extract(tree, ranges) == extractor.extract(tree, list(reversed(ranges)))
