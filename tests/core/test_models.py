import pytest

from aether_builder.core.exceptions import AetherBuilderError, TreeIntegrityError
from aether_builder.core.models import (
    CanvasNode,
    DocumentContext,
    ElementKind,
    assert_tree_integrity,
    collect_tree_problems,
    is_valid_kind,
)


def test_enum_kind_is_normalised_to_value():
    node = CanvasNode(id="n", kind=ElementKind.GRID_COL, name="Col")
    assert node.kind == "grid-col"
    assert node.is_container


def test_container_capable_kinds():
    containers = {k.value for k in ElementKind if CanvasNode("x", k, "x").is_container}
    assert containers == {"container", "section", "grid-col"}


def test_is_valid_kind():
    assert is_valid_kind("button")
    assert is_valid_kind(ElementKind.ALERT)
    assert not is_valid_kind("marquee")
    assert not is_valid_kind(None)


def test_depth_first_order(sample_context):
    ids = [n.id for n in sample_context.root.depth_first()]
    assert ids == ["root", "c1", "t1", "s1", "b1"]


def test_contains(sample_context):
    c1 = sample_context.find_node("c1")
    assert c1.contains("c1")
    assert c1.contains("t1")
    assert not c1.contains("b1")


def test_add_child_returns_child(make_node):
    parent = make_node("p", "container")
    child = parent.add_child(make_node("c", "text"))
    assert parent.children == [child]


def test_find_with_parent(sample_context):
    node, parent = sample_context.find_with_parent("t1")
    assert node.id == "t1"
    assert parent.id == "c1"

    root, no_parent = sample_context.find_with_parent("root")
    assert root is sample_context.root
    assert no_parent is None

    assert sample_context.find_with_parent("missing") == (None, None)


def test_find_node_none_and_missing(sample_context):
    assert sample_context.find_node(None) is None
    assert sample_context.find_node("nope") is None


def test_dict_round_trip_is_detached(sample_context):
    data = sample_context.root.to_dict()
    clone = CanvasNode.from_dict(data)

    assert clone.to_dict() == data
    assert clone is not sample_context.root
    clone.children[0].children[0].properties["content"] = "Changed"
    assert sample_context.find_node("t1").properties["content"] == "Hello"


class TestTreeIntegrity:

    def test_sound_tree(self, sample_context):
        assert collect_tree_problems(sample_context.root) == []
        assert_tree_integrity(sample_context.root)

    def test_duplicate_id(self, make_node):
        root = make_node("root", "container", [make_node("a", "text"), make_node("a", "text")])
        problems = collect_tree_problems(root)
        assert any("'a' appears 2 times" in p for p in problems)

    def test_shared_node(self, make_node):
        shared = make_node("shared", "text")
        root = make_node("root", "container", [shared, shared])
        problems = collect_tree_problems(root)
        assert any("more than one parent" in p for p in problems)

    def test_unknown_kind(self, make_node):
        root = make_node("root", "container", [make_node("x", "marquee")])
        problems = collect_tree_problems(root)
        assert any("unknown kind" in p for p in problems)

    def test_assert_raises(self, make_node):
        root = make_node("root", "container", [make_node("a", "text"), make_node("a", "text")])
        with pytest.raises(TreeIntegrityError) as excinfo:
            assert_tree_integrity(root)
        assert isinstance(excinfo.value, AetherBuilderError)
        assert excinfo.value.problems
        assert "appears 2 times" in str(excinfo.value)


def test_document_defaults(make_node):
    ctx = DocumentContext(root=make_node("root", "container"))
    assert ctx.selected_id is None
    assert ctx.device == "desktop"
    assert ctx.is_preview is False
    assert ctx.node_ids() == ["root"]
