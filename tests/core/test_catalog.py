import pytest

from aether_builder.config import ConfigManager
from aether_builder.core.catalog import KIND_SCHEMAS, BlockTemplate, NodeTemplate, TemplateCatalog
from aether_builder.core.models import ElementKind


def test_every_kind_has_a_schema():
    assert set(KIND_SCHEMAS) == {k.value for k in ElementKind}


def test_packaged_blocks_are_loaded(catalog):
    ids = [b.id for b in catalog.blocks]
    assert ids == [
        "hero-simple",
        "two-columns",
        "feature-card",
        "profile-card",
        "contact-form",
        "alert-banner",
    ]


def test_blocks_by_category_keeps_order(catalog):
    grouped = catalog.blocks_by_category()
    assert list(grouped) == ["Sections", "Cards", "Forms", "Feedback"]
    assert [b.id for b in grouped["Cards"]] == ["feature-card", "profile-card"]


def test_get_block(catalog):
    block = catalog.get_block("contact-form")
    assert block.label == "Contact Form"
    assert block.elements.kind == "container"
    select = [c for c in block.elements.children if c.kind == "select"][0]
    assert select.properties["options"] == ["Sales", "Support", "Other"]
    assert catalog.get_block("does-not-exist") is None


def test_defaults_for_button(catalog):
    properties, style = catalog.defaults_for("button")
    assert properties == {"content": "Button"}
    assert style["backgroundColor"] == "#000000"
    assert style["padding"] == "10px 20px"


def test_defaults_are_fresh_copies(catalog):
    properties, _ = catalog.defaults_for("select")
    properties["options"].append("Injected")
    again, _ = catalog.defaults_for("select")
    assert again["options"] == ["Option 1", "Option 2"]


def test_defaults_for_kind_without_entry():
    empty = TemplateCatalog()
    assert empty.defaults_for("divider") == ({}, {})


def test_duplicate_block_ids_keep_first():
    first = NodeTemplate.from_mapping({"kind": "alert"})
    catalog = TemplateCatalog(blocks=[
        BlockTemplate("x", "A", "First", first),
        BlockTemplate("x", "B", "Second", first),
    ])
    assert [b.label for b in catalog.blocks] == ["First"]


def test_malformed_user_blocks_are_skipped(isolated_config):
    (isolated_config / "blocks.yml").write_text(
        "blocks:\n"
        "  - id: good\n"
        "    elements:\n"
        "      kind: alert\n"
        "  - id: bad-kind\n"
        "    elements:\n"
        "      kind: marquee\n"
        "  - id: no-elements\n"
        "  - just-a-string\n",
        encoding="utf-8",
    )
    config = ConfigManager()
    config.reload()
    catalog = TemplateCatalog.from_config(config)
    assert [b.id for b in catalog.blocks] == ["good"]
    assert catalog.get_block("good").category == "Blocks"


def test_user_defaults_for_unknown_kind_ignored(isolated_config):
    (isolated_config / "element_defaults.yml").write_text(
        "kinds:\n"
        "  marquee:\n"
        "    properties: {content: nope}\n"
        "  badge:\n"
        "    properties: {content: Hot}\n",
        encoding="utf-8",
    )
    config = ConfigManager()
    config.reload()
    catalog = TemplateCatalog.from_config(config)
    assert catalog.defaults_for("badge") == ({"content": "Hot"}, {})
    assert catalog.defaults_for("marquee") == ({}, {})


class TestNodeTemplate:

    def test_nested_parse(self):
        template = NodeTemplate.from_mapping({
            "kind": "card",
            "children": [{"kind": "h3", "properties": {"content": "Title"}}],
        })
        assert template.kind == "card"
        assert template.children[0].properties == {"content": "Title"}
        assert template.name is None

    def test_enum_kind(self):
        assert NodeTemplate.from_mapping({"kind": ElementKind.BADGE}).kind == "badge"

    @pytest.mark.parametrize(
        "data",
        [
            "not a mapping",
            {"kind": "marquee"},
            {"name": "no kind"},
            {"kind": "text", "style": ["not", "a", "map"]},
            {"kind": "card", "children": [{"kind": "bogus"}]},
        ],
    )
    def test_malformed(self, data):
        with pytest.raises(ValueError):
            NodeTemplate.from_mapping(data)


def test_unknown_properties():
    assert TemplateCatalog.unknown_properties("link", ["content", "href", "target"]) == ["target"]
    assert TemplateCatalog.unknown_properties("container", ["content"]) == ["content"]
    assert TemplateCatalog.unknown_properties("image", ["src", "alt"]) == []
