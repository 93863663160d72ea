import pytest

from aether_builder.core.utils import (
    camel_to_kebab,
    default_name_for_kind,
    format_style_value,
    generate_node_id,
)


class TestGenerateNodeId:

    def test_prefix(self):
        assert generate_node_id().startswith("node-")

    def test_unique(self):
        ids = {generate_node_id() for _ in range(500)}
        assert len(ids) == 500


class TestDefaultNameForKind:

    @pytest.mark.parametrize(
        "kind, expected",
        [
            ("button", "Button"),
            ("h1", "H1"),
            ("grid-row", "Grid row"),
            ("grid-col", "Grid col"),
            ("paragraph", "Paragraph"),
        ],
    )
    def test_names(self, kind, expected):
        assert default_name_for_kind(kind) == expected

    def test_empty(self):
        assert default_name_for_kind("") == ""


class TestCamelToKebab:

    def test_simple_keys(self):
        assert camel_to_kebab("backgroundColor") == "background-color"
        assert camel_to_kebab("borderTopLeftRadius") == "border-top-left-radius"
        assert camel_to_kebab("margin") == "margin"

    def test_vendor_prefix_keeps_leading_dash(self):
        assert camel_to_kebab("WebkitTransform") == "-webkit-transform"


class TestFormatStyleValue:

    def test_strings_unchanged(self):
        assert format_style_value("10px 20px") == "10px 20px"

    def test_numbers(self):
        assert format_style_value(3) == "3"
        assert format_style_value(2.0) == "2"
        assert format_style_value(0.5) == "0.5"

    def test_booleans(self):
        assert format_style_value(True) == "true"
        assert format_style_value(False) == "false"
