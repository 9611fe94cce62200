"""Tests for binding path parsing and writing."""

import pytest
from test_utils import embedded_element

from blocks_mcp.engine import Block, BindingPathError, get_path, parse_path, set_path


class TestParsePath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("properties.text", ["properties", "text"]),
            ("component.options.items[0].label", ["component", "options", "items", 0, "label"]),
            (
                "responsiveStyles.large['background-color']",
                ["responsiveStyles", "large", "background-color"],
            ),
            ('properties["a.b"]', ["properties", "a.b"]),
            ("properties.grid[1][2]", ["properties", "grid", 1, 2]),
            ("tagName", ["tagName"]),
        ],
    )
    def test_valid_paths(self, path: str, expected: list) -> None:
        assert parse_path(path) == expected

    @pytest.mark.parametrize(
        "path",
        [
            "",
            ".properties",
            "properties.",
            "properties..text",
            "[0].x",
            "properties.[0]",
            "a[b",
            "properties.items[-1]",
        ],
    )
    def test_invalid_paths(self, path: str) -> None:
        with pytest.raises(BindingPathError):
            parse_path(path)


class TestSetPath:
    def test_overwrites_scalar(self) -> None:
        block = Block(properties={"text": "old"})
        set_path(block, "properties.text", "new")
        assert block.properties == {"text": "new"}

    def test_creates_intermediate_dicts(self) -> None:
        block = Block()
        set_path(block, "properties.style.color", "red")
        assert block.properties == {"style": {"color": "red"}}

    def test_creates_intermediate_lists(self) -> None:
        block = Block()
        set_path(block, "properties.items[2].label", "c")
        assert block.properties == {"items": [None, None, {"label": "c"}]}

    def test_creates_missing_component(self) -> None:
        block = Block()
        set_path(block, "component.options.text", "hi")
        assert block.component == {"options": {"text": "hi"}}

    def test_alias_head(self) -> None:
        block = Block(tag_name="div")
        set_path(block, "tagName", "section")
        assert block.tag_name == "section"

    def test_extra_attribute(self) -> None:
        block = Block()
        set_path(block, "responsiveStyles.large.color", "blue")
        assert block.model_extra == {"responsiveStyles": {"large": {"color": "blue"}}}

    @pytest.mark.parametrize("path", ["children", "children[0].id", "meta.selected"])
    def test_shared_region_rejected(self, path: str) -> None:
        block = Block(children=[Block(id="c")], meta={"selected": False})
        with pytest.raises(BindingPathError):
            set_path(block, path, "x")
        assert block.meta == {"selected": False}
        assert block.children[0].id == "c"

    def test_traversing_scalar_rejected(self) -> None:
        block = Block(properties={"text": "hello"})
        with pytest.raises(BindingPathError) as exc_info:
            set_path(block, "properties.text.size", 12)
        assert "str" in exc_info.value.reason
        assert block.properties == {"text": "hello"}

    def test_string_key_on_list_rejected(self) -> None:
        block = Block(properties={"items": []})
        with pytest.raises(BindingPathError):
            set_path(block, "properties.items.first", 1)

    def test_negative_index_rejected(self) -> None:
        block = Block(properties={"items": [1]})
        with pytest.raises(BindingPathError):
            set_path(block, "properties.items[-1]", 2)

    @pytest.mark.parametrize(
        "path",
        ["properties.items[0].label", "properties.items.first", "properties.new.items[-1]"],
    )
    def test_rejected_write_leaves_block_unchanged(self, path: str) -> None:
        block = Block(properties={"items": ["a"]})
        with pytest.raises(BindingPathError):
            set_path(block, path, "x")
        assert block.properties == {"items": ["a"]}

    def test_missing_chain_built_in_one_write(self) -> None:
        block = Block(properties={"items": [{"label": "a"}]})
        set_path(block, "properties.items[0].tags[1].name", "b")
        assert block.properties == {"items": [{"label": "a", "tags": [None, {"name": "b"}]}]}

    def test_embedded_element_rejected(self) -> None:
        inner = embedded_element("inner", text="keep")
        block = Block(properties={"slot": inner})
        with pytest.raises(BindingPathError):
            set_path(block, "properties.slot.properties.text", "changed")
        assert inner["properties"] == {"text": "keep"}


class TestGetPath:
    def test_reads_nested_values(self) -> None:
        block = Block(properties={"items": [{"label": "a"}]})
        assert get_path(block, "properties.items[0].label") == "a"

    def test_missing_returns_default(self) -> None:
        block = Block()
        assert get_path(block, "properties.nope.deeper", "fallback") == "fallback"
        assert get_path(block, "component.options", None) is None
