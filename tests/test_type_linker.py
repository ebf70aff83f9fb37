"""Tests for type-reference linking and type chips."""

import pytest

from metadb_cli.models import ClassDeclaration, FieldDeclaration, NameIndex
from metadb_cli.type_linker import (
    describe_fields,
    link_type,
    ref_chip,
    split_type_args,
    strip_markup,
    type_chip,
)

FOO_LINK = '<a href="/classes/foo" class="type-link">Foo</a>'
BAR_LINK = '<a href="/classes/bar" class="type-link">Bar</a>'
SPELL_LINK = '<a href="/classes/spelldata" class="type-link">SpellData</a>'


class TestLinkType:
    """Tests for link_type."""

    @pytest.mark.parametrize("value", ["0x0", ""])
    def test_absent_is_empty(self, value, name_index):
        assert link_type(value, name_index) == ""

    def test_known_class_is_linked(self, name_index):
        assert link_type("Foo", name_index) == FOO_LINK

    def test_unknown_name_is_plain_text(self, name_index):
        assert link_type("0xDEADBEEF", name_index) == "0xDEADBEEF"
        assert link_type("Pointer", name_index) == "Pointer"

    def test_primitive_is_never_linked(self, name_index):
        """Test a primitive stays plain even when a same-named class exists."""
        rendered = link_type("I32", name_index)

        assert "href" not in rendered
        assert rendered == '<abbr title="Signed 32-bit integer">I32</abbr>'

    def test_primitive_without_description(self, name_index):
        assert link_type("Link", name_index) == "Link"

    def test_container_parameters(self, name_index):
        assert link_type("List<Foo>", name_index) == f"List&lt;{FOO_LINK}&gt;"

    def test_nested_commas_do_not_split_outer_list(self, name_index):
        rendered = link_type("Map<Map<Foo, Bar>, SpellData>", name_index)

        assert rendered == f"Map&lt;Map&lt;{FOO_LINK}, {BAR_LINK}&gt;, {SPELL_LINK}&gt;"

    def test_unparseable_text_is_escaped(self, name_index):
        assert link_type("Foo<Bar", name_index) == "Foo&lt;Bar"
        assert link_type('a "b"', name_index) == "a &quot;b&quot;"

    def test_split_type_args(self):
        assert split_type_args("A, B<C, D>, E") == ["A", "B<C, D>", "E"]
        assert split_type_args("A") == ["A"]


class TestTypeChip:
    """Tests for type_chip precedence."""

    def test_base_tag_only(self, name_index):
        """Test a field with no aux value and no reference shows only the tag."""
        chip = type_chip("I32", "0x0", "0x0", "0x0", name_index)

        assert chip == '<span class="type-chip"><abbr title="Signed 32-bit integer">I32</abbr></span>'
        assert strip_markup(chip) == "I32"
        assert "href" not in chip

    def test_reference_tag_with_referenced_type(self, name_index):
        chip = type_chip("Embed", "0x0", "0x0", "Foo", name_index)
        assert chip == f'<span class="type-chip">Embed&lt;{FOO_LINK}&gt;</span>'

    def test_map_shows_key_and_reference(self, name_index):
        chip = type_chip("Map", "Hash", "Embed", "SpellData", name_index)

        assert strip_markup(chip) == "Map<Hash, Embed<SpellData>>"
        assert SPELL_LINK in chip

    def test_list_of_pointers(self, name_index):
        chip = type_chip("List2", "0x0", "Pointer", "Foo", name_index)
        assert strip_markup(chip) == "List2<Pointer<Foo>>"

    def test_list_of_classes_ignores_scalar_value_type(self, name_index):
        chip = type_chip("List", "0x0", "Hash", "Foo", name_index)
        assert strip_markup(chip) == "List<Foo>"

    def test_reference_tag_wins_over_value_type(self, name_index):
        """Test only one rendering is produced when several slots are set."""
        chip = type_chip("Link", "0x0", "U32", "Foo", name_index)

        assert strip_markup(chip) == "Link<Foo>"
        assert "U32" not in chip

    def test_referenced_type_alone_is_wrapped_deeper(self, name_index):
        chip = type_chip("0x12345678", "0x0", "Embed", "Foo", name_index)
        assert strip_markup(chip) == "0x12345678<Embed<Foo>>"

    def test_referenced_type_without_value(self, name_index):
        chip = type_chip("Custom", "0x0", "0x0", "Bar", name_index)
        assert chip == f'<span class="type-chip">Custom&lt;{BAR_LINK}&gt;</span>'

    def test_value_type_alone(self, name_index):
        chip = type_chip("List", "0x0", "String", "0x0", name_index)
        assert strip_markup(chip) == "List<String>"

    def test_value_type_skipped_for_generic_tag(self, name_index):
        chip = type_chip("List<Foo>", "0x0", "String", "0x0", name_index)
        assert strip_markup(chip) == "List<Foo>"


class TestRefChip:
    """Tests for ref_chip."""

    def test_known_reference(self, name_index):
        assert ref_chip("Foo", name_index) == '<a href="/classes/foo" class="chip chip-link">Foo</a>'

    def test_unknown_reference(self, name_index):
        assert ref_chip("0xABCDEF01", name_index) == '<span class="chip">0xABCDEF01</span>'


def test_describe_fields(name_index):
    decl = ClassDeclaration(
        "Foo",
        fields=[
            FieldDeclaration("health", "I32"),
            FieldDeclaration("mBar", "Embed", referenced_type="Bar"),
        ],
    )

    rows = describe_fields(decl, name_index)

    assert [r.name for r in rows] == ["health", "mBar"]
    assert rows[0].plain_type == "I32"
    assert rows[0].reference == ""
    assert rows[1].plain_type == "Embed<Bar>"
    assert "chip-link" in rows[1].reference


def test_empty_name_index_links_nothing():
    chip = type_chip("Embed", "0x0", "0x0", "Foo", NameIndex())
    assert "href" not in chip
    assert strip_markup(chip) == "Embed<Foo>"
