"""
@each tests - loops over YAML data and nested values

Tests loop sources (import("...") and map.get(...)), destructuring,
interpolation inside loop bodies, nesting, and loop errors.
"""

import pytest

from pseudoscss.lib.interpreter import source_interpret
from pseudoscss.lib.errors import (
    DestructureError,
    ResourceError,
    StructureError,
    UndefinedReferenceError,
    ValueTypeError,
)


@pytest.fixture
def site(tmp_path):
    """Write data files into a temporary site and compile sources against it"""

    class Site:
        def data(self, name, text):
            (tmp_path / name).write_text(text, encoding="utf-8")

        def compile(self, source):
            return source_interpret(source, tmp_path / "index.scss")

        def html(self, source):
            return self.compile(source).html

    return Site()


class TestListLoops:
    """Test loops over lists"""

    def test_scalars(self, site):
        site.data("numbers.yaml", "[1, 2, 3]")
        source = '@each $n in import("numbers.yaml") { span { content: "#{$n}"; } }'
        assert site.html(source) == "<span>1</span><span>2</span><span>3</span>"

    def test_bare_content_in_body(self, site):
        site.data("data.yaml", "[1, 2, 3]")
        assert site.html('@each $x in import("data.yaml") { content: "#{$x}"; }') == "123"

    def test_values_escaped(self, site):
        site.data("words.yaml", '- "<b>"\n- "a&b"\n')
        source = '@each $w in import("words.yaml") { p { content: "#{$w}"; } }'
        assert site.html(source) == "<p>&lt;b&gt;</p><p>a&amp;b</p>"

    def test_interpolated_class(self, site):
        site.data("numbers.yaml", "[1, 2]")
        source = '@each $n in import("numbers.yaml") { li.item-#{$n}; }'
        assert site.html(source) == '<li class="item-1"><li class="item-2">'

    def test_interpolated_attribute(self, site):
        site.data("pages.yaml", "[home, about]")
        source = '@each $p in import("pages.yaml") { a[href="/#{$p}.html"] {} }'
        assert site.html(source) == '<a href="/home.html"></a><a href="/about.html"></a>'

    def test_loop_inside_element(self, site):
        site.data("numbers.yaml", "[1, 2]")
        source = 'ul { @each $n in import("numbers.yaml") { li { content: "#{$n}"; } } }'
        assert site.html(source) == "<ul><li>1</li><li>2</li></ul>"

    def test_empty_list(self, site):
        site.data("empty.yaml", "[]")
        source = 'ul { @each $n in import("empty.yaml") { li; } }'
        assert site.html(source) == "<ul></ul>"

    def test_elements_after_loop(self, site):
        site.data("numbers.yaml", "[1]")
        source = '@each $n in import("numbers.yaml") { i; } b;'
        assert site.html(source) == "<i><b>"

    def test_booleans(self, site):
        site.data("flags.yaml", "[true, false]")
        source = '@each $f in import("flags.yaml") { p { content: "#{$f}"; } }'
        assert site.html(source) == "<p>true</p><p>false</p>"

    def test_numbers(self, site):
        """Whole-number floats print without a fraction"""
        site.data("numbers.yaml", "[1.0, 2.50, 1e3, 7]")
        source = '@each $x in import("numbers.yaml") { content: "#{$x},"; }'
        assert site.html(source) == "1,2.5,1000,7,"

    def test_only_true_and_false_are_booleans(self, site):
        site.data("words.yaml", "[yes, no, on, off, True]")
        source = '@each $w in import("words.yaml") { content: "#{$w},"; }'
        assert site.html(source) == "yes,no,on,off,true,"

    def test_dates_and_leading_zeros_kept_as_written(self, site):
        site.data("values.yaml", "[2024-01-01, 010, 0o10, 0x1f]")
        source = '@each $v in import("values.yaml") { content: "#{$v},"; }'
        assert site.html(source) == "2024-01-01,10,8,31,"

    def test_json_data_file(self, site):
        """YAML loading accepts JSON documents"""
        site.data("data.json", '["x", "y"]')
        source = '@each $v in import("data.json") { b { content: "#{$v}"; } }'
        assert site.html(source) == "<b>x</b><b>y</b>"


class TestMappingLoops:
    """Test loops over mappings and keyed access"""

    def test_mapping_iterates_as_pairs(self, site):
        site.data("map.yaml", "a: 1\nb: 2\n")
        source = '@each $k, $v in import("map.yaml") { li { content: "#{$k}=#{$v}"; } }'
        assert site.html(source) == "<li>a=1</li><li>b=2</li>"

    def test_map_get_marker(self, site):
        site.data("people.yaml", "- name: Ann\n  role: admin\n- name: Bob\n  role: user\n")
        source = (
            '@each $p in import("people.yaml") {'
            " li.#{map.get($p, 'role')} { content: \"#{map.get($p, 'name')}\"; }"
            " }"
        )
        assert site.html(source) == '<li class="admin">Ann</li><li class="user">Bob</li>'

    def test_missing_key(self, site):
        site.data("people.yaml", "- name: Ann\n")
        source = "@each $p in import(\"people.yaml\") { p { content: \"#{map.get($p, 'age')}\"; } }"
        with pytest.raises(UndefinedReferenceError, match="age"):
            site.html(source)

    def test_map_get_on_scalar(self, site):
        site.data("numbers.yaml", "[1]")
        source = "@each $n in import(\"numbers.yaml\") { p { content: \"#{map.get($n, 'k')}\"; } }"
        with pytest.raises(ValueTypeError, match="not a map"):
            site.html(source)

    def test_list_value_not_substitutable(self, site):
        site.data("nested.yaml", "- [1, 2]\n")
        source = '@each $n in import("nested.yaml") { p { content: "#{$n}"; } }'
        with pytest.raises(ValueTypeError):
            site.html(source)

    def test_null_value_not_substitutable(self, site):
        site.data("nulls.yaml", "[null]")
        source = '@each $n in import("nulls.yaml") { p { content: "#{$n}"; } }'
        with pytest.raises(ValueTypeError, match="null"):
            site.html(source)


class TestDestructuring:
    """Test several loop variables"""

    def test_pairs(self, site):
        site.data("nav.yaml", "- [Home, /]\n- [About, /about]\n")
        source = (
            '@each $label, $url in import("nav.yaml") {'
            ' a[href="#{$url}"] { content: "#{$label}"; }'
            " }"
        )
        assert site.html(source) == '<a href="/">Home</a><a href="/about">About</a>'

    def test_extra_positions_ignored(self, site):
        site.data("rows.yaml", "- [a, b, c]\n")
        source = '@each $x, $y in import("rows.yaml") { p { content: "#{$x}#{$y}"; } }'
        assert site.html(source) == "<p>ab</p>"

    def test_too_few_positions(self, site):
        site.data("rows.yaml", "- [a, b]\n- [c]\n")
        source = '@each $x, $y in import("rows.yaml") { p; }'
        with pytest.raises(DestructureError, match="only 1"):
            site.html(source)

    def test_non_list_entry(self, site):
        site.data("rows.yaml", "- a\n")
        source = '@each $x, $y in import("rows.yaml") { p; }'
        with pytest.raises(DestructureError, match="non-list"):
            site.html(source)

    def test_destructure_error_is_value_type_error(self, site):
        site.data("rows.yaml", "- a\n")
        with pytest.raises(ValueTypeError):
            site.html('@each $x, $y in import("rows.yaml") { p; }')


class TestNestedLoops:
    """Test loops over values bound by an enclosing loop"""

    def test_groups(self, site):
        site.data(
            "groups.yaml",
            "- name: Fruits\n  items: [Apple, Banana]\n- name: Veg\n  items: [Kale]\n",
        )
        source = """
@each $group in import("groups.yaml") {
  h2 { content: "#{map.get($group, 'name')}"; }
  ul {
    @each $item in map.get($group, 'items') {
      li { content: "#{$item}"; }
    }
  }
}
"""
        assert site.html(source) == (
            "<h2>Fruits</h2><ul><li>Apple</li><li>Banana</li></ul>"
            "<h2>Veg</h2><ul><li>Kale</li></ul>"
        )

    def test_inner_body_sees_outer_binding(self, site):
        site.data("grid.yaml", "- row: r1\n  cells: [a, b]\n")
        source = (
            '@each $r in import("grid.yaml") {'
            " @each $c in map.get($r, 'cells') {"
            " td { content: \"#{map.get($r, 'row')}-#{$c}\"; }"
            " }"
            " }"
        )
        assert site.html(source) == "<td>r1-a</td><td>r1-b</td>"

    def test_map_get_over_mapping(self, site):
        site.data("site.yaml", "- links:\n    home: /\n    blog: /blog\n")
        source = (
            '@each $s in import("site.yaml") {'
            " @each $name, $href in map.get($s, 'links') {"
            ' a[href="#{$href}"] { content: "#{$name}"; }'
            " }"
            " }"
        )
        assert site.html(source) == '<a href="/">home</a><a href="/blog">blog</a>'

    def test_inner_values_not_rescanned(self, site):
        """Marker-like text in data stays as written after the outer loop finishes"""
        site.data("menu.yaml", "- items: ['cost #{$price}']\n")
        source = (
            '@each $m in import("menu.yaml") {'
            " @each $i in map.get($m, 'items') { li { content: \"#{$i}\"; } }"
            " }"
        )
        assert site.html(source) == "<li>cost #{$price}</li>"

    def test_outer_markers_still_resolved_around_inner_loop(self, site):
        site.data("menu.yaml", "- name: Drinks\n  items: ['#{$x}']\n")
        source = (
            '@each $m in import("menu.yaml") {'
            " h2 { content: \"#{map.get($m, 'name')}\"; }"
            " @each $i in map.get($m, 'items') { li { content: \"#{$i}\"; } }"
            " hr.#{map.get($m, 'name')};"
            " }"
        )
        assert site.html(source) == '<h2>Drinks</h2><li>#{$x}</li><hr class="Drinks">'


class TestLoopSourceErrors:
    """Test unusable loop sources"""

    def test_undefined_map(self, site):
        with pytest.raises(UndefinedReferenceError, match=r"\$nope not defined"):
            site.html("@each $x in map.get($nope, 'items') { p; }")

    def test_map_get_on_list(self, site):
        site.data("numbers.yaml", "[[1]]")
        source = "@each $n in import(\"numbers.yaml\") { @each $x in map.get($n, 'k') { p; } }"
        with pytest.raises(ValueTypeError, match="not a map"):
            site.html(source)

    def test_scalar_source(self, site):
        site.data("scalar.yaml", "42\n")
        with pytest.raises(ValueTypeError, match="Cannot loop"):
            site.html('@each $x in import("scalar.yaml") { p; }')

    def test_missing_data_file(self, site):
        with pytest.raises(ResourceError, match="missing.yaml"):
            site.html('@each $x in import("missing.yaml") { p; }')

    def test_invalid_yaml(self, site):
        site.data("broken.yaml", "a: [1, 2\n")
        with pytest.raises(ResourceError, match="Failed to parse"):
            site.html('@each $x in import("broken.yaml") { p; }')

    def test_undefined_variable_in_body(self, site):
        site.data("numbers.yaml", "[1]")
        source = '@each $n in import("numbers.yaml") { p { content: "#{$other}"; } }'
        with pytest.raises(UndefinedReferenceError, match=r"\$other"):
            site.html(source)


class TestLoopStructureErrors:
    """Test malformed @each statements"""

    def test_unbalanced_body(self, site):
        site.data("numbers.yaml", "[1]")
        with pytest.raises(StructureError, match="unbalanced"):
            site.html('@each $n in import("numbers.yaml") { li;')

    def test_no_variables(self, site):
        site.data("numbers.yaml", "[1]")
        with pytest.raises(StructureError, match="at least one variable"):
            site.html('@each in import("numbers.yaml") { li; }')

    def test_missing_loop_source(self, site):
        with pytest.raises(StructureError):
            site.html("@each $n in { li; }")

    def test_each_inside_selector(self, site):
        with pytest.raises(StructureError, match="@each cannot be used inside a context"):
            site.html("div @each $x in map.get($y, 'z') {}")

    def test_body_must_be_a_block(self, site):
        site.data("numbers.yaml", "[1]")
        with pytest.raises(StructureError):
            site.html('@each $n in import("numbers.yaml") li; }')


class TestLoopCss:
    """Test raw CSS inside loop bodies"""

    def test_css_emitted_per_iteration(self, site):
        site.data("numbers.yaml", "[1, 2]")
        output = site.compile('@each $n in import("numbers.yaml") { css { .a { b: c; } } }')
        assert output.html == ""
        assert output.css == ".a{b:c;}.a{b:c;}"

    def test_css_alongside_html(self, site):
        site.data("numbers.yaml", "[1]")
        output = site.compile(
            '@each $n in import("numbers.yaml") { p; css { p { margin: 0; } } }'
        )
        assert output.html == "<p>"
        assert output.css == "p{margin:0;}"
