"""
Substitution tests - escaping, key literals and marker resolution

Tests the helpers the loop driver uses on each iteration's HTML.
"""

import pytest

from pseudoscss.lib.escape import html_escape, scalar_render
from pseudoscss.lib.substitution import key_unquote, mapValue_get, substitutions_resolve
from pseudoscss.lib.errors import UndefinedReferenceError, ValueTypeError


class TestEscape:
    """Test HTML escaping"""

    def test_reserved_characters(self):
        assert html_escape('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"

    def test_single_quote_untouched(self):
        assert html_escape("it's") == "it's"

    def test_markers_untouched(self):
        assert html_escape("#{map.get($p, 'k')}") == "#{map.get($p, 'k')}"

    def test_scalars(self):
        assert scalar_render(3) == "3"
        assert scalar_render(1.5) == "1.5"
        assert scalar_render(True) == "true"
        assert scalar_render("x") == "x"

    def test_whole_number_floats_drop_fraction(self):
        assert scalar_render(1.0) == "1"
        assert scalar_render(1e3) == "1000"
        assert scalar_render(-0.0) == "0"
        assert scalar_render(2.5) == "2.5"

    def test_special_floats(self):
        assert scalar_render(float("inf")) == "Infinity"
        assert scalar_render(float("-inf")) == "-Infinity"
        assert scalar_render(float("nan")) == "NaN"

    @pytest.mark.parametrize("value", [None, [1], {"a": 1}])
    def test_non_scalars_rejected(self, value):
        with pytest.raises(ValueTypeError):
            scalar_render(value)


class TestKeyUnquote:
    """Test single-quoted key literal decoding"""

    def test_plain(self):
        assert key_unquote("name") == "name"

    def test_escaped_single_quote(self):
        assert key_unquote("it\\'s") == "it's"

    def test_double_quotes(self):
        assert key_unquote('say "hi"') == 'say "hi"'

    def test_json_escapes(self):
        assert key_unquote("tab\\there") == "tab\there"

    def test_invalid_escape(self):
        with pytest.raises(ValueTypeError, match="Invalid key literal"):
            key_unquote("bad\\x")


class TestMapValueGet:
    """Test keyed lookups against bound values"""

    def test_lookup(self):
        assert mapValue_get({"$p": {"k": "v"}}, "$p", "k") == "v"

    def test_unbound(self):
        with pytest.raises(UndefinedReferenceError, match=r"\$p not defined"):
            mapValue_get({}, "$p", "k")

    def test_missing_key(self):
        with pytest.raises(UndefinedReferenceError, match="'k' not in map"):
            mapValue_get({"$p": {}}, "$p", "k")

    def test_not_a_map(self):
        with pytest.raises(ValueTypeError, match="not a map"):
            mapValue_get({"$p": [1, 2]}, "$p", "k")

    def test_errors_are_standard_exceptions(self):
        """Callers outside the compiler can catch the builtin categories"""
        with pytest.raises(LookupError):
            mapValue_get({}, "$p", "k")
        with pytest.raises(TypeError):
            mapValue_get({"$p": 1}, "$p", "k")


class TestSubstitutionsResolve:
    """Test marker replacement in rendered HTML"""

    def test_variable(self):
        assert substitutions_resolve("<b>#{$name}</b>", {"$name": "A&B"}) == "<b>A&amp;B</b>"

    def test_map_get(self):
        variables = {"$p": {"first name": "Ann"}}
        assert substitutions_resolve("#{map.get($p, 'first name')}!", variables) == "Ann!"

    def test_several_markers(self):
        assert substitutions_resolve("#{$a}-#{$b}", {"$a": 1, "$b": 2}) == "1-2"

    def test_text_without_markers(self):
        assert substitutions_resolve("<p>$a #{}</p>", {}) == "<p>$a #{}</p>"

    def test_unbound_marker(self):
        with pytest.raises(UndefinedReferenceError):
            substitutions_resolve("#{$missing}", {})

    def test_substituted_value_not_rescanned(self):
        assert substitutions_resolve("#{$a}", {"$a": "#{$b}"}) == "#{$b}"

    def test_resolved_spans_copied_through(self):
        """Ranges already resolved by a nested loop are not scanned again"""
        text = "#{$a}|cost #{$price}|#{$a}"
        assert substitutions_resolve(text, {"$a": "x"}, [(6, 20)]) == "x|cost #{$price}|x"
