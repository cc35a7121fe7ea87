#
# Objectprint - Formatters Tests
#

# Third party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from objectprint.formatters import fmt_type, fmt_value, trim_text


# Classes --------------------------------------------------------------------------------------------------------------

class BrokenRepr:
    def __repr__(self):
        raise RuntimeError("boom")


class Custom:
    pass


# Tests ----------------------------------------------------------------------------------------------------------------

class TestFmtType:

    @pytest.mark.parametrize("obj, style, expected", [
        pytest.param(42, "ascii", "<int>", id="instance-ascii"),
        pytest.param(int, "ascii", "<int>", id="class-ascii"),
        pytest.param("x", "equal", "str", id="equal"),
        pytest.param(1.5, "unicode-angle", "⟨float⟩", id="unicode-angle"),
        pytest.param(None, "ascii", "<NoneType>", id="none"),
    ])
    def test_styles(self, obj, style, expected):
        assert fmt_type(obj, style=style) == expected

    def test_fully_qualified(self):
        assert fmt_type(Custom(), fully_qualified=True) == f"<{Custom.__module__}.Custom>"


class TestFmtValue:

    @pytest.mark.parametrize("obj, style, expected", [
        pytest.param(42, "ascii", "<int: 42>", id="int-ascii"),
        pytest.param("abc", "equal", "str='abc'", id="str-equal"),
        pytest.param("", "ascii", "<str: ''>", id="empty-str"),
        pytest.param([1], "unicode-angle", "⟨list: [1]⟩", id="list-unicode"),
    ])
    def test_styles(self, obj, style, expected):
        assert fmt_value(obj, style=style) == expected

    def test_ascii_escapes_angle_bracket(self):
        assert fmt_value("a>b") == "<str: 'a\\>b'>"

    def test_truncation_ascii(self):
        assert fmt_value("x" * 20, max_repr=5) == "<str: 'xxxx...>"

    def test_truncation_unicode(self):
        assert fmt_value("x" * 20, style="unicode-angle", max_repr=5) == "⟨str: 'xxxx…⟩"

    def test_broken_repr(self):
        out = fmt_value(BrokenRepr())
        assert "repr failed: RuntimeError" in out
        assert out.startswith("<BrokenRepr: ")


class TestTrimText:

    @pytest.mark.parametrize("text, max_length, expected", [
        pytest.param("Alice\n", 3, "Ali\n", id="cut-keeps-newline"),
        pytest.param("Alice", 3, "Ali", id="cut-no-newline"),
        pytest.param("Bob\n", 10, "Bob\n", id="short-unchanged"),
        pytest.param("Bob\n", 3, "Bob\n", id="exact-length"),
        pytest.param("Alice\n", 0, "\n", id="zero"),
        pytest.param("", 5, "", id="empty"),
    ])
    def test_trim(self, text, max_length, expected):
        assert trim_text(text, max_length) == expected

    def test_custom_newline(self):
        assert trim_text("Alice\r\n", 2, newline="\r\n") == "Al\r\n"

    @pytest.mark.parametrize("max_length", [1.5, "3", True, None])
    def test_not_int(self, max_length):
        with pytest.raises(TypeError, match="max_length must be an int"):
            trim_text("abc", max_length)

    def test_negative(self):
        with pytest.raises(ValueError, match=">= 0"):
            trim_text("abc", -1)
