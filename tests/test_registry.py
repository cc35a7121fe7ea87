#
# Objectprint - Registry Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import datetime as dt
import logging

from dataclasses import dataclass

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest
from babel import Locale

# Local ----------------------------------------------------------------------------------------------------------------
from objectprint.members import Member
from objectprint.registry import FINAL_TYPES, PrintingRegistry


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass
class Person:
    name: str
    age: int


class Base:
    pass


class Derived(Base):
    pass


class Money:
    def __init__(self, amount: float):
        self.amount = amount

    def format_locale(self, locale: Locale) -> str:
        return f"{self.amount} ({locale})"


NAME = Member(Person, "name", str)
AGE = Member(Person, "age", int)


# Tests ----------------------------------------------------------------------------------------------------------------

class TestExclusions:

    def test_member_and_type(self, registry):
        registry.exclude(NAME).exclude(dt.date)
        assert registry.is_excluded(Member(Person, "name"))
        assert not registry.is_excluded(AGE)
        assert registry.is_excluded(dt.date)
        assert not registry.is_excluded(int)

    def test_writers_return_registry(self, registry):
        assert registry.exclude(int) is registry
        assert registry.add_renderer(int, hex) is registry
        assert registry.set_culture(float, "de_DE") is registry
        assert registry.set_max_length(NAME, 3) is registry
        assert registry.add_final_type(Base) is registry

    def test_subclass_of_excluded_type(self, registry):
        registry.exclude(Base)
        assert registry.is_excluded(Derived)
        assert registry.is_excluded(dt.date) is False

    def test_bool_follows_int(self, registry):
        """bool is an int subclass, so excluding int excludes bool members too."""
        registry.exclude(int)
        assert registry.is_excluded(bool)

    @pytest.mark.parametrize("key", [
        pytest.param("name", id="str"),
        pytest.param(None, id="none"),
        pytest.param(Person("a", 1), id="instance"),
    ])
    def test_invalid_key(self, registry, key):
        with pytest.raises(TypeError, match="Member or a type"):
            registry.exclude(key)


class TestRenderers:

    def test_member_and_type_tables_are_separate(self, registry):
        upper, hexed = str.upper, hex
        registry.add_renderer(NAME, upper).add_renderer(int, hexed)
        assert registry.get_renderer(NAME) is upper
        assert registry.get_renderer(AGE) is None
        assert registry.get_renderer(int) is hexed
        assert registry.get_renderer(str) is None

    def test_nearest_ancestor_wins(self, registry):
        def for_object(x):
            return "object"

        def for_base(x):
            return "base"

        registry.add_renderer(object, for_object).add_renderer(Base, for_base)
        assert registry.get_renderer(Derived) is for_base
        assert registry.get_renderer(int) is for_object

    def test_exact_type_wins(self, registry):
        def for_base(x):
            return "base"

        def for_derived(x):
            return "derived"

        registry.add_renderer(Base, for_base).add_renderer(Derived, for_derived)
        assert registry.get_renderer(Derived) is for_derived

    def test_last_write_wins(self, registry, caplog):
        def first(x):
            return "first"

        def second(x):
            return "second"

        with caplog.at_level(logging.DEBUG, logger="objectprint.registry"):
            registry.add_renderer(int, first).add_renderer(int, second)
        assert registry.get_renderer(int) is second
        assert "Overriding renderer" in caplog.text

    def test_not_callable(self, registry):
        with pytest.raises(TypeError, match="callable"):
            registry.add_renderer(int, "hex")


class TestCultures:

    def test_locale_from_identifier(self, registry):
        registry.set_culture(float, "de_DE")
        assert registry.get_culture(float) == Locale.parse("de_DE")

    def test_locale_object(self, registry, de_locale):
        registry.set_culture(dt.datetime, de_locale)
        assert registry.get_culture(dt.datetime) is de_locale

    def test_subclass_lookup(self, registry, de_locale):
        registry.set_culture(dt.date, de_locale)
        assert registry.get_culture(dt.datetime) is de_locale
        assert registry.get_culture(float) is None

    def test_custom_formattable(self, registry, de_locale):
        registry.set_culture(Money, de_locale)
        assert registry.get_culture(Money) is de_locale

    @pytest.mark.parametrize("typ", [
        pytest.param(str, id="str"),
        pytest.param(bool, id="bool"),
        pytest.param(Person, id="plain_class"),
    ])
    def test_not_formattable(self, registry, typ):
        with pytest.raises(TypeError, match="locale-formattable"):
            registry.set_culture(typ, "de_DE")

    def test_not_a_type(self, registry):
        with pytest.raises(TypeError):
            registry.set_culture(1.5, "de_DE")

    def test_unknown_locale(self, registry):
        with pytest.raises(ValueError, match="unknown locale"):
            registry.set_culture(float, "xx_YY")


class TestMaxLengths:

    def test_set_and_get(self, registry):
        registry.set_max_length(NAME, 5)
        assert registry.get_max_length(Member(Person, "name")) == 5
        assert registry.get_max_length(AGE) is None

    def test_undeclared_member_allowed(self, registry):
        registry.set_max_length(Member(Person, "nickname"), 3)
        assert registry.get_max_length(Member(Person, "nickname")) == 3

    @pytest.mark.parametrize("member, max_length, exc", [
        pytest.param(AGE, 3, TypeError, id="not_text_member"),
        pytest.param(str, 3, TypeError, id="type_key"),
        pytest.param(NAME, 2.5, TypeError, id="float_length"),
        pytest.param(NAME, True, TypeError, id="bool_length"),
        pytest.param(NAME, -1, ValueError, id="negative_length"),
    ])
    def test_invalid(self, registry, member, max_length, exc):
        with pytest.raises(exc):
            registry.set_max_length(member, max_length)

    def test_zero_allowed(self, registry):
        registry.set_max_length(NAME, 0)
        assert registry.get_max_length(NAME) == 0


class TestFinalTypes:

    @pytest.mark.parametrize("typ", [str, int, bool, float, dt.datetime, dt.timedelta])
    def test_defaults(self, registry, typ):
        assert registry.is_final(typ)

    @pytest.mark.parametrize("typ", [list, dict, Person, object])
    def test_not_final(self, registry, typ):
        assert not registry.is_final(typ)

    def test_add_final_type(self, registry):
        registry.add_final_type(Base)
        assert registry.is_final(Derived)
        assert registry.final_types == FINAL_TYPES + (Base,)

    def test_add_final_type_once(self, registry):
        registry.add_final_type(Base).add_final_type(Base)
        assert registry.final_types.count(Base) == 1

    def test_add_final_type_invalid(self, registry):
        with pytest.raises(TypeError):
            registry.add_final_type("Base")
