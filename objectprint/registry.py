"""
Printing rules registry.

Four independent lookup tables read by the rendering engine: exclusions, custom
renderers, cultures and max lengths, plus the set of final (leaf) types. Rules are
keyed by Member handles and/or types. Registration validates its input right away
and the last registration for a key wins. Reads never mutate the registry.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import datetime as dt
import enum
import logging
import pathlib
import uuid

from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Self, TypeVar

# Third-party ----------------------------------------------------------------------------------------------------------
from babel import Locale

# Local ----------------------------------------------------------------------------------------------------------------
from .culture import is_locale_formattable_type, parse_locale
from .formatters import fmt_type, fmt_value
from .members import Member

logger = logging.getLogger(__name__)

Renderer = Callable[[Any], str]
RuleKey = Member | type

V = TypeVar("V")

FINAL_TYPES: tuple[type, ...] = (
    str,
    bool,
    int,
    float,
    complex,
    Decimal,
    Fraction,
    bytes,
    bytearray,
    dt.date,  # datetime is a date subclass
    dt.time,
    dt.timedelta,
    dt.tzinfo,
    uuid.UUID,
    enum.Enum,
    pathlib.PurePath,
    range,
    type,
)


# Classes --------------------------------------------------------------------------------------------------------------

class PrintingRegistry:
    """
    Lookup tables consulted by the rendering engine.

    Type-keyed lookups resolve the exact type first, then the nearest ancestor in the
    type's MRO, so a rule registered for a base class applies to its subclasses.

    Examples:
        >>> registry = (
        ...     PrintingRegistry()
        ...     .exclude(uuid.UUID)
        ...     .add_renderer(float, lambda x: f"{x:.2f}")
        ...     .set_culture(float, "de_DE")
        ... )
        >>> registry.is_excluded(uuid.UUID)
        True
    """

    def __init__(self) -> None:
        self._excluded_members: set[Member] = set()
        self._excluded_types: set[type] = set()
        self._member_renderers: dict[Member, Renderer] = {}
        self._type_renderers: dict[type, Renderer] = {}
        self._cultures: dict[type, Locale] = {}
        self._max_lengths: dict[Member, int] = {}
        self._final_types: tuple[type, ...] = FINAL_TYPES

    # Write side -------------------------------------

    def exclude(self, key: RuleKey) -> Self:
        """
        Mark a member or a whole type as not rendered.

        Raises:
            TypeError: If key is neither a Member nor a type.
        """
        _validate_key(key)
        if isinstance(key, Member):
            self._excluded_members.add(key)
        else:
            self._excluded_types.add(key)
        return self

    def add_renderer(self, key: RuleKey, renderer: Renderer) -> Self:
        """
        Register a custom renderer for a member or a type.

        The renderer receives the value and returns its text; it replaces the
        engine for that value entirely. Member renderers take priority over type
        renderers.

        Raises:
            TypeError: If key is neither a Member nor a type, or renderer is not callable.
        """
        _validate_key(key)
        if not callable(renderer):
            raise TypeError(f"renderer must be callable, but got {fmt_type(renderer)}")
        table = self._member_renderers if isinstance(key, Member) else self._type_renderers
        _upsert(table, key, renderer, "renderer")
        return self

    def set_culture(self, typ: type, locale: Locale | str) -> Self:
        """
        Register the locale used to format values of a locale-formattable type.

        Args:
            typ: Locale-formattable type (numbers, dates and times, LocaleFormattable).
            locale: babel Locale or a locale identifier like "de_DE" or "en-US".

        Raises:
            TypeError: If typ is not a type or is not locale-formattable.
            ValueError: If locale is not a known locale identifier.
        """
        if not isinstance(typ, type):
            raise TypeError(f"culture key must be a type, but got {fmt_type(typ)}")
        if not is_locale_formattable_type(typ):
            raise TypeError(f"culture requires a locale-formattable type, but got {fmt_type(typ)}")
        _upsert(self._cultures, typ, parse_locale(locale), "culture")
        return self

    def set_max_length(self, member: Member, max_length: int) -> Self:
        """
        Register the maximum rendered length of a text member.

        Raises:
            TypeError: If member is not a Member, its declared type is not str,
                       or max_length is not an int.
            ValueError: If max_length is negative.
        """
        if not isinstance(member, Member):
            raise TypeError(f"max length key must be a Member, but got {fmt_type(member)}")
        if member.declared_type is not None and not member.is_text:
            raise TypeError(f"max length requires a str member, but {member} is declared as "
                            f"{fmt_type(member.declared_type)}")
        if isinstance(max_length, bool) or not isinstance(max_length, int):
            raise TypeError(f"max_length must be an int, but got {fmt_type(max_length)}")
        if max_length < 0:
            raise ValueError(f"max_length must be >= 0, but got {fmt_value(max_length)}")
        _upsert(self._max_lengths, member, max_length, "max length")
        return self

    def add_final_type(self, typ: type) -> Self:
        """
        Treat instances of typ (and its subclasses) as leaves rendered via str().

        Raises:
            TypeError: If typ is not a type.
        """
        if not isinstance(typ, type):
            raise TypeError(f"final type must be a type, but got {fmt_type(typ)}")
        if typ not in self._final_types:
            self._final_types = self._final_types + (typ,)
        return self

    # Read side --------------------------------------

    def is_excluded(self, key: RuleKey) -> bool:
        """Whether the member or the type (or one of its bases) is excluded."""
        if isinstance(key, Member):
            return key in self._excluded_members
        return any(base in self._excluded_types for base in _mro(key))

    def get_renderer(self, key: RuleKey) -> Renderer | None:
        """Custom renderer registered for the member, or for the type or its nearest base."""
        if isinstance(key, Member):
            return self._member_renderers.get(key)
        return _lookup_mro(self._type_renderers, key)

    def get_culture(self, typ: type) -> Locale | None:
        """Locale registered for typ or its nearest base."""
        return _lookup_mro(self._cultures, typ)

    def get_max_length(self, member: Member) -> int | None:
        return self._max_lengths.get(member)

    def is_final(self, typ: type) -> bool:
        return issubclass(typ, self._final_types)

    @property
    def final_types(self) -> tuple[type, ...]:
        return self._final_types


# Private Methods ------------------------------------------------------------------------------------------------------

def _validate_key(key: Any) -> None:
    if not isinstance(key, (Member, type)):
        raise TypeError(f"rule key must be a Member or a type, but got {fmt_type(key)}")


def _upsert(table: dict[Any, V], key: Any, value: V, rule: str) -> None:
    if key in table:
        logger.debug("Overriding %s registered for %s", rule, key)
    table[key] = value


def _mro(typ: type) -> tuple[type, ...]:
    return getattr(typ, "__mro__", (typ,))


def _lookup_mro(table: dict[type, V], typ: type) -> V | None:
    """Exact type match first, then the nearest ancestor via MRO."""
    if typ in table:
        return table[typ]
    for base in _mro(typ)[1:]:
        if base in table:
            return table[base]
    return None
