"""
Locale-aware formatting of leaf values.

A value is locale-formattable when the same logical content may produce different
text depending on a locale: numbers, dates and times, and any object implementing
the LocaleFormattable protocol. Locales are babel Locale objects; formatting uses
the general (pattern-free) representation of each kind of value.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import datetime as dt

from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

# Third-party ----------------------------------------------------------------------------------------------------------
from babel import Locale, UnknownLocaleError
from babel.dates import format_date, format_datetime, format_time
from babel.numbers import format_decimal

# Local ----------------------------------------------------------------------------------------------------------------
from .formatters import fmt_type, fmt_value


# Classes --------------------------------------------------------------------------------------------------------------

@runtime_checkable
class LocaleFormattable(Protocol):
    """Objects that render themselves for a given locale."""

    def format_locale(self, locale: Locale) -> str: ...


# Methods --------------------------------------------------------------------------------------------------------------

def is_locale_formattable_type(typ: type) -> bool:
    """
    Check whether instances of typ can be formatted with a locale.

    bool is an int subclass but has no locale-dependent text, so it is rejected.
    """
    if not isinstance(typ, type) or issubclass(typ, bool):
        return False
    if issubclass(typ, (int, float, Decimal, dt.date, dt.time)):
        return True
    return callable(getattr(typ, "format_locale", None))


def is_locale_formattable(value: Any) -> bool:
    return is_locale_formattable_type(type(value))


def parse_locale(locale: Locale | str) -> Locale:
    """
    Return a babel Locale from a Locale or an identifier such as "de_DE" or "en-US".

    Raises:
        TypeError: If locale is neither a Locale nor a str.
        ValueError: If the identifier is not a known locale.
    """
    if isinstance(locale, Locale):
        return locale
    if not isinstance(locale, str):
        raise TypeError(f"locale must be a babel Locale or str, but got {fmt_type(locale)}")
    try:
        return Locale.parse(locale, sep="-" if "-" in locale else "_")
    except (UnknownLocaleError, ValueError) as e:
        raise ValueError(f"unknown locale {fmt_value(locale)}") from e


def format_with_locale(value: Any, locale: Locale) -> str:
    """
    Format a locale-formattable value in the general format of locale.

    Numbers keep all their digits and use no digit grouping, so that only the
    locale's decimal symbol differs from str(). Datetimes, dates and times use
    the locale's medium pattern.

    Raises:
        TypeError: If value is not locale-formattable.

    Examples:
        >>> format_with_locale(1234.5, Locale.parse("de_DE"))
        '1234,5'
    """
    if isinstance(value, bool):
        raise TypeError(f"value must be locale-formattable, but got {fmt_type(value)}")
    if isinstance(value, LocaleFormattable):
        return value.format_locale(locale)
    if isinstance(value, (int, float, Decimal)):
        return format_decimal(value, locale=locale, decimal_quantization=False, group_separator=False)
    if isinstance(value, dt.datetime):
        return format_datetime(value, format="medium", locale=locale)
    if isinstance(value, dt.date):
        return format_date(value, format="medium", locale=locale)
    if isinstance(value, dt.time):
        return format_time(value, format="medium", locale=locale)
    raise TypeError(f"value must be locale-formattable, but got {fmt_type(value)}")


def format_final(value: Any, culture: Locale | None = None, newline: str = "\n") -> str:
    """
    Render a leaf value followed by the line terminator.

    The culture is used only when one is given and the value is locale-formattable;
    otherwise the value's str() is used.
    """
    if culture is not None and is_locale_formattable(value):
        return format_with_locale(value, culture) + newline
    return f"{value}{newline}"
