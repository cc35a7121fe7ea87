"""
Formatting helpers for exception messages and text trimming.

fmt_type() and fmt_value() build the short type/value tokens used in the
package's exception messages. They never raise on a broken __repr__.
trim_text() cuts rendered member text to a registered maximum length.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any, Literal

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import class_name

# Classes --------------------------------------------------------------------------------------------------------------

Style = Literal["ascii", "equal", "unicode-angle"]


# Methods --------------------------------------------------------------------------------------------------------------

def fmt_type(obj: Any, *, style: Style = "ascii", fully_qualified: bool = False) -> str:
    """Format type information of a type or an instance for exception messages.

    Examples:
        >>> fmt_type(42)
        '<int>'
        >>> fmt_type(int, style="unicode-angle")
        '⟨int⟩'
    """
    return _fmt_type_value(class_name(obj, fully_qualified=fully_qualified), style=style)


def fmt_value(obj: Any, *, style: Style = "ascii", max_repr: int = 80) -> str:
    """
    Format a single value as a type-value pair for exception messages.

    Strings are shown with quotes so that empty and blank values stay visible.
    Reprs longer than max_repr are cut and end with an ellipsis.

    Examples:
        >>> fmt_value(42)
        '<int: 42>'
        >>> fmt_value("abc", style="equal")
        "str='abc'"
    """
    repr_ = _safe_repr(obj)
    if style == "ascii":
        repr_ = repr_.replace(">", "\\>")
    ellipsis = "..." if style == "ascii" else "…"
    if max_repr > 0 and len(repr_) > max_repr:
        repr_ = repr_[:max_repr] + ellipsis
    return _fmt_type_value(type(obj).__name__, repr_, style=style)


def trim_text(text: str, max_length: int, newline: str = "\n") -> str:
    """
    Cut text to at most max_length characters, keeping a trailing line terminator.

    The terminator is not counted against max_length and is restored after
    the cut. Text already within the limit is returned unchanged, short text
    is never padded, and max_length=0 leaves only the terminator.

    Args:
        text: Rendered text, optionally ending with newline.
        max_length: Non-negative number of characters to keep.
        newline: Line terminator to preserve.

    Returns:
        The trimmed text.

    Raises:
        TypeError: If max_length is not an int.
        ValueError: If max_length is negative.

    Examples:
        >>> trim_text("Alice\\n", 3)
        'Ali\\n'
        >>> trim_text("Bob", 10)
        'Bob'
    """
    if isinstance(max_length, bool) or not isinstance(max_length, int):
        raise TypeError(f"max_length must be an int, but got {fmt_type(max_length)}")
    if max_length < 0:
        raise ValueError(f"max_length must be >= 0, but got {fmt_value(max_length)}")

    body, terminator = text, ""
    if newline and text.endswith(newline):
        body, terminator = text[:-len(newline)], newline

    if len(body) <= max_length:
        return text
    return body[:max_length] + terminator


# Private Methods ------------------------------------------------------------------------------------------------------

def _fmt_type_value(type_name: str, value_repr: str | None = None, *, style: Style = "ascii") -> str:
    """Combine a type name and a repr into a single display token according to style."""
    if style == "unicode-angle":
        return f"⟨{type_name}⟩" if value_repr is None else f"⟨{type_name}: {value_repr}⟩"
    if style == "equal":
        return f"{type_name}" if value_repr is None else f"{type_name}={value_repr}"
    return f"<{type_name}>" if value_repr is None else f"<{type_name}: {value_repr}>"


def _safe_repr(obj: Any) -> str:
    """repr() that reports a broken __repr__ instead of raising"""
    try:
        return repr(obj)
    except Exception as e:
        return f"<{type(obj).__name__} object (repr failed: {type(e).__name__})>"
