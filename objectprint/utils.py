"""
Objectprint Utilities shared across the package.

Contains functions used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any


# Methods --------------------------------------------------------------------------------------------------------------


def class_name(
    obj: Any,
    fully_qualified: bool = False,
    fully_qualified_builtins: bool = False,
) -> str:
    """
    Get the class name of an object or a class.

    Returns class name whether given an instance or the class itself.
    For example, both `class_name(10)` and `class_name(int)` return 'int'.

    Parameters:
        obj (Any): An object or a class.
        fully_qualified (bool): If true, returns the module-qualified name for user objects or classes.
        fully_qualified_builtins (bool): If true, returns the module-qualified name for builtin objects or classes.

    Returns:
        str: The class name.

    Examples:
        >>> class_name(10)
        'int'
        >>> class_name(10, fully_qualified_builtins=True)
        'builtins.int'
        >>> class C: ...
        >>> class_name(C())
        'C'
    """
    cls = obj if isinstance(obj, type) else type(obj)
    name = cls.__name__

    if cls.__module__ == "builtins":
        qualify = fully_qualified_builtins
    else:
        qualify = fully_qualified

    return f"{cls.__module__}.{name}" if qualify else name
