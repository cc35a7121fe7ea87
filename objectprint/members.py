"""
Member handles and member enumeration for rendered types.

A Member identifies "attribute `name` declared on class `owner`" and is the key
used by every member-scoped rule of the printing registry. Types are identified
by the class object itself.

Declared members of a class are enumerated once and cached, in this order of
precedence:
    - `__print_members__` class attribute: explicit names or Member handles
    - dataclass fields
    - namedtuple fields
    - annotated public class attributes, base classes first, then `__slots__`
      names without annotations
followed by public properties when requested.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import functools
import inspect
import types
import typing

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum, unique
from typing import Any, Callable, ClassVar, Iterable, Union, get_args, get_origin

# Local ----------------------------------------------------------------------------------------------------------------
from .formatters import fmt_type, fmt_value
from .utils import class_name


# Classes --------------------------------------------------------------------------------------------------------------

@unique
class MemberKind(str, Enum):
    """
    Origin of a member:
        - "field": declared attribute (annotation, dataclass or namedtuple field)
        - "slot": name listed in `__slots__` without an annotation
        - "property": public property of the class
        - "dynamic": public instance attribute not declared on the class
    """
    FIELD = "field"
    SLOT = "slot"
    PROPERTY = "property"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class Member:
    """
    Handle of a member declared on a type.

    Two handles are equal iff they have the same owner and name, so a handle built
    by hand compares equal to the one produced by members_of().

    Attributes:
        owner: Class declaring the member (the base class for inherited members).
        name: Attribute name.
        declared_type: Declared type with Optional unwrapped, or None if undeclared.
        kind: Where the member comes from, see MemberKind.
    """
    owner: type
    name: str
    declared_type: Any = field(default=None, compare=False)
    kind: MemberKind = field(default=MemberKind.FIELD, compare=False)

    def __post_init__(self):
        if not isinstance(self.owner, type):
            raise TypeError(f"Member owner must be a type, but got {fmt_type(self.owner)}")
        if not isinstance(self.name, str) or not self.name.isidentifier():
            raise ValueError(f"Member name must be an identifier, but got {fmt_value(self.name)}")

    def __str__(self) -> str:
        return f"{class_name(self.owner)}.{self.name}"

    @property
    def is_text(self) -> bool:
        """Whether the declared type is text (str or a str subclass)."""
        return isinstance(self.declared_type, type) and issubclass(self.declared_type, str)

    def get(self, obj: Any) -> Any:
        """Read the member value from obj. Errors raised by the attribute propagate."""
        return getattr(obj, self.name)

    def value_type(self, value: Any) -> type:
        """Type used for type-scoped rules: the declared type, or the runtime type if undeclared."""
        return self.declared_type if self.declared_type is not None else type(value)


# Methods --------------------------------------------------------------------------------------------------------------

def declared_type(annotation: Any) -> type | None:
    """
    Reduce a type annotation to the class used for rule lookups.

    Optional[X] and X | None reduce to X, parametrized generics reduce to their
    origin class (list[int] -> list). Any, TypeVars, unresolved forward references
    and unions of several classes reduce to None.

    Examples:
        >>> declared_type(str | None)
        <class 'str'>
        >>> declared_type(dict[str, int])
        <class 'dict'>
        >>> declared_type(int | str) is None
        True
    """
    if annotation is None:
        return type(None)
    if annotation is Any:
        # Any is a class since Python 3.11
        return None

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        return declared_type(args[0]) if len(args) == 1 else None
    if origin is not None:
        return origin if isinstance(origin, type) else None
    if isinstance(annotation, type):
        return annotation
    return None


@functools.lru_cache(maxsize=1024)
def members_of(cls: type, *, include_properties: bool = True) -> tuple[Member, ...]:
    """
    Return the declared members of cls in declaration order.

    Args:
        cls: Class to inspect.
        include_properties: Append public properties after the declared attributes.
                            Ignored when cls defines `__print_members__`.

    Returns:
        Tuple of Member handles; empty for classes without declared members.

    Raises:
        TypeError: If cls is not a type or `__print_members__` holds invalid entries.
        ValueError: If a `__print_members__` name is not an identifier.
    """
    if not isinstance(cls, type):
        raise TypeError(f"cls must be a type, but got {fmt_type(cls)}")

    hints = _type_hints(cls)

    explicit = getattr(cls, "__print_members__", None)
    if explicit is not None:
        return tuple(_explicit_member(cls, entry, hints) for entry in explicit)

    if is_dataclass(cls):
        names = [f.name for f in fields(cls)]
    elif _is_namedtuple(cls):
        names = list(cls._fields)
    else:
        names = _annotated_names(cls)

    members = [
        Member(_declaring_class(cls, name), name, _hinted_type(hints, name), MemberKind.FIELD)
        for name in names
        if not name.startswith("_")
    ]

    if not is_dataclass(cls) and not _is_namedtuple(cls):
        seen = {m.name for m in members}
        members.extend(
            Member(_declaring_class(cls, name), name, None, MemberKind.SLOT)
            for name in _slot_names(cls)
            if not name.startswith("_") and name not in seen
        )

    if include_properties:
        seen = {m.name for m in members}
        members.extend(p for p in _properties(cls) if p.name not in seen)

    return tuple(members)


def dynamic_members(obj: Any, known: Iterable[Member] = ()) -> list[Member]:
    """
    Return public instance attributes of obj that are not among the known members.

    Attributes keep the insertion order of the instance __dict__; objects without
    __dict__ have no dynamic members.
    """
    known_names = {m.name for m in known}
    try:
        attrs = vars(obj)
    except TypeError:
        return []
    return [
        Member(type(obj), name, None, MemberKind.DYNAMIC)
        for name in attrs
        if name.isidentifier() and not name.startswith("_") and name not in known_names
    ]


def resolve_member(owner: type, selector: "str | Member | Callable[[Any], Any]") -> Member:
    """
    Resolve a member selector against owner into its declared Member handle.

    Accepted selectors:
        - Member: returned unchanged, no validation against owner
        - str: attribute name declared on owner
        - callable: single attribute access lambda, e.g. `lambda p: p.name`,
          evaluated against a recording proxy

    Names not declared on owner resolve to a DYNAMIC member when instances of owner
    can carry arbitrary attributes (a plain class with a __dict__), the same handle
    dynamic_members() produces for them. Classes with a fixed member set raise instead:
    dataclasses, namedtuples, slotted classes and classes defining `__print_members__`.

    Raises:
        AttributeError: If the member is not declared on a class with a fixed member set.
        ValueError: If a callable selector touches no attribute, a nested one, or calls it.
        TypeError: If selector has an unsupported type.

    Examples:
        >>> @dataclass
        ... class Person:
        ...     name: str
        >>> resolve_member(Person, lambda p: p.name) == Member(Person, "name")
        True
    """
    if isinstance(selector, Member):
        return selector
    if isinstance(selector, str):
        name = selector
    elif callable(selector) and not isinstance(selector, type):
        name = _selected_name(owner, selector)
    else:
        raise TypeError(f"member selector must be a str, Member or callable, but got {fmt_type(selector)}")

    for member in members_of(owner):
        if member.name == name:
            return member
    if _accepts_dynamic_members(owner) and not name.startswith("_"):
        return Member(owner, name, None, MemberKind.DYNAMIC)
    raise AttributeError(f"{class_name(owner)} has no declared member {name!r}")


# Private Methods ------------------------------------------------------------------------------------------------------

class _MemberRecorder:
    """Proxy recording attribute access made by a member selector lambda."""

    def __init__(self, path: list[str]) -> None:
        object.__setattr__(self, "_path", path)

    def __getattr__(self, name: str) -> "_MemberRecorder":
        self._path.append(name)
        return self

    def __call__(self, *args, **kwargs):
        raise ValueError(f"nested member selectors are not supported, got {'.'.join(self._path) + '()'!r}")


def _selected_name(owner: type, selector: Callable[[Any], Any]) -> str:
    path: list[str] = []
    selector(_MemberRecorder(path))
    if not path:
        raise ValueError(f"member selector must access an attribute of {class_name(owner)}")
    if len(path) > 1:
        raise ValueError(f"nested member selectors are not supported, got {'.'.join(path)!r}")
    return path[0]


def _type_hints(cls: type) -> dict[str, Any]:
    """Resolved annotations of cls including bases, raw annotations if forward references do not resolve."""
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            hints.update(_own_annotations(klass))
        return hints


def _annotated_names(cls: type) -> list[str]:
    """Names of annotated attributes, base classes first, ClassVars skipped."""
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, annotation in _own_annotations(klass).items():
            if name in names or _is_classvar(annotation):
                continue
            names.append(name)
    return names


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _declaring_class(cls: type, name: str) -> type:
    """
    Base-most class in the MRO declaring name via annotations, namedtuple fields or __slots__,
    so an inherited member has one handle for every subclass.
    """
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        if (name in _own_annotations(klass)
                or name in vars(klass).get("_fields", ())
                or name in _own_slots(klass)):
            return klass
    return cls


def _own_slots(klass: type) -> tuple[str, ...]:
    slots = vars(klass).get("__slots__", ())
    if isinstance(slots, str):
        return (slots,)
    return tuple(s for s in slots if s not in ("__dict__", "__weakref__"))


def _slot_names(cls: type) -> list[str]:
    """Names listed in __slots__ across the MRO, base classes first."""
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        for name in _own_slots(klass):
            if name not in names:
                names.append(name)
    return names


def _accepts_dynamic_members(cls: type) -> bool:
    """Whether instances of cls may hold undeclared attributes that get rendered."""
    if getattr(cls, "__print_members__", None) is not None or is_dataclass(cls) or _is_namedtuple(cls):
        return False
    return any("__dict__" in vars(klass) for klass in cls.__mro__)


def _properties(cls: type) -> list[Member]:
    """Public properties in definition order, base classes first."""
    ordered: list[str] = []
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, property) and not name.startswith("_") and name not in ordered:
                ordered.append(name)

    members = []
    for name in ordered:
        owner = next(k for k in cls.__mro__ if name in vars(k))
        prop = vars(owner)[name]
        if not isinstance(prop, property):
            # Overridden by a plain attribute in a subclass
            continue
        members.append(Member(owner, name, _property_type(prop), MemberKind.PROPERTY))
    return members


def _property_type(prop: property) -> type | None:
    if prop.fget is None:
        return None
    try:
        hints = typing.get_type_hints(prop.fget)
    except (NameError, TypeError):
        hints = _own_annotations(prop.fget)
    return declared_type(hints.get("return")) if "return" in hints else None


def _explicit_member(cls: type, entry: Any, hints: dict[str, Any]) -> Member:
    if isinstance(entry, Member):
        return entry
    if not isinstance(entry, str):
        raise TypeError(f"__print_members__ entries must be str or Member, but got {fmt_type(entry)}")
    if entry in hints:
        return Member(_declaring_class(cls, entry), entry, declared_type(hints[entry]), MemberKind.FIELD)
    for prop in _properties(cls):
        if prop.name == entry:
            return prop
    # Instance attribute assigned outside the class body
    return Member(cls, entry, None, MemberKind.FIELD)


def _is_namedtuple(cls: type) -> bool:
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def _own_annotations(obj: Any) -> dict[str, Any]:
    """Annotations defined directly on obj, forward references left unresolved where evaluation fails."""
    try:
        return inspect.get_annotations(obj)
    except NameError:
        # Deferred annotations (Python 3.14+) naming undefined classes
        import annotationlib
        return annotationlib.get_annotations(obj, format=annotationlib.Format.FORWARDREF)


def _hinted_type(hints: dict[str, Any], name: str) -> type | None:
    return declared_type(hints[name]) if name in hints else None
