"""
Objectprint rendering engine.

Renders an arbitrary object graph into indented, line-oriented text (tabs shown as spaces):

    Person 1
        name = Alice
        friends = list 1
            [
            Person 2
                name = Bob
                friends = null
            ]

Composite objects and collections start with a `<TypeName> <n>` header where n is a
per-type, 1-based occurrence number. A value met again within the same call renders
as `<TypeName> <n>` of its first occurrence instead of being expanded, which also
stops recursion on self-referential graphs.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import logging

from dataclasses import dataclass, replace as dataclasses_replace
from typing import Any, Self

# Local ----------------------------------------------------------------------------------------------------------------
from .culture import format_final
from .formatters import fmt_type, fmt_value, trim_text
from .members import Member, MemberKind, dynamic_members, members_of
from .registry import PrintingRegistry
from .utils import class_name

logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass
class PrintOptions:
    """
    Layout options of the rendered text.

    Attributes:
        indent: Indentation unit, repeated once per nesting level.
        newline: Line terminator appended to every emitted line.
        separator: Text between a member name and its rendered value.
        null: Token rendered for None.
        fully_qualified_names: Use module.Class in headers and back-references.
        include_properties: Render public properties as members.
        include_dynamic_attrs: Render public instance attributes not declared on the class,
                               after the declared members.

    Examples:
        >>> opts = PrintOptions.compact()
        >>> opts.indent
        '  '
        >>> opts.merge(null="None").null
        'None'
    """
    indent: str = "\t"
    newline: str = "\n"
    separator: str = " = "
    null: str = "null"

    fully_qualified_names: bool = False
    include_properties: bool = True
    include_dynamic_attrs: bool = True

    def __post_init__(self) -> None:
        for name in ("indent", "newline", "separator", "null"):
            val = getattr(self, name)
            if not isinstance(val, str):
                raise TypeError(f"PrintOptions.{name} must be a str, but got {fmt_type(val)}")
        if not self.newline:
            raise ValueError(f"PrintOptions.newline must be non-empty, but got {fmt_value(self.newline)}")

    @classmethod
    def compact(cls) -> Self:
        """Two-space indentation."""
        return cls(indent="  ")

    @classmethod
    def verbose(cls) -> Self:
        """Module-qualified type names for non-builtin types."""
        return cls(fully_qualified_names=True)

    def merge(self, **kwargs) -> Self:
        """Return a copy with the given attributes replaced."""
        return dataclasses_replace(self, **kwargs)


@dataclass(eq=False)
class MappingItem:
    """Key-value pair of a mapping, rendered as a composite element."""
    key: Any
    value: Any


class VisitedCache:
    """
    Instances rendered so far within one render call, grouped by runtime type.

    Leaf values are matched by equality, composite objects and collections by
    identity. Positions are 1-based and follow first-visit order per type.
    """

    def __init__(self) -> None:
        self._seen: dict[type, list[Any]] = {}

    def position(self, value: Any, by_value: bool) -> int | None:
        """Position of a previously added entry matching value, None if not seen."""
        seen = self._seen.setdefault(type(value), [])
        for i, entry in enumerate(seen, start=1):
            if entry is value or (by_value and entry == value):
                return i
        return None

    def add(self, value: Any) -> int:
        """Append value to the entries of its type and return its position."""
        seen = self._seen.setdefault(type(value), [])
        seen.append(value)
        return len(seen)

    def __len__(self) -> int:
        return sum(len(v) for v in self._seen.values())


class ObjectPrinter:
    """
    Render objects to text according to a PrintingRegistry and PrintOptions.

    The printer holds configuration only: every print_to_string() call allocates its
    own VisitedCache, so one printer can serve independent and concurrent calls as
    long as its registry is not modified meanwhile.

    Processing order per value:
        1. None -> null token
        2. Repeated instance -> `<TypeName> <n>` back-reference
        3. Type-scoped custom renderer (root value and collection elements)
        4. Final types -> leaf text, locale-formatted when a culture is registered
        5. Collections -> header, bracketed elements
        6. Other objects -> header, one line per non-excluded member

    Errors raised by member access, custom renderers or formatting propagate and
    abort the call.

    Examples:
        >>> @dataclass
        ... class Person:
        ...     name: str
        ...     age: int
        >>> ObjectPrinter().print_to_string(Person("Alice", 30))
        'Person 1\\n\\tname = Alice\\n\\tage = 30\\n'
    """

    def __init__(self, registry: PrintingRegistry | None = None, options: PrintOptions | None = None) -> None:
        if not isinstance(registry, (PrintingRegistry, type(None))):
            raise TypeError(f"registry must be a PrintingRegistry, but got {fmt_type(registry)}")
        if not isinstance(options, (PrintOptions, type(None))):
            raise TypeError(f"options must be a PrintOptions instance, but got {fmt_type(options)}")
        self.registry = registry or PrintingRegistry()
        self.options = options or PrintOptions()

    def print_to_string(self, obj: Any) -> str:
        """Render obj and everything reachable from it."""
        logger.debug("Rendering %s", fmt_type(obj))
        render = _RenderPass(self.registry, self.options)
        text = render.visit(obj, 0, type_renderer=True)
        logger.debug("Rendered %s: %d instances, %d chars", fmt_type(obj), len(render.cache), len(text))
        return text


# Private Classes ------------------------------------------------------------------------------------------------------

class _RenderPass:
    """State of a single top-level render call."""

    def __init__(self, registry: PrintingRegistry, options: PrintOptions) -> None:
        self.registry = registry
        self.opt = options
        self.cache = VisitedCache()

    def visit(self, value: Any, depth: int, type_renderer: bool = False) -> str:
        opt = self.opt
        if value is None:
            return opt.null + opt.newline

        typ = type(value)
        is_final = self.registry.is_final(typ)

        seen_at = self.cache.position(value, by_value=is_final)
        if seen_at is not None:
            return self._header(typ, seen_at)
        position = self.cache.add(value)

        if type_renderer and (renderer := self.registry.get_renderer(typ)):
            return self._terminated(renderer(value))

        if is_final:
            return format_final(value, self.registry.get_culture(typ), opt.newline)

        if _is_collection(value):
            return self._header(typ, position) + self._collection(value, depth)

        return self._header(typ, position) + self._composite(value, depth)

    def _header(self, typ: type, position: int) -> str:
        name = class_name(typ, fully_qualified=self.opt.fully_qualified_names)
        return f"{name} {position}{self.opt.newline}"

    def _collection(self, collection: abc.Collection, depth: int) -> str:
        pad = self.opt.indent * (depth + 1)
        nl = self.opt.newline
        parts = [pad + "[" + nl]
        for element in _elements(collection):
            parts.append(pad + self.visit(element, depth + 1, type_renderer=True))
        parts.append(pad + "]" + nl)
        return "".join(parts)

    def _composite(self, obj: Any, depth: int) -> str:
        members = list(members_of(type(obj), include_properties=self.opt.include_properties))
        if self.opt.include_dynamic_attrs:
            members.extend(dynamic_members(obj, members))

        parts = []
        for member in members:
            if self.registry.is_excluded(member):
                continue
            if member.declared_type is not None and self.registry.is_excluded(member.declared_type):
                continue
            if member.kind is MemberKind.SLOT and not hasattr(obj, member.name):
                # Unassigned slot
                continue
            value = member.get(obj)
            if member.declared_type is None and self.registry.is_excluded(type(value)):
                continue
            parts.append(self._member(member, value, depth))
        return "".join(parts)

    def _member(self, member: Member, value: Any, depth: int) -> str:
        value_type = member.value_type(value)
        renderer = self.registry.get_renderer(member) or self.registry.get_renderer(value_type)
        if renderer is not None:
            text = self._terminated(renderer(value))
        else:
            text = self.visit(value, depth + 1)

        max_length = self.registry.get_max_length(member)
        if max_length is not None and isinstance(value_type, type) and issubclass(value_type, str):
            text = trim_text(text, max_length, self.opt.newline)

        return f"{self.opt.indent * (depth + 1)}{member.name}{self.opt.separator}{text}"

    def _terminated(self, text: Any) -> str:
        """Custom renderer output with the line terminator ensured."""
        if not isinstance(text, str):
            raise TypeError(f"custom renderer must return str, but got {fmt_value(text)}")
        return text if text.endswith(self.opt.newline) else text + self.opt.newline


# Private Methods ------------------------------------------------------------------------------------------------------

def _is_collection(value: Any) -> bool:
    """Sized iterable containers, namedtuples excluded (rendered by their fields)."""
    if isinstance(value, tuple) and hasattr(type(value), "_fields"):
        return False
    return isinstance(value, abc.Collection)


def _elements(collection: abc.Collection) -> abc.Iterator[Any]:
    if isinstance(collection, abc.Mapping):
        for key, value in collection.items():
            yield MappingItem(key, value)
    else:
        yield from collection
