"""
Fluent printing configuration.

PrintingConfig is the caller-facing surface that fills a PrintingRegistry and renders
objects of an owner type with it:

    >>> printer = (
    ...     PrintingConfig(Person)
    ...     .excluding(uuid.UUID)
    ...     .excluding(lambda p: p.age)
    ...     .printing(float).using_culture("de_DE")
    ...     .printing(lambda p: p.name).trimmed_to_length(10)
    ...     .using(int, lambda i: f"{i:#x}")
    ... )
    >>> text = printer.print_to_string(person)

Member selectors are member names ("age"), Member handles, or single attribute
lambdas (lambda p: p.age) resolved against the owner type. Every registration is
validated immediately.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any, Callable, Generic, Self, TypeVar

# Third-party ----------------------------------------------------------------------------------------------------------
from babel import Locale

# Local ----------------------------------------------------------------------------------------------------------------
from .formatters import fmt_type
from .members import Member, resolve_member
from .printer import ObjectPrinter, PrintOptions
from .registry import PrintingRegistry, Renderer
from .utils import class_name

T = TypeVar("T")

Selector = type | Member | str | Callable[[Any], Any]


# Classes --------------------------------------------------------------------------------------------------------------

class PrintingConfig(Generic[T]):
    """
    Chainable builder of printing rules for objects of type owner.

    Args:
        owner: Type of the objects rendered; required for name and lambda member selectors.
        options: Layout options, PrintOptions() if None.
        registry: Registry to fill, a new PrintingRegistry if None.

    Raises:
        TypeError: If owner is neither a type nor None.
    """

    def __init__(self,
                 owner: type[T] | None = None,
                 *,
                 options: PrintOptions | None = None,
                 registry: PrintingRegistry | None = None,
                 ) -> None:
        if not isinstance(owner, (type, type(None))):
            raise TypeError(f"owner must be a type or None, but got {fmt_type(owner)}")
        self.owner = owner
        self.options = options or PrintOptions()
        self.registry = registry or PrintingRegistry()

    def __repr__(self) -> str:
        owner = class_name(self.owner) if self.owner is not None else None
        return f"{class_name(self)}(owner={owner}, options={self.options!r})"

    # Registration -----------------------------------

    def excluding(self, target: Selector) -> Self:
        """Skip a member, or every member declared with the given type."""
        self.registry.exclude(self._key(target))
        return self

    def printing(self, target: Selector) -> "PropertyPrintingConfig[T]":
        """Start a rule for a type or a member; finish it with using(), using_culture() or trimmed_to_length()."""
        return PropertyPrintingConfig(self, self._key(target))

    def using(self, target: Selector, renderer: Renderer) -> Self:
        """Render a type or a member with a custom function returning its text."""
        self.registry.add_renderer(self._key(target), renderer)
        return self

    def using_culture(self, typ: type, locale: Locale | str) -> Self:
        """Format values of a locale-formattable type with locale."""
        self.registry.set_culture(typ, locale)
        return self

    def trimmed_to_length(self, target: Selector, max_length: int) -> Self:
        """Cut the rendered text of a str member to max_length characters."""
        key = self._key(target)
        if not isinstance(key, Member):
            raise TypeError(f"trimmed_to_length() requires a member selector, but got {fmt_type(target)}")
        self.registry.set_max_length(key, max_length)
        return self

    def as_final(self, typ: type) -> Self:
        """Render instances of typ as leaves via str() instead of expanding their members."""
        self.registry.add_final_type(typ)
        return self

    def with_options(self, **kwargs) -> Self:
        """Replace layout options, see PrintOptions."""
        self.options = self.options.merge(**kwargs)
        return self

    # Rendering --------------------------------------

    def print_to_string(self, obj: T) -> str:
        """
        Render obj with the registered rules.

        Raises:
            TypeError: If obj is not None and not an instance of the owner type.
        """
        if self.owner is not None and obj is not None and not isinstance(obj, self.owner):
            raise TypeError(f"{class_name(self)} for {fmt_type(self.owner)} cannot print {fmt_type(obj)}")
        return ObjectPrinter(self.registry, self.options).print_to_string(obj)

    # Private ----------------------------------------

    def _key(self, target: Selector) -> Member | type:
        if isinstance(target, (type, Member)):
            return target
        if self.owner is None:
            raise TypeError(f"member selector {target!r} requires an owner type, "
                            f"create PrintingConfig(owner) or pass a Member")
        return resolve_member(self.owner, target)


class PropertyPrintingConfig(Generic[T]):
    """
    Pending rule for one type or member, created by PrintingConfig.printing().

    Each finishing method registers the rule and returns the parent PrintingConfig.
    """

    def __init__(self, parent: PrintingConfig[T], key: Member | type) -> None:
        self.parent = parent
        self.key = key

    def using(self, renderer: Renderer) -> PrintingConfig[T]:
        self.parent.registry.add_renderer(self.key, renderer)
        return self.parent

    def using_culture(self, locale: Locale | str) -> PrintingConfig[T]:
        if not isinstance(self.key, type):
            raise TypeError(f"using_culture() requires a type, but got member {self.key}")
        self.parent.registry.set_culture(self.key, locale)
        return self.parent

    def trimmed_to_length(self, max_length: int) -> PrintingConfig[T]:
        if not isinstance(self.key, Member):
            raise TypeError(f"trimmed_to_length() requires a member, but got {fmt_type(self.key)}")
        self.parent.registry.set_max_length(self.key, max_length)
        return self.parent


# Methods --------------------------------------------------------------------------------------------------------------

def print_to_string(obj: Any, configure: Callable[[PrintingConfig], PrintingConfig | None] | None = None) -> str:
    """
    Render obj with default rules, or with rules added by configure.

    configure receives a PrintingConfig owned by type(obj) and may either chain on it
    and return it, or register rules and return None.

    Examples:
        >>> print_to_string(["a", "b"])
        'list 1\\n\\t[\\n\\ta\\n\\tb\\n\\t]\\n'
        >>> print_to_string(person, lambda c: c.excluding("age"))  # doctest: +SKIP
    """
    config = PrintingConfig(type(obj) if obj is not None else None)
    if configure is not None:
        configured = configure(config)
        if configured is not None:
            if not isinstance(configured, PrintingConfig):
                raise TypeError(f"configure must return a PrintingConfig or None, but got {fmt_type(configured)}")
            config = configured
    return config.print_to_string(obj)
