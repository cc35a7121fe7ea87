#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any, Callable

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest
from babel import Locale

# Local ----------------------------------------------------------------------------------------------------------------
from objectprint.printer import ObjectPrinter, PrintOptions
from objectprint.registry import PrintingRegistry


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def registry() -> PrintingRegistry:
    """Empty printing registry."""
    return PrintingRegistry()


@pytest.fixture
def render(registry: PrintingRegistry) -> Callable[..., str]:
    """Render an object with the registry fixture and PrintOptions built from keyword arguments."""

    def _render(obj: Any, **options) -> str:
        return ObjectPrinter(registry, PrintOptions(**options)).print_to_string(obj)

    return _render


@pytest.fixture
def de_locale() -> Locale:
    return Locale.parse("de_DE")
