"""Tests for filter registration and dispatch.

Validates filter modules, context injection, error wrapping, and the
process-wide registry lifecycle.
"""

from __future__ import annotations

import logging
from types import ModuleType
from typing import Any

import pytest

from liquidcore import (
    Context,
    LiquidArgumentError,
    LiquidEvaluationError,
    UndefinedFilterError,
    liquid_filter,
)
from liquidcore.diagnostics import DiagnosticCode
from liquidcore.runtime.filters import (
    FilterRegistry,
    filter_functions,
    get_shared_registry,
    reset_shared_registry,
    takes_context,
)

# ============================================================================
# FILTER MODULES
# ============================================================================


class TextFilters:
    """Filters grouped in a class namespace."""

    def upcase(value: Any) -> str:  # type: ignore[misc]
        return str(value).upper()

    @staticmethod
    def append(value: Any, suffix: str) -> str:
        return f"{value}{suffix}"

    @liquid_filter(takes_context=True)
    def greet(context: Context, value: Any) -> str:  # type: ignore[misc]
        return f"{context['greeting']}, {value}"

    def explode(value: Any) -> Any:  # type: ignore[misc]
        raise RuntimeError("boom")

    def _helper(value: Any) -> Any:  # type: ignore[misc]
        return value  # pragma: no cover


class MoreFilters:
    """Second namespace, registered later."""

    def downcase(value: Any) -> str:  # type: ignore[misc]
        return str(value).lower()

    def upcase(value: Any) -> str:  # type: ignore[misc]
        return "OVERRIDDEN"


class ChildFilters(TextFilters):
    """Subclass inheriting filters from TextFilters."""

    def append(value: Any, suffix: str) -> str:  # type: ignore[misc]
        return f"{suffix}{value}"


def _make_module(name: str, **functions: Any) -> ModuleType:
    module = ModuleType(name)
    for attr, func in functions.items():
        func.__module__ = name
        setattr(module, attr, func)
    return module


# ============================================================================
# DECORATOR
# ============================================================================


class TestLiquidFilterDecorator:
    """Test @liquid_filter marking."""

    def test_bare_decorator(self) -> None:
        """Bare use marks a filter without context injection."""

        @liquid_filter
        def strip(value: str) -> str:
            return value.strip()

        assert takes_context(strip) is False
        assert strip("  a ") == "a"

    def test_takes_context(self) -> None:
        """takes_context=True marks the filter for injection."""
        assert takes_context(TextFilters.greet) is True

    def test_unmarked_function(self) -> None:
        """Plain functions do not take the context."""
        assert takes_context(TextFilters.upcase) is False


# ============================================================================
# FILTER DISCOVERY
# ============================================================================


class TestFilterFunctions:
    """Test which callables a filter module provides."""

    def test_class_public_callables(self) -> None:
        """Public callables of a class become filters."""
        names = set(filter_functions(TextFilters))
        assert names == {"upcase", "append", "greet", "explode"}

    def test_subclass_overrides_base(self) -> None:
        """Subclass definitions replace inherited ones."""
        found = filter_functions(ChildFilters)
        assert found["append"]("a", "b") == "ba"
        assert "upcase" in found

    def test_module_functions(self) -> None:
        """Functions defined in a module become filters."""

        def shout(value: str) -> str:
            return value.upper() + "!"

        module = _make_module("shout_filters", shout=shout)
        assert filter_functions(module) == {"shout": shout}

    def test_module_skips_imported_functions(self) -> None:
        """Functions defined elsewhere are not filters."""
        module = ModuleType("import_only")
        module.helper = logging.getLogger  # type: ignore[attr-defined]
        assert filter_functions(module) == {}

    def test_module_all_is_authoritative(self) -> None:
        """__all__ selects exactly the exported names."""
        module = ModuleType("exported")
        module.__all__ = ["getLogger"]  # type: ignore[attr-defined]
        module.getLogger = logging.getLogger  # type: ignore[attr-defined]
        module.other = logging.getLevelName  # type: ignore[attr-defined]
        assert set(filter_functions(module)) == {"getLogger"}


# ============================================================================
# CONTEXT REGISTRATION AND INVOCATION
# ============================================================================


class TestRegisterFilters:
    """Test Context.register_filters."""

    def test_invoke_registered_filter(self) -> None:
        """Registered filters are callable by name."""
        context = Context()
        context.register_filters(TextFilters)
        assert context.invoke("upcase", "hi") == "HI"
        assert context.invoke("append", "a", "b") == "ab"

    def test_register_sequence(self) -> None:
        """A list of modules is accepted and None entries are ignored."""
        context = Context()
        context.register_filters([TextFilters, None, MoreFilters])
        assert context.invoke("downcase", "HI") == "hi"

    def test_register_none(self) -> None:
        """register_filters(None) is a no-op."""
        context = Context()
        context.register_filters(None)
        assert len(context.filters) == 0

    def test_later_module_overrides(self) -> None:
        """The last module defining a name wins."""
        context = Context()
        context.register_filters([TextFilters, MoreFilters])
        assert context.invoke("upcase", "hi") == "OVERRIDDEN"

    def test_register_after_invoke(self) -> None:
        """Modules registered after the first call extend the live invoker."""
        context = Context()
        context.register_filters(TextFilters)
        assert context.invoke("upcase", "a") == "A"

        context.register_filters(MoreFilters)
        assert context.invoke("downcase", "A") == "a"
        assert context.invoke("append", "a", "!") == "a!"

    def test_register_module_object(self) -> None:
        """Python modules are valid filter modules."""

        def shout(value: str) -> str:
            return value.upper() + "!"

        context = Context()
        context.register_filters(_make_module("shout_module", shout=shout))
        assert context.invoke("shout", "hey") == "HEY!"

    def test_register_non_module_fails(self) -> None:
        """A value that is not a module raises LiquidArgumentError."""
        context = Context()
        with pytest.raises(LiquidArgumentError) as excinfo:
            context.register_filters(42)
        assert excinfo.value.short_message == "Expected module but got: int"

    def test_invalid_entry_registers_nothing(self) -> None:
        """One invalid entry rejects the whole batch."""
        context = Context()
        with pytest.raises(LiquidArgumentError):
            context.register_filters([TextFilters, "not a module"])
        assert "upcase" not in context.filters
        assert not get_shared_registry().is_known("upcase")

    def test_registration_records_known_names(self) -> None:
        """Context registration feeds the registry's known names."""
        context = Context()
        context.register_filters(TextFilters)
        assert get_shared_registry().is_known("upcase")

    def test_registration_is_per_context(self) -> None:
        """Filters registered on one context are not seen by another."""
        first = Context()
        first.register_filters(TextFilters)
        second = Context()
        with pytest.raises(UndefinedFilterError):
            second.invoke("upcase", "a")


class TestInvoke:
    """Test filter dispatch."""

    def test_undefined_filter(self) -> None:
        """Unknown names raise UndefinedFilterError."""
        context = Context()
        with pytest.raises(UndefinedFilterError) as excinfo:
            context.invoke("nope", "x")
        diagnostic = excinfo.value.diagnostic
        assert diagnostic is not None
        assert diagnostic.code is DiagnosticCode.FILTER_NOT_FOUND
        assert diagnostic.filter_name == "nope"
        assert excinfo.value.short_message == "Undefined filter 'nope'"

    def test_context_injection(self) -> None:
        """Marked filters receive the owning Context first."""
        context = Context({"greeting": "Hello"})
        context.register_filters(TextFilters)
        assert context.invoke("greet", "tobi") == "Hello, tobi"

    def test_type_error_wrapped(self) -> None:
        """A TypeError from bad arguments becomes LiquidEvaluationError."""
        context = Context()
        context.register_filters(TextFilters)
        with pytest.raises(LiquidEvaluationError) as excinfo:
            context.invoke("append", "only-one")
        assert isinstance(excinfo.value.__cause__, TypeError)
        assert excinfo.value.short_message.startswith("append: ")

    def test_value_error_wrapped(self) -> None:
        """A ValueError from the filter becomes LiquidEvaluationError."""

        def to_int(value: str) -> int:
            return int(value)

        context = Context()
        context.register_filters(_make_module("numbers", to_int=to_int))
        with pytest.raises(LiquidEvaluationError) as excinfo:
            context.invoke("to_int", "abc")
        assert isinstance(excinfo.value.__cause__, ValueError)
        assert excinfo.value.diagnostic is not None
        assert excinfo.value.diagnostic.code is DiagnosticCode.FILTER_FAILED

    def test_other_errors_propagate(self) -> None:
        """Exceptions other than TypeError/ValueError are not wrapped."""
        context = Context()
        context.register_filters(TextFilters)
        with pytest.raises(RuntimeError, match="boom"):
            context.invoke("explode", "x")

    def test_wrapped_error_can_be_recorded(self) -> None:
        """Filter failures flow through handle_error like other evaluation errors."""
        context = Context()
        context.register_filters(TextFilters)
        try:
            context.invoke("append", "x")
        except LiquidEvaluationError as e:
            message = context.handle_error(e)
        assert message.startswith("Liquid error: append: ")
        assert len(context.errors) == 1


class TestFilterInvokerIntrospection:
    """Test dict-like access to the invoker."""

    def test_introspection(self) -> None:
        """list_filters, len, in, and iteration agree."""
        context = Context()
        context.register_filters(MoreFilters)
        invoker = context.filters
        assert sorted(invoker.list_filters()) == ["downcase", "upcase"]
        assert len(invoker) == 2
        assert "downcase" in invoker
        assert sorted(invoker) == ["downcase", "upcase"]
        assert invoker.get_filter("missing") is None
        assert repr(invoker) == "FilterInvoker(filters=2)"

    def test_invoker_built_once(self) -> None:
        """The filters property returns the same invoker each time."""
        context = Context()
        assert context.filters is context.filters

    def test_build_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Building the invoker logs at debug level."""
        context = Context()
        context.register_filters(MoreFilters)
        with caplog.at_level(logging.DEBUG, logger="liquidcore.runtime.context"):
            context.filters  # noqa: B018
        assert "Built filter invoker with 2 filter(s)" in caplog.text


# ============================================================================
# REGISTRY LIFECYCLE
# ============================================================================


class TestFilterRegistry:
    """Test global modules and teardown."""

    def test_global_module_reaches_every_context(self) -> None:
        """Global modules are included in invokers built afterwards."""
        registry = FilterRegistry()
        registry.register_global(TextFilters)
        assert Context(filter_registry=registry).invoke("upcase", "a") == "A"
        assert Context(filter_registry=registry).invoke("upcase", "b") == "B"

    def test_context_filters_override_global(self) -> None:
        """Context modules are applied after global ones."""
        registry = FilterRegistry()
        registry.register_global(TextFilters)
        context = Context(filter_registry=registry)
        context.register_filters(MoreFilters)
        assert context.invoke("upcase", "a") == "OVERRIDDEN"

    def test_register_global_once(self) -> None:
        """Registering the same module twice keeps one entry."""
        registry = FilterRegistry()
        registry.register_global(TextFilters)
        registry.register_global(TextFilters)
        assert registry.global_modules == (TextFilters,)

    def test_register_global_rejects_non_module(self) -> None:
        """register_global validates its argument."""
        with pytest.raises(LiquidArgumentError):
            FilterRegistry().register_global(object())

    def test_known_filters(self) -> None:
        """known_filters lists every registered name."""
        registry = FilterRegistry()
        registry.add_known_filter(MoreFilters)
        assert registry.known_filters == frozenset({"downcase", "upcase"})
        assert registry.is_known("downcase")
        assert not registry.is_known("greet")

    def test_reset(self) -> None:
        """reset() forgets modules and names."""
        registry = FilterRegistry()
        registry.register_global(TextFilters)
        registry.reset()
        assert registry.global_modules == ()
        assert registry.known_filters == frozenset()
        assert repr(registry) == "FilterRegistry(global_modules=0, known_filters=0)"

    def test_shared_registry_lifecycle(self) -> None:
        """The shared registry persists until reset_shared_registry()."""
        shared = get_shared_registry()
        assert get_shared_registry() is shared
        shared.register_global(TextFilters)
        assert Context().invoke("upcase", "a") == "A"

        reset_shared_registry()
        assert get_shared_registry() is not shared
        assert shared.global_modules == ()
        with pytest.raises(UndefinedFilterError):
            Context().invoke("upcase", "a")
