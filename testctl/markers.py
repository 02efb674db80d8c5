"""
Markers for test bundles.

The extractor reads these decorators from source without importing the
bundle. At runtime they only record themselves on the decorated object so
the bundle stays importable:

    >>> from testctl import markers
    >>>
    >>> @markers.test_fixture
    ... class MathTests:
    ...     @markers.test_case(1, 2)
    ...     @markers.category("Smoke")
    ...     def adds(self, a, b): ...

Markers that take no required argument work bare or called
(``@ignore`` and ``@ignore("flaky")`` are the same marker).
"""

from __future__ import annotations

from typing import Any, Callable

MARKERS_ATTR = "__testctl_markers__"


def _tag(target: Any, kind: str, args: tuple) -> Any:
    tags = list(getattr(target, MARKERS_ATTR, ()))
    tags.insert(0, (kind, args))
    setattr(target, MARKERS_ATTR, tags)
    return target


def _optional_args(kind: str) -> Callable:
    def marker(*args: Any) -> Any:
        if len(args) == 1 and callable(args[0]):
            return _tag(args[0], kind, ())
        return lambda target: _tag(target, kind, args)
    marker.__name__ = kind
    marker.__doc__ = f"Tag a class or method with the ``{kind}`` marker."
    return marker


def _required_args(kind: str) -> Callable:
    def marker(*args: Any) -> Callable:
        if not args:
            raise TypeError(f"{kind}() needs at least one argument")
        return lambda target: _tag(target, kind, args)
    marker.__name__ = kind
    marker.__doc__ = f"Tag a method with the ``{kind}`` marker and its arguments."
    return marker


test_fixture = _optional_args("test_fixture")
test = _optional_args("test")
explicit = _optional_args("explicit")
ignore = _optional_args("ignore")

test_case = _required_args("test_case")
test_case_source = _required_args("test_case_source")
category = _required_args("category")


def markers_of(target: Any) -> list[tuple[str, tuple]]:
    """Markers applied to *target*, outermost first."""
    return list(getattr(target, MARKERS_ATTR, ()))
