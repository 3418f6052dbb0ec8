"""Nested diagnostic context (NDC) carried alongside log events."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_stack: ContextVar[tuple[str, ...]] = ContextVar("serialog_ndc", default=())


class ContextStack:
    """Immutable snapshot of the diagnostic context messages, outermost first."""

    __slots__ = ("_items",)

    def __init__(self, items: tuple[str, ...] | list[str] = ()) -> None:
        self._items = tuple(items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ContextStack):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"ContextStack({list(self._items)!r})"

    def __str__(self) -> str:
        return " ".join(self._items)


def push(message: str) -> None:
    """Push a message onto the current context's stack."""

    _stack.set(_stack.get() + (str(message),))


def pop() -> str | None:
    """Pop the innermost message, returning None when the stack is empty."""

    items = _stack.get()
    if not items:
        return None
    _stack.set(items[:-1])
    return items[-1]


def clear() -> None:
    _stack.set(())


def depth() -> int:
    return len(_stack.get())


def current() -> ContextStack:
    """Snapshot the current stack."""

    return ContextStack(_stack.get())


@contextmanager
def nested(message: str) -> Iterator[ContextStack]:
    """Push ``message`` for the duration of the block."""

    token = _stack.set(_stack.get() + (str(message),))
    try:
        yield current()
    finally:
        _stack.reset(token)


__all__ = ["ContextStack", "clear", "current", "depth", "nested", "pop", "push"]
