"""Helpers for closed tagged unions."""

from __future__ import annotations

from typing import NoReturn


class Variant:
    """Mixin giving each member of a closed union a ``kind`` tag."""

    __slots__ = ()

    @property
    def kind(self) -> str:
        return type(self).__name__


def assert_never(value: NoReturn) -> NoReturn:
    """Fail loudly when a closed union reaches an unhandled branch."""

    raise AssertionError(f"unhandled variant: {value!r}")


__all__ = ["Variant", "assert_never"]
