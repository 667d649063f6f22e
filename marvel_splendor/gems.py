"""Gem colors, gem counts, and the arithmetic over them."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Final, Iterable, Mapping

__all__ = [
    "GemColor",
    "COLORS",
    "ColoredGemCounts",
    "GemCounts",
    "ZERO_COLORED",
    "ZERO_GEMS",
    "colored_gem_counts",
    "add_colored_gem_counts",
    "subtract_colored_gem_counts",
    "gems_needed_to_buy",
    "total_colored_gems",
    "add_gem_counts",
    "subtract_gem_counts",
    "total_gems",
    "colored_part",
]


class GemColor(str, Enum):
    """The five gem colors; wild gems are not a color."""

    PURPLE = "purple"
    RED = "red"
    ORANGE = "orange"
    BLUE = "blue"
    YELLOW = "yellow"


COLORS: Final[tuple[GemColor, ...]] = tuple(GemColor)


@dataclass(frozen=True, slots=True)
class ColoredGemCounts:
    """Non-negative count for each of the five gem colors."""

    purple: int = 0
    red: int = 0
    orange: int = 0
    blue: int = 0
    yellow: int = 0

    def __post_init__(self) -> None:
        for item in fields(self):
            if getattr(self, item.name) < 0:
                raise ValueError(f"gem count for {item.name} must be non-negative")

    def __getitem__(self, color: GemColor) -> int:
        return getattr(self, GemColor(color).value)

    def items(self) -> Iterable[tuple[GemColor, int]]:
        """Yield ``(color, count)`` pairs in color order."""

        return ((color, self[color]) for color in COLORS)

    def nonzero_colors(self) -> tuple[GemColor, ...]:
        return tuple(color for color, count in self.items() if count > 0)


@dataclass(frozen=True, slots=True)
class GemCounts(ColoredGemCounts):
    """Colored gem counts plus the wild (universal) count."""

    wild: int = 0


ZERO_COLORED: Final[ColoredGemCounts] = ColoredGemCounts()
ZERO_GEMS: Final[GemCounts] = GemCounts()


def colored_gem_counts(counts: Mapping[GemColor, int] | None = None, **by_name: int) -> ColoredGemCounts:
    """Build a ``ColoredGemCounts`` from a color mapping and/or keyword counts."""

    values = {color.value: 0 for color in COLORS}
    for color, count in (counts or {}).items():
        values[GemColor(color).value] += count
    for name, count in by_name.items():
        values[GemColor(name).value] += count
    return ColoredGemCounts(**values)


def colored_part(counts: ColoredGemCounts) -> ColoredGemCounts:
    """Drop the wild count, if any."""

    return ColoredGemCounts(*(counts[color] for color in COLORS))


def add_colored_gem_counts(a: ColoredGemCounts, b: ColoredGemCounts) -> ColoredGemCounts:
    return ColoredGemCounts(*(a[color] + b[color] for color in COLORS))


def subtract_colored_gem_counts(a: ColoredGemCounts, b: ColoredGemCounts) -> ColoredGemCounts:
    """Per-color ``a - b`` floored at zero."""

    return ColoredGemCounts(*(max(0, a[color] - b[color]) for color in COLORS))


def gems_needed_to_buy(cost: ColoredGemCounts, player_gems: ColoredGemCounts) -> ColoredGemCounts:
    """Per-color shortfall of ``player_gems`` against ``cost``."""

    return subtract_colored_gem_counts(cost, player_gems)


def total_colored_gems(counts: ColoredGemCounts) -> int:
    return sum(counts[color] for color in COLORS)


def add_gem_counts(a: GemCounts, b: ColoredGemCounts, wild: int = 0) -> GemCounts:
    """Add colored counts (and optionally wild gems) to a full ``GemCounts``."""

    b_wild = b.wild if isinstance(b, GemCounts) else 0
    return GemCounts(*(a[color] + b[color] for color in COLORS), wild=a.wild + b_wild + wild)


def subtract_gem_counts(a: GemCounts, b: ColoredGemCounts, wild: int = 0) -> GemCounts:
    """Per-field ``a - b`` floored at zero, keeping the wild count."""

    b_wild = b.wild if isinstance(b, GemCounts) else 0
    return GemCounts(
        *(max(0, a[color] - b[color]) for color in COLORS),
        wild=max(0, a.wild - b_wild - wild),
    )


def total_gems(counts: GemCounts) -> int:
    return total_colored_gems(counts) + counts.wild
