"""Card and location tile definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from .gems import ColoredGemCounts, GemColor, colored_gem_counts

__all__ = ["Card", "LocationTile", "ALL_LOCATION_TILES"]


@dataclass(frozen=True, slots=True)
class Card:
    """A catalog card. Cards move between zones but never change."""

    name: str
    points: int
    color: GemColor
    cost: ColoredGemCounts = field(default_factory=ColoredGemCounts)
    avenger_count: int = 0
    has_time_stone: bool = False

    def __post_init__(self) -> None:
        if self.points < 0:
            raise ValueError("card points must be non-negative")
        if self.avenger_count < 0:
            raise ValueError("avenger count must be non-negative")
        object.__setattr__(self, "color", GemColor(self.color))


class LocationTile(str, Enum):
    """Location tiles and the card-color threshold each one requires."""

    TRISKELION = "Triskelion"
    HELLS_KITCHEN_NYC = "Hell's Kitchen NYC"
    KNOWHERE = "Knowhere"
    ATLANTIS = "Atlantis"
    WAKANDA = "Wakanda"
    ASGARD = "Asgard"
    AVENGERS_TOWER_NYC = "Avengers Tower NYC"
    ATTILAN = "Attilan"

    @property
    def threshold(self) -> ColoredGemCounts:
        return _THRESHOLDS[self]

    def is_met_by(self, counts: ColoredGemCounts) -> bool:
        """Return ``True`` when ``counts`` reaches every color of the threshold."""

        return all(counts[color] >= required for color, required in self.threshold.items())


_THRESHOLDS: Final[dict[LocationTile, ColoredGemCounts]] = {
    LocationTile.TRISKELION: colored_gem_counts(purple=4, orange=4),
    LocationTile.HELLS_KITCHEN_NYC: colored_gem_counts(orange=4, yellow=4),
    LocationTile.KNOWHERE: colored_gem_counts(red=3, blue=3, yellow=3),
    LocationTile.ATLANTIS: colored_gem_counts(purple=3, red=3, blue=3),
    LocationTile.WAKANDA: colored_gem_counts(red=4, blue=4),
    LocationTile.ASGARD: colored_gem_counts(purple=3, orange=3, yellow=3),
    LocationTile.AVENGERS_TOWER_NYC: colored_gem_counts(blue=4, yellow=4),
    LocationTile.ATTILAN: colored_gem_counts(purple=4, red=4),
}

ALL_LOCATION_TILES: Final[tuple[LocationTile, ...]] = tuple(LocationTile)
