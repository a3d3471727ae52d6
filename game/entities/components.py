from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass
class Position:
    """Spatial position on the map."""

    x: int
    y: int

    def __iter__(self):
        yield self.x
        yield self.y


@dataclass
class Renderable:
    """Rendering information for an entity."""

    glyph: str
    color_fg: Tuple[int, int, int]
    name: str
    blocks_movement: bool = True


@dataclass
class CombatStats:
    """Core combat related statistics."""

    hp: int = 0
    max_hp: int = 0
    strength: int = 0
    defense: int = 0
    speed: int = 1


@dataclass(frozen=True)
class ItemEntry:
    """One weighted entry of the item pool."""

    name: str
    category: str
    glyph: str = "?"
    weight: float = 1.0
