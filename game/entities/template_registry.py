"""Registry for entity templates.

Stores immutable template data for the player and enemy kinds, plus the
weighted item pool. Templates are loaded from configuration files and looked
up by ID when the populator creates entities.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Self, Tuple

import structlog

from game.entities.components import CombatStats, ItemEntry, Renderable
from utils.helpers import CONFIG_DIR, load_yaml_config

log = structlog.get_logger(__name__)

DEFAULT_SCALING: Dict[str, float] = {"hp": 1.5, "strength": 0.5, "defense": 0.3}


class EntityTemplateRegistry:
    """Simple container providing access to entity templates."""

    def __init__(
        self: Self,
        templates: Dict[str, Any] | None = None,
        player: Dict[str, Any] | None = None,
        scaling: Dict[str, float] | None = None,
    ):
        self.templates: Dict[str, Any] = templates or {}
        self.player: Dict[str, Any] = player or {}
        self.scaling: Dict[str, float] = {**DEFAULT_SCALING, **(scaling or {})}
        log.debug("EntityTemplateRegistry initialized", templates=len(self.templates))

    @classmethod
    def from_config(cls, path: Path | str | None = None) -> "EntityTemplateRegistry":
        data = load_yaml_config(Path(path) if path else CONFIG_DIR / "entities.yaml", "Entities")
        return cls(
            templates=data.get("enemies", {}),
            player=data.get("player", {}),
            scaling=data.get("scaling", {}),
        )

    def get_template(self: Self, template_id: str) -> Dict[str, Any] | None:
        """Retrieve a template definition by ID."""
        return self.templates.get(template_id)

    def require(self: Self, template_id: str) -> Dict[str, Any]:
        template = self.get_template(template_id)
        if template is None:
            log.error("Unknown entity template", template_id=template_id)
            raise KeyError(f"Unknown entity template: {template_id}")
        return template

    def scaling_for(self: Self, template_id: str) -> Dict[str, float]:
        """Per-difficulty growth; a template's own ``scaling`` overrides the default."""
        template = self.require(template_id)
        return {**self.scaling, **template.get("scaling", {})}


def renderable_from(template: Dict[str, Any]) -> Renderable:
    color = template.get("color", (255, 255, 255))
    return Renderable(
        glyph=str(template.get("glyph", "?")),
        color_fg=(int(color[0]), int(color[1]), int(color[2])),
        name=str(template.get("name", "Unknown")),
        blocks_movement=bool(template.get("blocks_movement", True)),
    )


def base_stats(template: Dict[str, Any]) -> CombatStats:
    hp = int(template.get("hp", 1))
    return CombatStats(
        hp=hp,
        max_hp=hp,
        strength=int(template.get("strength", 0)),
        defense=int(template.get("defense", 0)),
        speed=int(template.get("speed", 1)),
    )


def load_item_pool(path: Path | str | None = None) -> List[ItemEntry]:
    data = load_yaml_config(Path(path) if path else CONFIG_DIR / "items.yaml", "Items")
    pool = [
        ItemEntry(
            name=str(entry["name"]),
            category=str(entry.get("category", "misc")),
            glyph=str(entry.get("glyph", "?")),
            weight=float(entry.get("weight", 1)),
        )
        for entry in data.get("items", [])
    ]
    if not pool:
        raise ValueError("Item pool is empty")
    return pool


def item_weights(pool: List[ItemEntry]) -> Tuple[List[ItemEntry], List[float]]:
    return list(pool), [entry.weight for entry in pool]
