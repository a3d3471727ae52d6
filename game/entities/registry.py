# game/entities/registry.py
from typing import Any, Self

import polars as pl
import structlog

from game.entities.components import CombatStats, Position, Renderable

log = structlog.get_logger(__name__)

ENTITY_SCHEMA: dict[str, pl.DataType] = {
    "entity_id": pl.UInt32,
    "is_active": pl.Boolean,
    "kind": pl.Utf8,
    "x": pl.Int16,
    "y": pl.Int16,
    "glyph": pl.Utf8,
    "color_fg_r": pl.UInt8,
    "color_fg_g": pl.UInt8,
    "color_fg_b": pl.UInt8,
    "name": pl.Utf8,
    "ai_type": pl.Utf8,
    "blocks_movement": pl.Boolean,
    "hp": pl.Int16,
    "max_hp": pl.Int16,
    "strength": pl.Int16,
    "defense": pl.Int16,
    "speed": pl.Int16,
    "room_index": pl.Int16,
    "item_category": pl.Utf8,
}


class EntityRegistry:
    """Column-oriented store of the entities created for one level."""

    def __init__(self: Self):
        self.entities_df: pl.DataFrame = pl.DataFrame(schema=ENTITY_SCHEMA)
        self._next_entity_id: int = 0
        log.debug("EntityRegistry initialized", schema=list(ENTITY_SCHEMA.keys()))

    def __len__(self: Self) -> int:
        return self.entities_df.height

    def _get_next_id(self: Self) -> int:
        current_id = self._next_entity_id
        self._next_entity_id += 1
        if self._next_entity_id > 2**32 - 1:
            log.critical("Entity ID counter overflowed", next_id=self._next_entity_id)
            raise OverflowError("Entity ID counter overflowed (UInt32 limit reached).")
        return current_id

    def create_entity(
        self: Self,
        kind: str,
        position: Position,
        renderable: Renderable,
        stats: CombatStats | None = None,
        ai_type: str | None = None,
        room_index: int = -1,
        item_category: str | None = None,
    ) -> int:
        new_id = self._get_next_id()
        stats = stats or CombatStats()
        log_context = {"kind": kind, "name": renderable.name, "pos": tuple(position)}
        entity_data = {
            "entity_id": [new_id],
            "is_active": [True],
            "kind": [kind],
            "x": [position.x],
            "y": [position.y],
            "glyph": [renderable.glyph],
            "color_fg_r": [renderable.color_fg[0]],
            "color_fg_g": [renderable.color_fg[1]],
            "color_fg_b": [renderable.color_fg[2]],
            "name": [renderable.name],
            "ai_type": [ai_type],
            "blocks_movement": [renderable.blocks_movement],
            "hp": [stats.hp],
            "max_hp": [stats.max_hp],
            "strength": [stats.strength],
            "defense": [stats.defense],
            "speed": [stats.speed],
            "room_index": [room_index],
            "item_category": [item_category],
        }
        try:
            new_entity_df = pl.DataFrame(entity_data, schema=ENTITY_SCHEMA)
        except Exception as e:
            log.error(
                "Failed to build entity row",
                error=str(e),
                exc_info=True,
                **log_context,
            )
            raise
        if self.entities_df.height == 0:
            self.entities_df = new_entity_df
        else:
            self.entities_df = pl.concat([self.entities_df, new_entity_df], how="vertical")
        log.debug("Entity created", entity_id=new_id, **log_context)
        return new_id

    def get_entity_component(self: Self, entity_id: int, component_name: str) -> Any | None:
        """Retrieves the value of a specific component for a given *active* entity."""
        if component_name not in self.entities_df.columns:
            log.warning("Component does not exist", entity_id=entity_id, component=component_name)
            raise ValueError(f"Component '{component_name}' does not exist in ENTITY_SCHEMA.")
        result = self.entities_df.filter(
            (pl.col("entity_id") == entity_id) & pl.col("is_active")
        ).get_column(component_name)
        if result.len() == 0:
            return None
        return result.item()

    def get_position(self: Self, entity_id: int) -> Position | None:
        pos_x = self.get_entity_component(entity_id, "x")
        pos_y = self.get_entity_component(entity_id, "y")
        if pos_x is not None and pos_y is not None:
            return Position(int(pos_x), int(pos_y))
        return None

    def get_active_entities(self: Self) -> pl.DataFrame:
        return self.entities_df.filter(pl.col("is_active"))

    def get_entities_by_kind(self: Self, kind: str) -> pl.DataFrame:
        return self.entities_df.filter((pl.col("kind") == kind) & pl.col("is_active"))

    def count_by_kind(self: Self) -> dict[str, int]:
        counts = self.get_active_entities().group_by("kind").len()
        return {row["kind"]: int(row["len"]) for row in counts.iter_rows(named=True)}
