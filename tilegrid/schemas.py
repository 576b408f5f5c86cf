"""Pydantic snapshot model for tile grids.

``TileGrid`` keeps its tiles in plain lists for fast in-place access. This
model is the validated, serializable mirror of that state: decoded payloads
and JSON files pass through it so an inconsistent snapshot never becomes a
live grid.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, model_validator

U32_MAX = 2**32 - 1


class TileGridState(BaseModel):
    """Complete state of a tile grid: size, layer count and every tile."""

    width: int = Field(..., ge=0, le=U32_MAX, description="Grid width in tiles")
    height: int = Field(..., ge=0, le=U32_MAX, description="Grid height in tiles")
    layer_count: int = Field(..., ge=0, le=U32_MAX, description="Number of stored layers")
    tiles: List[List[int]] = Field(
        default_factory=list,
        description="One row-major list of tile ids per layer (index = x + y * width)",
    )

    @model_validator(mode="after")
    def _check_layout(self) -> "TileGridState":
        if len(self.tiles) != self.layer_count:
            raise ValueError(
                f"layer_count is {self.layer_count} but {len(self.tiles)} layers were supplied"
            )
        expected = self.width * self.height
        for index, layer in enumerate(self.tiles):
            if len(layer) != expected:
                raise ValueError(
                    f"layer {index} holds {len(layer)} tiles, expected {expected} "
                    f"({self.width}x{self.height})"
                )
            if layer and (min(layer) < 0 or max(layer) > U32_MAX):
                raise ValueError(f"layer {index} holds tile ids outside the u32 range")
        return self
