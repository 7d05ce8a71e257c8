"""Per-component header metadata."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Component:
    """One color component of a decoded JPEG, in 8x8 block units."""

    index: int
    name: str
    width_in_blocks: int
    height_in_blocks: int
    h_samp_factor: int = 1
    v_samp_factor: int = 1
    quant_table_index: int = 0

    @property
    def total_blocks(self) -> int:
        return self.width_in_blocks * self.height_in_blocks

    def __str__(self) -> str:
        return (
            f"component {self.index} ({self.name}): "
            f"{self.width_in_blocks} x {self.height_in_blocks} blocks"
        )
