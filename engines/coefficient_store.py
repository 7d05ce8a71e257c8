"""Row-addressable, read-only view over one component's coefficient blocks."""

from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np

from engines.decode_session import DecodeSession
from engines.errors import StoreAccessError
from models.component import Component


@dataclass(frozen=True)
class BlockRows:
    """A group of consecutive block rows borrowed from a session.

    ``coefficients`` has shape (rows, width_in_blocks, 64) in natural order;
    ``present[r, c]`` is False where the session has no data for that block.
    Both are read-only views that are only meaningful while the session is open.
    """

    start_row: int
    coefficients: np.ndarray
    present: np.ndarray

    @property
    def num_rows(self) -> int:
        return self.coefficients.shape[0]

    @property
    def stop_row(self) -> int:
        return self.start_row + self.num_rows

    def block(self, row: int, col: int) -> Optional[np.ndarray]:
        """Coefficients of one block by absolute row, or None if absent."""
        r = row - self.start_row
        if not self.present[r, col]:
            return None
        return self.coefficients[r, col]


class CoefficientStore:
    """Block access for one component, in the session's row-request granularity."""

    def __init__(self, session: DecodeSession, component_index: int):
        # Raises InvalidArgument for an index the session does not have
        self.component: Component = session.component(component_index)
        self.session = session

    @property
    def index(self) -> int:
        return self.component.index

    @property
    def row_stride(self) -> int:
        return max(1, self.component.v_samp_factor)

    def quant_table(self) -> np.ndarray:
        return self.session.quant_table(self.index)

    def fetch_rows(self, start_row: int, num_rows: Optional[int] = None) -> BlockRows:
        """Fetch rows [start_row, start_row + num_rows), clamped at the grid height."""
        stride = self.row_stride
        if num_rows is None:
            num_rows = stride
        if start_row % stride != 0:
            raise StoreAccessError(
                f"{self.component}: start row {start_row} not aligned to stride {stride}"
            )
        if num_rows <= 0 or num_rows % stride != 0:
            raise StoreAccessError(
                f"{self.component}: row count {num_rows} is not a positive multiple of {stride}"
            )
        if not (0 <= start_row < self.component.height_in_blocks):
            raise StoreAccessError(
                f"{self.component}: start row {start_row} outside the block grid"
            )
        stop_row = min(start_row + num_rows, self.component.height_in_blocks)
        coefficients, present = self.session.read_block_rows(self.index, start_row, stop_row)
        return BlockRows(start_row, coefficients, present)

    def row_starts(self) -> range:
        """Aligned start rows covering the whole grid, top to bottom."""
        return range(0, self.component.height_in_blocks, self.row_stride)

    def iter_row_groups(self) -> Iterator[BlockRows]:
        for start_row in self.row_starts():
            yield self.fetch_rows(start_row)
