"""Shared fixtures: hand-built decode sessions."""

import numpy as np
import pytest

from engines.decode_session import DecodeSession
from engines.errors import StoreAccessError
from models.component import Component
from utils.constants import COMPONENT_NAMES


def build_session(grids=((2, 2),), dc_values=None, presence=None, dc_quants=(8, 8),
                  v_samp=None, coefficients=None, session_cls=DecodeSession):
    """Session with one component per (rows, cols) grid and flat AC=0 blocks."""
    components = []
    arrays = []
    for ci, (rows, cols) in enumerate(grids):
        if coefficients is not None:
            arr = np.asarray(coefficients[ci], dtype=np.int16)
        else:
            arr = np.zeros((rows, cols, 64), dtype=np.int16)
            if dc_values is not None:
                arr[:, :, 0] = dc_values[ci]
        components.append(Component(
            index=ci,
            name=COMPONENT_NAMES[ci],
            width_in_blocks=cols,
            height_in_blocks=rows,
            v_samp_factor=v_samp[ci] if v_samp else 1,
            quant_table_index=min(ci, len(dc_quants) - 1),
        ))
        arrays.append(arr)

    tables = []
    for dc_quant in dc_quants:
        table = np.ones(64, dtype=np.uint16)
        table[0] = dc_quant
        tables.append(table)

    rows, cols = grids[0]
    return session_cls(
        width=cols * 8,
        height=rows * 8,
        components=components,
        quant_tables=tables,
        coefficients=arrays,
        presence=presence,
    )


class RefusingSession(DecodeSession):
    """Refuses every request that starts at one of ``refused_rows``."""

    refused_rows = ()

    def read_block_rows(self, ci, start_row, stop_row):
        if start_row in self.refused_rows:
            raise StoreAccessError(f"row {start_row} refused")
        return super().read_block_rows(ci, start_row, stop_row)


@pytest.fixture
def make_session():
    return build_session


@pytest.fixture
def refusing_session():
    def _make(refused_rows, **kwargs):
        cls = type('Refusing', (RefusingSession,), {'refused_rows': tuple(refused_rows)})
        return build_session(session_cls=cls, **kwargs)
    return _make
