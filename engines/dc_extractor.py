"""DC-term extraction: one gray sample per 8x8 block."""

from typing import Literal

import numpy as np

from engines.coefficient_store import CoefficientStore
from engines.decode_session import DecodeSession
from engines.errors import ExtractionError, FormatError, InvalidArgument, StoreAccessError
from models.intensity_image import IntensityImage
from utils.constants import DC_BIAS, DC_SCALE, MID_GRAY

AbsentPolicy = Literal['fail', 'midgray']


def dc_intensity(dc_raw, dc_quant: int) -> np.ndarray:
    """clamp(DC * q0 / 8 + 128, 0, 255) with the division truncating toward zero."""
    product = np.asarray(dc_raw, dtype=np.int64) * int(dc_quant)
    scaled = np.sign(product) * (np.abs(product) // DC_SCALE)
    return np.clip(scaled + DC_BIAS, 0, 255).astype(np.uint8)


def extract_dc(store: CoefficientStore, absent_policy: AbsentPolicy = 'fail') -> IntensityImage:
    """Build a width_in_blocks x height_in_blocks image from every block's DC term.

    With ``absent_policy='fail'`` the first absent block aborts the extraction;
    with ``'midgray'`` absent blocks become 128 and extraction continues.
    """
    if absent_policy not in ('fail', 'midgray'):
        raise InvalidArgument(f"Unknown absent-block policy: {absent_policy!r}")

    component = store.component
    try:
        dc_quant = int(store.quant_table()[0])
    except FormatError as e:
        raise ExtractionError(f"{component}: {e}") from e

    out = np.empty((component.height_in_blocks, component.width_in_blocks), dtype=np.uint8)
    for start_row in store.row_starts():
        try:
            rows = store.fetch_rows(start_row)
        except StoreAccessError as e:
            raise ExtractionError(f"{component}: block row {start_row} unavailable: {e}") from e

        values = dc_intensity(rows.coefficients[:, :, 0], dc_quant)
        if not rows.present.all():
            if absent_policy == 'fail':
                r, c = np.argwhere(~rows.present)[0]
                raise ExtractionError(
                    f"{component}: block ({rows.start_row + r}, {c}) has no coefficients"
                )
            values[~rows.present] = MID_GRAY
        out[rows.start_row:rows.stop_row] = values

    return IntensityImage(out)


def extract_component_dc(
    session: DecodeSession,
    component_index: int,
    absent_policy: AbsentPolicy = 'fail'
) -> IntensityImage:
    """DC image for one component of an open session."""
    try:
        store = CoefficientStore(session, component_index)
    except InvalidArgument as e:
        raise ExtractionError(str(e)) from e
    return extract_dc(store, absent_policy)
