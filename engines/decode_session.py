"""Decode sessions: header metadata plus entropy-decoded coefficient storage.

A session owns the quantized DCT coefficients of every component. Row
requests hand out read-only views into that storage; once the session is
closed the storage is released and every further request fails, so views
obtained through a store can never be refreshed from a dead session.

Sessions come from two places: real JPEG files decoded by jpeglib
(libjpeg's ``jpeg_read_coefficients``), and in-memory images pushed through
the JPEG forward path (color conversion, subsampling, DCT, quantization).
"""

from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np

from engines.block_processor import to_block_grid
from engines.color_space import LUMA_SAMPLING, SubsamplingMode, rgb_to_ycbcr, subsample_chroma
from engines.dct_engine import encode_blocks
from engines.errors import FormatError, InvalidArgument, OpenError, StoreAccessError
from engines.quantizer import quantize, scale_quant_matrix
from models.component import Component
from utils.constants import BLOCK_AREA, COMPONENT_NAMES, JPEG_CHROMA_Q50, JPEG_LUMA_Q50

JPEG_SOI = b'\xff\xd8'


def _readonly(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.setflags(write=False)
    return view


class DecodeSession:
    """Coefficient storage for every component of one image."""

    def __init__(
        self,
        width: int,
        height: int,
        components: Sequence[Component],
        quant_tables: Sequence[np.ndarray],
        coefficients: Sequence[np.ndarray],
        presence: Optional[Sequence[Optional[np.ndarray]]] = None,
        source: str = '<memory>'
    ):
        if len(coefficients) != len(components):
            raise FormatError(
                f"{len(components)} components but {len(coefficients)} coefficient arrays"
            )
        self.width = int(width)
        self.height = int(height)
        self.source = source
        self.components: Tuple[Component, ...] = tuple(components)

        self._quant_tables = []
        for table in quant_tables:
            table = np.asarray(table)
            if table.size != BLOCK_AREA:
                raise FormatError(f"Quantization table must hold {BLOCK_AREA} values, got {table.size}")
            self._quant_tables.append(_readonly(table.reshape(BLOCK_AREA).astype(np.uint16)))

        if presence is None:
            presence = [None] * len(components)

        self._coefficients = []
        self._presence = []
        for component, coeffs, mask in zip(self.components, coefficients, presence):
            grid = (component.height_in_blocks, component.width_in_blocks)
            coeffs = np.asarray(coeffs)
            # Accepts (rows, cols, 64) or (rows, cols, 8, 8)
            if coeffs.shape[:2] != grid or int(np.prod(coeffs.shape[2:])) != BLOCK_AREA:
                raise FormatError(
                    f"{component}: coefficient array of shape {coeffs.shape} does not match the block grid"
                )
            coeffs = np.ascontiguousarray(coeffs.reshape(grid + (BLOCK_AREA,)), dtype=np.int16)
            if mask is None:
                mask = np.ones(grid, dtype=bool)
            mask = np.asarray(mask, dtype=bool)
            if mask.shape != grid:
                raise FormatError(f"{component}: presence mask of shape {mask.shape} does not match the block grid")
            self._coefficients.append(_readonly(coeffs))
            self._presence.append(_readonly(mask))

        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def num_components(self) -> int:
        return len(self.components)

    def component(self, ci: int) -> Component:
        if not isinstance(ci, (int, np.integer)) or not (0 <= ci < len(self.components)):
            raise InvalidArgument(f"Invalid component index {ci} (image has {len(self.components)})")
        return self.components[ci]

    def quant_table(self, ci: int) -> np.ndarray:
        """64 quantization steps in natural order for component ci."""
        component = self.component(ci)
        n = component.quant_table_index
        if not (0 <= n < len(self._quant_tables)):
            raise FormatError(f"{component} references missing quantization table {n}")
        return self._quant_tables[n]

    def read_block_rows(self, ci: int, start_row: int, stop_row: int) -> Tuple[np.ndarray, np.ndarray]:
        """Read-only views of coefficients and presence for rows [start_row, stop_row)."""
        if self._closed:
            raise StoreAccessError(f"{self.source}: session is closed")
        component = self.component(ci)
        if not (0 <= start_row < stop_row <= component.height_in_blocks):
            raise StoreAccessError(
                f"{component}: rows {start_row}..{stop_row} outside 0..{component.height_in_blocks}"
            )
        return (
            self._coefficients[ci][start_row:stop_row],
            self._presence[ci][start_row:stop_row],
        )

    def close(self) -> None:
        self._coefficients = []
        self._presence = []
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self) -> str:
        state = 'closed' if self._closed else 'open'
        return f"<DecodeSession {self.source} {self.width}x{self.height} {len(self.components)} components, {state}>"


def open_jpeg(path) -> DecodeSession:
    """Open a JPEG file and read its quantized DCT coefficients."""
    import jpeglib

    path = Path(path)
    try:
        with open(path, 'rb') as f:
            head = f.read(len(JPEG_SOI))
    except OSError as e:
        raise OpenError(f"can't open {path}: {e.strerror or e}") from e
    if head != JPEG_SOI:
        raise FormatError(f"{path}: not a JPEG stream (missing SOI marker)")

    try:
        im = jpeglib.read_dct(str(path))
        channels = [im.Y] + [c for c in (im.Cb, im.Cr) if c is not None]
        qt = np.asarray(im.qt)
    except Exception as e:
        raise FormatError(f"{path}: could not read coefficients: {e}") from e

    if len(channels) not in (1, 3):
        raise FormatError(f"{path}: unsupported component count {len(channels)}")

    qt = qt.reshape(-1, BLOCK_AREA)
    tbl_no = getattr(im, 'quant_tbl_no', None)
    samp = getattr(im, 'samp_factor', None)

    components = []
    coefficients = []
    for ci, channel in enumerate(channels):
        channel = np.asarray(channel)
        if channel.ndim != 4 or channel.shape[2:] != (8, 8):
            raise FormatError(f"{path}: unexpected coefficient layout {channel.shape}")
        if tbl_no is not None:
            table_index = int(np.asarray(tbl_no).reshape(-1)[ci])
        else:
            table_index = min(ci, 1, len(qt) - 1)
        # jpeglib reports sampling factors as (v, h) pairs
        if samp is not None:
            v_samp, h_samp = (int(s) for s in np.asarray(samp).reshape(-1, 2)[ci])
        else:
            h_samp, v_samp = 1, 1
        components.append(Component(
            index=ci,
            name=COMPONENT_NAMES[ci],
            width_in_blocks=channel.shape[1],
            height_in_blocks=channel.shape[0],
            h_samp_factor=h_samp,
            v_samp_factor=v_samp,
            quant_table_index=table_index,
        ))
        coefficients.append(channel.reshape(channel.shape[0], channel.shape[1], BLOCK_AREA))

    return DecodeSession(
        width=int(im.width),
        height=int(im.height),
        components=components,
        quant_tables=list(qt),
        coefficients=coefficients,
        source=str(path),
    )


def session_from_image(
    image: np.ndarray,
    quality: int = 75,
    subsampling_mode: SubsamplingMode = '4:2:0'
) -> DecodeSession:
    """Build a session from an RGB (or 2D grayscale) uint8 image via the JPEG forward path."""
    image = np.asarray(image)
    if image.ndim == 2:
        planes = [image.astype(np.float64)]
        sampling = [(1, 1)]
    elif image.ndim == 3 and image.shape[2] == 3:
        ycbcr = rgb_to_ycbcr(image.astype(np.float64))
        cb, cr = subsample_chroma(
            ycbcr[:, :, 1].astype(np.float32), ycbcr[:, :, 2].astype(np.float32), subsampling_mode
        )
        planes = [ycbcr[:, :, 0], cb.astype(np.float64), cr.astype(np.float64)]
        sampling = [LUMA_SAMPLING[subsampling_mode], (1, 1), (1, 1)]
    else:
        raise InvalidArgument(f"Expected an HxW or HxWx3 image, got shape {image.shape}")

    tables = [scale_quant_matrix(JPEG_LUMA_Q50, quality)]
    if len(planes) > 1:
        tables.append(scale_quant_matrix(JPEG_CHROMA_Q50, quality))

    components = []
    coefficients = []
    for ci, (plane, (h_samp, v_samp)) in enumerate(zip(planes, sampling)):
        table_index = min(ci, 1)
        grid = to_block_grid(plane)
        quantized = quantize(encode_blocks(grid), tables[table_index].astype(np.float64))
        rows, cols = quantized.shape[:2]
        components.append(Component(
            index=ci,
            name=COMPONENT_NAMES[ci],
            width_in_blocks=cols,
            height_in_blocks=rows,
            h_samp_factor=h_samp,
            v_samp_factor=v_samp,
            quant_table_index=table_index,
        ))
        coefficients.append(quantized.reshape(rows, cols, BLOCK_AREA))

    return DecodeSession(
        width=image.shape[1],
        height=image.shape[0],
        components=components,
        quant_tables=tables,
        coefficients=coefficients,
        source='<synthetic>',
    )
