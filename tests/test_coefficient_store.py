"""Tests for the decode session and coefficient block store."""

import numpy as np
import pytest

from engines.coefficient_store import CoefficientStore
from engines.decode_session import DecodeSession, session_from_image
from engines.errors import FormatError, InvalidArgument, StoreAccessError
from models.component import Component


def test_row_starts_follow_stride(make_session):
    """Requests are aligned to the vertical sampling factor."""
    session = make_session(grids=((5, 2),), v_samp=[2])
    store = CoefficientStore(session, 0)
    assert store.row_stride == 2
    assert list(store.row_starts()) == [0, 2, 4]


def test_last_group_is_clamped(make_session):
    """The final group stops at the grid height."""
    session = make_session(grids=((5, 2),), v_samp=[2])
    rows = CoefficientStore(session, 0).fetch_rows(4)
    assert rows.num_rows == 1
    assert rows.coefficients.shape == (1, 2, 64)


def test_misaligned_requests_rejected(make_session):
    """Unaligned starts, bad counts and out-of-grid rows are store errors."""
    session = make_session(grids=((5, 2),), v_samp=[2])
    store = CoefficientStore(session, 0)
    with pytest.raises(StoreAccessError):
        store.fetch_rows(1)
    with pytest.raises(StoreAccessError):
        store.fetch_rows(0, 3)
    with pytest.raises(StoreAccessError):
        store.fetch_rows(0, 0)
    with pytest.raises(StoreAccessError):
        store.fetch_rows(6)
    assert store.fetch_rows(0, 4).num_rows == 4


def test_rows_are_read_only_views(make_session):
    """Fetched blocks cannot be modified and are not copies."""
    session = make_session(grids=((2, 2),), dc_values=[5])
    store = CoefficientStore(session, 0)
    first = store.fetch_rows(0)
    second = store.fetch_rows(0)
    assert not first.coefficients.flags.writeable
    assert np.shares_memory(first.coefficients, second.coefficients)
    with pytest.raises(ValueError):
        first.coefficients[0, 0, 0] = 1


def test_session_does_not_alias_caller_flags(make_session):
    """The caller's array stays writeable."""
    coeffs = np.zeros((1, 1, 64), dtype=np.int16)
    make_session(grids=((1, 1),), coefficients=[coeffs])
    coeffs[0, 0, 0] = 3


def test_absent_block_marker(make_session):
    """Absent blocks come back as None, present ones as 64 values."""
    presence = np.array([[True, False]])
    session = make_session(grids=((1, 2),), dc_values=[9], presence=[presence])
    rows = CoefficientStore(session, 0).fetch_rows(0)
    assert rows.block(0, 1) is None
    assert rows.block(0, 0)[0] == 9
    assert rows.block(0, 0).shape == (64,)


def test_invalid_component_index(make_session):
    """Store construction rejects components the session lacks."""
    session = make_session(grids=((1, 1),))
    with pytest.raises(InvalidArgument):
        CoefficientStore(session, 1)
    with pytest.raises(InvalidArgument):
        CoefficientStore(session, -1)


def test_closed_session_refuses_rows(make_session):
    """No block can be fetched after the session is torn down."""
    session = make_session(grids=((2, 2),))
    store = CoefficientStore(session, 0)
    session.close()
    with pytest.raises(StoreAccessError):
        store.fetch_rows(0)


def test_grid_mismatch_is_format_error():
    """Coefficient arrays must match the declared block grid."""
    component = Component(index=0, name='Y', width_in_blocks=2, height_in_blocks=2)
    with pytest.raises(FormatError):
        DecodeSession(
            width=16, height=16,
            components=[component],
            quant_tables=[np.ones(64)],
            coefficients=[np.zeros((2, 3, 64), dtype=np.int16)],
        )


def test_accepts_8x8_block_layout():
    """(rows, cols, 8, 8) arrays are flattened in natural order."""
    component = Component(index=0, name='Y', width_in_blocks=1, height_in_blocks=1)
    coeffs = np.arange(64, dtype=np.int16).reshape(1, 1, 8, 8)
    session = DecodeSession(
        width=8, height=8,
        components=[component],
        quant_tables=[np.ones((8, 8))],
        coefficients=[coeffs],
    )
    rows = CoefficientStore(session, 0).fetch_rows(0)
    assert rows.coefficients[0, 0].tolist() == list(range(64))


def test_synthetic_session_geometry():
    """4:2:0 synthetic session: chroma grids are half the luma grid, rounded up."""
    image = np.full((40, 72, 3), 128, dtype=np.uint8)
    session = session_from_image(image, quality=75, subsampling_mode='4:2:0')
    y, cb, cr = session.components
    assert (y.width_in_blocks, y.height_in_blocks) == (9, 5)
    assert (cb.width_in_blocks, cb.height_in_blocks) == (5, 3)
    assert (cr.width_in_blocks, cr.height_in_blocks) == (5, 3)
    assert (y.h_samp_factor, y.v_samp_factor) == (2, 2)
    assert CoefficientStore(session, 0).row_stride == 2
    assert cb.quant_table_index == 1


def test_synthetic_grayscale_dc_values():
    """Block DC reflects the block mean: intensity recovers the gray level."""
    image = np.zeros((8, 16), dtype=np.uint8)
    image[:, :8] = 200
    image[:, 8:] = 56
    session = session_from_image(image, quality=50)
    assert session.num_components == 1
    block = CoefficientStore(session, 0).fetch_rows(0)
    # q0 at quality 50 is 16: 8 * (200 - 128) / 16 = 36
    assert block.coefficients[0, :, 0].tolist() == [36, -36]
