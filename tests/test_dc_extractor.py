"""Tests for DC-term extraction."""

import numpy as np
import pytest

from engines.coefficient_store import CoefficientStore
from engines.dc_extractor import dc_intensity, extract_component_dc, extract_dc
from engines.decode_session import DecodeSession
from engines.errors import ExtractionError, StoreAccessError
from models.component import Component


def test_dc_formula_clamps():
    """-1024, 0, 1024 at q0=8 clamp to 0, 128, 255 without wrapping."""
    values = dc_intensity(np.array([-1024, 0, 1024]), 8)
    assert values.tolist() == [0, 128, 255]
    assert values.dtype == np.uint8


def test_dc_formula_overflow_clamps_high():
    """256 * 8 / 8 + 128 = 384 clamps to 255."""
    assert int(dc_intensity(256, 8)) == 255


def test_dc_formula_truncates_toward_zero():
    """Negative products truncate toward zero, not toward -inf."""
    assert int(dc_intensity(-1, 4)) == 128    # -4 / 8 -> 0
    assert int(dc_intensity(-9, 1)) == 127    # -9 / 8 -> -1
    assert int(dc_intensity(9, 1)) == 129


def test_dc_formula_extreme_inputs():
    """int16 extremes times the largest uint16 step stay in range."""
    values = dc_intensity(np.array([32767, -32768], dtype=np.int16), 65535)
    assert values.tolist() == [255, 0]


def test_all_zero_dc_is_mid_gray(make_session):
    """DC 0 gives 128 for every block."""
    session = make_session(grids=((3, 5),), dc_values=[0])
    image = extract_dc(CoefficientStore(session, 0))
    assert np.all(image.data == 128)


def test_dc_image_is_one_sample_per_block(make_session):
    """A 10 x 6 block grid gives a 10 x 6 image, not 80 x 48."""
    session = make_session(grids=((6, 10),))
    image = extract_dc(CoefficientStore(session, 0))
    assert (image.width, image.height) == (10, 6)


def test_dc_uses_component_quant_table(make_session):
    """Chroma uses its own DC quantization step."""
    session = make_session(grids=((1, 1), (1, 1), (1, 1)), dc_values=[4, 4, 4], dc_quants=(8, 16))
    assert extract_component_dc(session, 0)[0, 0] == 4 * 8 // 8 + 128
    assert extract_component_dc(session, 1)[0, 0] == 4 * 16 // 8 + 128


def test_dc_respects_block_positions(make_session):
    """Sample (r, c) comes from block row r, column c."""
    dc = np.arange(12, dtype=np.int16).reshape(3, 4)
    session = make_session(grids=((3, 4),), dc_values=[dc], v_samp=[2])
    image = extract_dc(CoefficientStore(session, 0))
    assert np.array_equal(image.data, dc + 128)


def test_absent_block_fails_by_default(make_session):
    """The default policy aborts on the first absent block."""
    presence = np.ones((2, 2), dtype=bool)
    presence[1, 0] = False
    session = make_session(grids=((2, 2),), presence=[presence])
    with pytest.raises(ExtractionError, match=r"block \(1, 0\)"):
        extract_dc(CoefficientStore(session, 0))


def test_absent_block_midgray_policy(make_session):
    """The midgray policy fills absent blocks with 128 and keeps going."""
    presence = np.ones((2, 2), dtype=bool)
    presence[0, 1] = False
    session = make_session(grids=((2, 2),), dc_values=[100], presence=[presence])
    image = extract_dc(CoefficientStore(session, 0), absent_policy='midgray')
    assert image.data.tolist() == [[228, 128], [228, 228]]


def test_present_blocks_with_either_policy(make_session):
    """Both policies agree when every block is present."""
    session = make_session(grids=((2, 3),), dc_values=[-20])
    store = CoefficientStore(session, 0)
    assert np.array_equal(extract_dc(store, 'fail').data, extract_dc(store, 'midgray').data)


def test_invalid_component_is_extraction_error(make_session):
    """An out-of-range component index fails the extraction."""
    session = make_session(grids=((1, 1),))
    with pytest.raises(ExtractionError):
        extract_component_dc(session, 3)


def test_missing_quant_table_is_extraction_error():
    """A component pointing at an undefined table fails the extraction."""
    component = Component(index=0, name='Y', width_in_blocks=1, height_in_blocks=1, quant_table_index=2)
    session = DecodeSession(
        width=8, height=8,
        components=[component],
        quant_tables=[np.ones(64, dtype=np.uint16)],
        coefficients=[np.zeros((1, 1, 64), dtype=np.int16)],
    )
    with pytest.raises(ExtractionError, match="missing quantization table"):
        extract_component_dc(session, 0)


def test_row_fetch_failure_is_fatal(refusing_session):
    """A refused block row aborts DC extraction for that component."""
    session = refusing_session([1], grids=((3, 2),))
    with pytest.raises(ExtractionError) as excinfo:
        extract_dc(CoefficientStore(session, 0))
    assert isinstance(excinfo.value.__cause__, StoreAccessError)


def test_dc_image_outlives_session(make_session):
    """The intensity image stays valid after the session is closed."""
    with make_session(grids=((2, 2),), dc_values=[8]) as session:
        store = CoefficientStore(session, 0)
        image = extract_dc(store)
    assert session.closed
    assert np.all(image.data == 136)
    with pytest.raises(StoreAccessError):
        store.fetch_rows(0)
