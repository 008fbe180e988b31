import copy
import warnings

import numpy as np
import pytest

from rasterband.config import BoundsPolicy
from rasterband.contracts.band import Band, ConstRowAccessor, RowAccessor
from rasterband.contracts.errors import (
    IndexOutOfRangeError, InvalidConfigurationError, ValueOutOfRangeError,
)
from rasterband.contracts.geo import GeoMetadata
from tests.factories import make_band, make_ramp


# ---------- construcción ----------
def test_float_band_scenario():
    b = Band(10, 10, 2.0, 7.0, dtype="float32")
    assert b.width == 10
    assert b(0, 1) == 7.0
    assert b.nodata_value == 2.0
    assert b.dtype == np.float32


def test_default_band_is_empty():
    b = Band()
    assert (b.width, b.height, b.size()) == (0, 0, 0)
    assert b.nodata_value == np.finfo(np.float64).min


def test_nodata_defaults_to_lowest_and_fill_to_nodata():
    b = Band(3, 2, dtype="int16")
    assert b.nodata_value == -32768
    assert all(v == -32768 for v in b)
    b2 = Band(3, 2, 5, dtype="uint8")
    assert b2.front() == 5 and b2.back() == 5


def test_construction_converts_cross_type_values():
    b = Band(20, 20, 40.501, 60.666, dtype="int32")
    assert b.nodata_value == 41
    assert b[0][10] == 61


def test_construction_out_of_range_fails():
    with pytest.raises(ValueOutOfRangeError):
        Band(2, 2, -1, dtype="uint8")
    with pytest.raises(ValueOutOfRangeError):
        Band(2, 2, 0, 1000, dtype="uint8")


def test_float64_band_accepts_infinities():
    b = Band(2, 2, float("-inf"), 1.0)
    assert np.isneginf(b.nodata_value)
    b.set_at(1, float("inf"))
    b[1, 1] = float("-inf")
    assert b.count() == 3
    assert b.max() == np.inf
    b.init(float("inf"))
    assert all(np.isposinf(v) for v in b)


def test_construction_invalid_extent():
    with pytest.raises(InvalidConfigurationError):
        Band(-1, 3)
    with pytest.raises(TypeError):
        Band(2.5, 3)
    with pytest.raises(TypeError):
        Band(2, 2, "x")


# ---------- índices ----------
def test_bounds_helpers():
    b = make_band(4, 3)
    assert b.in_row_bounds(0) and b.in_row_bounds(2) and not b.in_row_bounds(3)
    assert b.in_col_bounds(3) and not b.in_col_bounds(4) and not b.in_col_bounds(-1)


def test_out_of_range_legacy_requires_both_axes():
    b = make_band(4, 3)
    assert b.bounds_policy is BoundsPolicy.LEGACY
    assert not b.out_of_range(0, 10)
    assert not b.out_of_range(5, 0)
    assert b.out_of_range(5, 10)
    assert b.linear_index(0, 5) == 5  # una sola dimensión fuera: no falla
    with pytest.raises(IndexOutOfRangeError):
        b.linear_index(3, 4)


def test_out_of_range_strict_any_axis():
    b = Band(4, 3, dtype="int8", bounds_policy="strict")
    assert b.out_of_range(0, 10)
    with pytest.raises(IndexOutOfRangeError):
        b.linear_index(0, 4)


def test_strict_policy_from_settings(monkeypatch):
    monkeypatch.setenv("RASTERBAND_BOUNDS_POLICY", "strict")
    from rasterband.config import get_settings
    get_settings.cache_clear()
    assert Band(2, 2).bounds_policy is BoundsPolicy.STRICT


def test_linear_index_row_col_inverse():
    b = make_band(4, 3)
    for r in range(3):
        for c in range(4):
            assert b.row_col(b.linear_index(r, c)) == (r, c)


@pytest.mark.parametrize("i", [-1, 12, 100])
def test_row_col_out_of_range(i):
    with pytest.raises(IndexOutOfRangeError):
        make_band(4, 3).row_col(i)


def test_element_access_overflow_beyond_storage_raises():
    b = make_ramp(4, 3)
    # columna fuera pero dentro del almacenamiento: política legado la permite
    assert b(0, 5) == 5
    with pytest.raises(IndexOutOfRangeError):
        b(2, 4)  # índice 12 == size
    with pytest.raises(IndexOutOfRangeError):
        b(-1, 1)  # índice negativo, nunca envuelve
    with pytest.raises(IndexOutOfRangeError):
        b[0][40]


def test_row_accessor_checks_row_only():
    b = make_ramp(4, 3)
    with pytest.raises(IndexOutOfRangeError):
        b[3]
    with pytest.raises(IndexOutOfRangeError):
        b[-1]
    row = b[1]
    assert isinstance(row, RowAccessor) and row.row == 1
    assert row[2] == 6
    row[2] = 60
    assert b(1, 2) == 60


def test_const_row_accessor_is_read_only():
    b = make_ramp(4, 3)
    row = b.row(2, readonly=True)
    assert isinstance(row, ConstRowAccessor)
    assert row[0] == 8
    with pytest.raises(TypeError):
        row[0] = 1  # type: ignore[index]


def test_setitem_converts_without_clamp():
    b = make_band(2, 2, dtype="uint8", nodata=0, fill=1)
    b[0, 1] = 7.6
    assert b(0, 1) == 8
    with pytest.raises(ValueOutOfRangeError):
        b[1, 1] = 256
    assert b(1, 1) == 1
    with pytest.raises(TypeError):
        b[0] = 3


def test_set_at_and_at():
    b = make_band(3, 2)
    b.set_at(4, 9.5)
    assert b.at(4) == 10
    assert b(1, 1) == 10
    with pytest.raises(IndexOutOfRangeError):
        b.set_at(6, 1)
    with pytest.raises(IndexOutOfRangeError):
        b.at(-1)
    with pytest.raises(ValueOutOfRangeError):
        b.set_at(0, 2**40)


def test_front_back():
    b = make_ramp(4, 3)
    assert b.front() == 0 and b.back() == 11
    with pytest.raises(IndexOutOfRangeError):
        Band().front()
    with pytest.raises(IndexOutOfRangeError):
        Band().back()


def test_insert_is_legacy_and_uses_row_times_col():
    b = make_ramp(4, 3)
    with pytest.warns(DeprecationWarning):
        b.insert(2, 3, 99)
    assert b.size() == 13
    assert b.at(6) == 99  # r*c, no r*width + c
    assert (b.width, b.height) == (4, 3)
    with pytest.raises(InvalidConfigurationError):
        b.as_array()


def test_insert_out_of_storage():
    b = make_band(2, 2)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        with pytest.raises(IndexOutOfRangeError):
            b.insert(3, 3, 1)
    assert b.size() == 4


def test_iteration_is_row_major_and_restartable():
    b = make_ramp(3, 2)
    assert [int(v) for v in b] == [0, 1, 2, 3, 4, 5]
    assert [int(v) for v in b] == [0, 1, 2, 3, 4, 5]
    assert len(b) == 6


def test_as_array_is_read_only_view():
    b = make_ramp(3, 2)
    a = b.as_array()
    assert a.shape == (2, 3)
    with pytest.raises(ValueError):
        a[0, 0] = 5
    c = b.to_array()
    c[0, 0] = 5
    assert b(0, 0) == 0


# ---------- metadatos ----------
def test_scale_y_is_never_positive():
    b = make_band()
    b.scale_y = 30.0
    assert b.scale_y == -30.0
    b.scale_y = -2.0
    assert b.scale_y == -2.0
    b.scale(5.0)
    assert (b.scale_x, b.scale_y) == (5.0, -5.0)
    b.scale(1.0, 3.0)
    assert (b.scale_x, b.scale_y) == (1.0, -3.0)


def test_corner_coordinates():
    b = make_ramp(4, 3, origin=(100.0, 200.0), px=10.0)
    assert b.upper_left_x == 100.0 and b.upper_left_y == 200.0
    assert b.upper_right_x == 140.0
    assert b.upper_right_y == 200.0
    assert b.lower_left_x == 100.0
    assert b.lower_left_y == 170.0
    assert b.skew_x == 0.0 and b.skew_y == 0.0
    assert b.geotransform() == (100.0, 10.0, 0.0, 200.0, 0.0, -10.0)
    bd = b.bounds()
    assert (bd.minx, bd.miny, bd.maxx, bd.maxy) == (100.0, 170.0, 140.0, 200.0)


def test_spatial_reference_id():
    b = make_band()
    b.spatial_reference_id = 4326
    assert b.spatial_reference_id == 4326
    with pytest.raises(ValueOutOfRangeError):
        b.spatial_reference_id = 2**31
    with pytest.raises(TypeError):
        b.spatial_reference_id = 43.2  # type: ignore[assignment]


def test_metadata_roundtrip():
    b = make_ramp()
    meta = b.metadata()
    assert isinstance(meta, GeoMetadata)
    assert meta.scale_y == -10.0 and meta.spatial_reference_id == 32719
    other = make_band()
    other.apply_metadata(meta)
    assert other.geotransform() == b.geotransform()
    assert GeoMetadata(scale_y=4.0).scale_y == -4.0


def test_nodata_setter_converts():
    b = make_band(dtype="int16")
    b.nodata_value = 3.6
    assert b.nodata_value == 4
    with pytest.raises(ValueOutOfRangeError):
        b.nodata_value = 40000
    assert b.nodata_value == 4


# ---------- copias entre dtypes ----------
def test_from_band_converts_elements_and_nodata():
    src = Band(3, 2, -1.0, 2.6, dtype="float64")
    src.set_at(0, 1000.0)
    src.origin_x = 5.0
    src.scale(2.0)
    dst = Band.from_band(src, "int16")
    assert dst.dtype == np.int16
    assert dst.nodata_value == -1
    assert dst.at(0) == 1000 and dst.at(1) == 3
    assert dst.origin_x == 5.0 and dst.scale_y == -2.0


def test_from_band_out_of_range_fails_or_clamps():
    src = Band(2, 1, 0.0, 300.0, dtype="float32")
    with pytest.raises(ValueOutOfRangeError):
        src.astype("uint8")
    dst = src.astype("uint8", clamp=True)
    assert [int(v) for v in dst] == [255, 255]


def test_assign_keeps_target_on_failure():
    dst = make_ramp(dtype="uint8", nodata=255)
    before = dst.copy()
    src = Band(2, 2, 0, -5, dtype="int32")
    with pytest.raises(ValueOutOfRangeError):
        dst.assign(src)
    assert dst == before
    dst.assign(src, clamp=True)
    assert dst.dtype == np.uint8
    assert (dst.width, dst.height) == (2, 2)
    assert [int(v) for v in dst] == [0, 0, 0, 0]


def test_copy_is_deep():
    b = make_ramp()
    for c in (b.copy(), copy.copy(b), copy.deepcopy(b)):
        assert c == b
        c.set_at(0, 42)
        assert b.at(0) == 0


def test_take_moves_ownership():
    b = make_ramp(4, 3)
    moved = b.take()
    assert moved.size() == 12 and moved.at(11) == 11
    assert moved.spatial_reference_id == 32719
    assert (b.width, b.height, b.size()) == (0, 0, 0)


def test_equality():
    a = make_ramp()
    assert a == make_ramp()
    assert a != make_ramp(dtype="int64")
    c = make_ramp()
    c.origin_x = 0.0
    assert a != c
    n1 = Band(2, 2, float("nan"), 1.0)
    n2 = Band(2, 2, float("nan"), 1.0)
    assert n1 == n2
