import numpy as np
import pytest

from rasterband.contracts.band import Band
from rasterband.contracts.core import BandSpec
from rasterband.contracts.errors import IndexOutOfRangeError, InvalidConfigurationError
from rasterband.contracts.raster import Raster, validate_extent_compat


def test_raster_from_bands_of_mixed_dtypes():
    r = Raster(
        Band(20, 20, 3.0, 6.765, dtype="float32"),
        Band(20, 20, 40.501, 60.666, dtype="int32"),
    )
    assert (r.width, r.height, r.size(), len(r)) == (20, 20, 2, 2)
    assert r.band(0)(0, 10) == np.float32(6.765)
    assert r.band(1).nodata_value == 41
    assert r[1][0][10] == 61
    assert r.dtypes == (np.dtype("float32"), np.dtype("int32"))
    assert r.same_size()


def test_raster_extent_mismatch_fails():
    with pytest.raises(InvalidConfigurationError):
        Raster(Band(20, 20, dtype="float32"), Band(20, 21, dtype="int32"))
    with pytest.raises(ValueError):
        Raster(Band(2, 2), Band(3, 2))


def test_raster_from_values():
    r = Raster.from_values(20, 20, ["int32", "float32", "float64"], (6, 7.2, 5.5), (7, 8.3, 6.6))
    assert [b.nodata_value for b in r] == [6, np.float32(7.2), 5.5]
    assert r.band(0)(0, 10) == 7
    assert r.band(1)(0, 10) == np.float32(8.3)
    assert r.band(2)(0, 10) == 6.6


def test_raster_from_values_arity_mismatch():
    with pytest.raises(InvalidConfigurationError):
        Raster.from_values(2, 2, ["int32", "float32"], nodatas=(1,))


def test_raster_from_specs():
    specs = [BandSpec(dtype="uint8", nodata=0, fill=1), BandSpec(dtype="float32")]
    r = Raster.from_specs(3, 2, specs)
    assert r.band(0).count() == 6
    assert r.band(1).nodata_value == np.finfo(np.float32).min


def test_raster_empty_and_default_band():
    r = Raster.empty(["int32"])
    assert (r.width, r.height, r.size()) == (0, 0, 1)
    assert r.band() is r.band(0)
    assert Raster().size() == 0 and Raster().width == 0


def test_raster_band_index_out_of_range():
    r = Raster.empty(["int32"])
    with pytest.raises(IndexOutOfRangeError):
        r.band(1)
    with pytest.raises(IndexOutOfRangeError):
        r[-1]


def test_raster_bands_are_mutable_tuple_is_not():
    r = Raster.from_values(2, 2, ["int32"], (6,), (7,))
    r.band(0)[0, 0] = 8
    assert r.band(0)(0, 0) == 8
    with pytest.raises(AttributeError):
        r.bands = ()  # type: ignore[misc]


def test_raster_append():
    r = Raster.from_values(3, 3, ["int16"])
    r2 = r.append(Band(3, 3, dtype="float64"))
    assert r.size() == 1 and r2.size() == 2
    with pytest.raises(InvalidConfigurationError):
        r.append(Band(4, 3))


def test_raster_rejects_non_band():
    with pytest.raises(TypeError):
        Raster(np.zeros((2, 2)))  # type: ignore[arg-type]


def test_validate_extent_compat():
    validate_extent_compat(Band(2, 3), Band(2, 3, dtype="uint8"))
    with pytest.raises(InvalidConfigurationError):
        validate_extent_compat(Band(2, 3), Band(3, 2))
