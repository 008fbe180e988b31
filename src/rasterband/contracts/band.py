# src/rasterband/contracts/band.py
"""
Band: grilla 2D densa (row-major) de un único dtype numérico, con valor
nodata, georreferencia y estadísticos que ignoran nodata.

Reglas:
  • Todo valor que entra a la grilla pasa por limits.convert() (sin clamp
    salvo que el llamador lo pida en copias entre dtypes).
  • El elemento (r, c) vive en el índice lineal r*width + c.
  • scale_y siempre se observa <= 0.
  • Ante un fallo la banda queda intacta (excepto insert(), que es legado).

Contrato de los accesores de fila: band[r] devuelve un RowAccessor que
referencia a la banda. No debe usarse después de reemplazar el
almacenamiento (take, assign, copy_props, insert); no se verifica en
tiempo de ejecución.
"""

from __future__ import annotations

import logging
import operator
import warnings
from typing import Any, Iterator, Optional, Tuple

import numpy as np

from ..config import BoundsPolicy, get_settings
from .core import Extent
from .errors import IndexOutOfRangeError, InvalidConfigurationError, UndefinedStatisticError
from .geo import Bounds, GeoMetadata, GeoTransform, geotransform_bounds
from .limits import DTypeLike, as_dtype, convert, convert_array, is_arithmetic, lowest

logger = logging.getLogger(__name__)


def _dimension(name: str, v: Any) -> int:
    if isinstance(v, (bool, np.bool_)) or not isinstance(v, (int, np.integer)):
        raise TypeError(f"{name} debe ser entero, recibido {type(v).__name__}")
    if v < 0:
        raise InvalidConfigurationError(f"{name} no puede ser negativo: {v}")
    return int(v)


def _coord(name: str, v: Any) -> float:
    if not is_arithmetic(v):
        raise TypeError(f"{name} debe ser numérico, recibido {type(v).__name__}")
    return float(v)


class Band:
    """
    Banda raster tipada por `dtype`.

    Band()                        → 0×0
    Band(w, h)                    → nodata = mínimo del dtype, relleno = nodata
    Band(w, h, nodata)            → relleno = nodata
    Band(w, h, nodata, fill)
    """

    def __init__(
        self,
        width: int = 0,
        height: int = 0,
        nodata: Any = None,
        fill: Any = None,
        *,
        dtype: DTypeLike = "float64",
        bounds_policy: BoundsPolicy | str | None = None,
    ) -> None:
        dt = as_dtype(dtype)
        w = _dimension("width", width)
        h = _dimension("height", height)
        nodata_v = lowest(dt) if nodata is None else convert(nodata, dt)
        fill_v = nodata_v if fill is None else convert(fill, dt)

        self._dtype: np.dtype = dt
        self._width: int = w
        self._height: int = h
        self._origin_x: float = 0.0
        self._origin_y: float = 0.0
        self._scale_x: float = 0.0
        self._scale_y: float = 0.0
        self._srid: int = 0
        self._nodata: np.generic = nodata_v
        self._data: np.ndarray = np.full(w * h, fill_v, dtype=dt)
        self._policy: BoundsPolicy = (
            get_settings().bounds_policy if bounds_policy is None else BoundsPolicy(bounds_policy)
        )

    # ------------------------------------------------------------------
    # Construcción entre dtypes / copia / traspaso
    # ------------------------------------------------------------------
    @classmethod
    def from_band(cls, other: Band, dtype: DTypeLike | None = None, clamp: bool = False) -> Band:
        """
        Nueva banda con todos los metadatos de `other` y cada elemento (y el
        nodata) convertidos a `dtype`. Si algún valor no es representable y
        clamp=False, la construcción completa falla.
        """
        if not isinstance(other, Band):
            raise TypeError(f"se esperaba Band, recibido {type(other).__name__}")
        dt = other._dtype if dtype is None else as_dtype(dtype)
        nodata_v = convert(other._nodata, dt, clamp)
        data = convert_array(other._data, dt, clamp)
        if dt != other._dtype:
            logger.debug("Band %s → %s (%d celdas, clamp=%s)", other._dtype.name, dt.name, data.size, clamp)
        out = cls(dtype=dt, bounds_policy=other._policy)
        out._take_geometry(other)
        out._nodata = nodata_v
        out._data = data
        return out

    def astype(self, dtype: DTypeLike, clamp: bool = False) -> Band:
        return Band.from_band(self, dtype, clamp)

    def copy(self) -> Band:
        return Band.from_band(self)

    def __copy__(self) -> Band:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> Band:
        return self.copy()

    def assign(self, other: Band, clamp: bool = False) -> Band:
        """
        Asignación desde una banda de otro dtype conservando el dtype propio.
        Las conversiones se calculan antes de tocar `self`.
        """
        if not isinstance(other, Band):
            raise TypeError(f"se esperaba Band, recibido {type(other).__name__}")
        nodata_v = convert(other._nodata, self._dtype, clamp)
        data = convert_array(other._data, self._dtype, clamp)
        self._take_geometry(other)
        self._nodata = nodata_v
        self._data = data
        return self

    def take(self) -> Band:
        """
        Traspaso de propiedad: devuelve una banda nueva dueña del
        almacenamiento y deja a `self` vacía (0×0, metadatos en cero).
        """
        out = Band(dtype=self._dtype, bounds_policy=self._policy)
        out._take_geometry(self)
        out._nodata = self._nodata
        out._data = self._data
        self._reset()
        return out

    def _take_geometry(self, other: Band) -> None:
        self._width = other._width
        self._height = other._height
        self._origin_x = other._origin_x
        self._origin_y = other._origin_y
        self._scale_x = other._scale_x
        self._scale_y = other._scale_y
        self._srid = other._srid

    def _reset(self) -> None:
        self._width = self._height = 0
        self._origin_x = self._origin_y = 0.0
        self._scale_x = self._scale_y = 0.0
        self._srid = 0
        self._nodata = lowest(self._dtype)
        self._data = np.empty(0, dtype=self._dtype)

    # ------------------------------------------------------------------
    # Dimensiones
    # ------------------------------------------------------------------
    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def extent(self) -> Extent:
        return Extent(width=self._width, height=self._height)

    @property
    def bounds_policy(self) -> BoundsPolicy:
        return self._policy

    @bounds_policy.setter
    def bounds_policy(self, v: BoundsPolicy | str) -> None:
        self._policy = BoundsPolicy(v)

    def size(self) -> int:
        return int(self._data.size)

    def __len__(self) -> int:
        return self.size()

    # ------------------------------------------------------------------
    # Índices
    # ------------------------------------------------------------------
    def in_row_bounds(self, r: int) -> bool:
        return 0 <= r < self._height

    def in_col_bounds(self, c: int) -> bool:
        return 0 <= c < self._width

    def out_of_range(self, r: int, c: int) -> bool:
        # LEGACY: solo si AMBOS ejes están fuera (se conserva el comportamiento histórico)
        if self._policy is BoundsPolicy.STRICT:
            return not self.in_row_bounds(r) or not self.in_col_bounds(c)
        return not self.in_row_bounds(r) and not self.in_col_bounds(c)

    def linear_index(self, r: int, c: int) -> int:
        r = operator.index(r)
        c = operator.index(c)
        if self.out_of_range(r, c):
            raise IndexOutOfRangeError("Band.linear_index", (r, c), (self._height, self._width))
        return r * self._width + c

    def row_col(self, i: int) -> Tuple[int, int]:
        i = operator.index(i)
        if i < 0 or i >= self._data.size or self._width == 0:
            raise IndexOutOfRangeError("Band.row_col", i, self._data.size)
        r, c = divmod(i, self._width)
        return r, c

    def _storage_index(self, i: int, where: str) -> int:
        i = operator.index(i)
        if i < 0 or i >= self._data.size:
            raise IndexOutOfRangeError(where, i, self._data.size)
        return i

    # ------------------------------------------------------------------
    # Acceso a elementos
    # ------------------------------------------------------------------
    def __call__(self, r: int, c: int) -> np.generic:
        return self._data[self._storage_index(self.linear_index(r, c), "Band.__call__")]

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, tuple):
            if len(key) != 2:
                raise TypeError("se indexa como band[r, c] o band[r][c]")
            return self(*key)
        return self.row(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError("solo se asignan celdas: band[r, c] = v")
        i = self._storage_index(self.linear_index(*key), "Band.__setitem__")
        self._data[i] = convert(value, self._dtype)

    def row(self, r: int, readonly: bool = False) -> RowAccessor | ConstRowAccessor:
        r = operator.index(r)
        if not self.in_row_bounds(r):
            raise IndexOutOfRangeError("Band.row", r, self._height)
        return ConstRowAccessor(self, r) if readonly else RowAccessor(self, r)

    def set_at(self, i: int, value: Any) -> None:
        i = self._storage_index(i, "Band.set_at")
        self._data[i] = convert(value, self._dtype)

    def at(self, i: int) -> np.generic:
        return self._data[self._storage_index(i, "Band.at")]

    def front(self) -> np.generic:
        return self._data[self._storage_index(0, "Band.front")]

    def back(self) -> np.generic:
        return self._data[self._storage_index(self._data.size - 1, "Band.back")]

    def insert(self, r: int, c: int, value: Any) -> None:
        """
        LEGADO / inseguro: inserta `value` antes de la posición r*c (no
        r*width + c) y crece el almacenamiento en uno sin tocar width/height.
        Tras llamarlo size() != width*height.
        """
        warnings.warn(
            "Band.insert inserta en r*c y desalinea width/height; no usar en código nuevo",
            DeprecationWarning,
            stacklevel=2,
        )
        pos = operator.index(r) * operator.index(c)
        if pos < 0 or pos > self._data.size:
            raise IndexOutOfRangeError("Band.insert", pos, self._data.size)
        v = convert(value, self._dtype)
        self._data = np.insert(self._data, pos, v)
        logger.debug("Band.insert legado en posición %d; size=%d, width*height=%d",
                     pos, self._data.size, self._width * self._height)

    def __iter__(self) -> Iterator[np.generic]:
        yield from self._data

    def as_array(self) -> np.ndarray:
        """Vista (height, width) de solo lectura sobre el almacenamiento."""
        view = self._grid().view()
        view.setflags(write=False)
        return view

    def to_array(self) -> np.ndarray:
        return self._grid().copy()

    def _grid(self) -> np.ndarray:
        if self._data.size != self._width * self._height:
            raise InvalidConfigurationError(
                f"almacenamiento ({self._data.size}) no calza con {self._width}x{self._height}"
            )
        return self._data.reshape(self._height, self._width)

    # ------------------------------------------------------------------
    # Georreferencia
    # ------------------------------------------------------------------
    @property
    def origin_x(self) -> float:
        return self._origin_x

    @origin_x.setter
    def origin_x(self, v: float) -> None:
        self._origin_x = _coord("origin_x", v)

    @property
    def origin_y(self) -> float:
        return self._origin_y

    @origin_y.setter
    def origin_y(self, v: float) -> None:
        self._origin_y = _coord("origin_y", v)

    @property
    def upper_left_x(self) -> float:
        return self._origin_x

    @property
    def upper_left_y(self) -> float:
        return self._origin_y

    @property
    def upper_right_x(self) -> float:
        return self._origin_x + self._scale_x * self._width

    @property
    def upper_right_y(self) -> float:
        return self._origin_y

    @property
    def lower_left_x(self) -> float:
        return self._origin_x

    @property
    def lower_left_y(self) -> float:
        return self._origin_y + self.scale_y * self._height

    @property
    def spatial_reference_id(self) -> int:
        return self._srid

    @spatial_reference_id.setter
    def spatial_reference_id(self, v: int) -> None:
        self._srid = int(convert(operator.index(v), "int32"))

    @property
    def scale_x(self) -> float:
        return self._scale_x

    @scale_x.setter
    def scale_x(self, v: float) -> None:
        self._scale_x = _coord("scale_x", v)

    @property
    def scale_y(self) -> float:
        return -self._scale_y if self._scale_y > 0 else self._scale_y

    @scale_y.setter
    def scale_y(self, v: float) -> None:
        v = _coord("scale_y", v)
        self._scale_y = -v if v > 0 else v

    def scale(self, x: float, y: Optional[float] = None) -> None:
        """Fija ambos tamaños de celda; con un solo valor se usa en X e Y."""
        self.scale_x = x
        self.scale_y = x if y is None else y

    @property
    def skew_x(self) -> float:
        return 0.0

    @property
    def skew_y(self) -> float:
        return 0.0

    def geotransform(self) -> GeoTransform:
        return (self._origin_x, self._scale_x, self.skew_x, self._origin_y, self.skew_y, self.scale_y)

    def bounds(self) -> Bounds:
        return geotransform_bounds(self.geotransform(), self._width, self._height)

    def metadata(self) -> GeoMetadata:
        return GeoMetadata(
            origin_x=self._origin_x,
            origin_y=self._origin_y,
            scale_x=self._scale_x,
            scale_y=self.scale_y,
            spatial_reference_id=self._srid,
        )

    def apply_metadata(self, meta: GeoMetadata) -> None:
        self._origin_x = meta.origin_x
        self._origin_y = meta.origin_y
        self._scale_x = meta.scale_x
        self.scale_y = meta.scale_y
        self._srid = meta.spatial_reference_id

    # ------------------------------------------------------------------
    # Nodata
    # ------------------------------------------------------------------
    @property
    def nodata_value(self) -> np.generic:
        return self._nodata

    @nodata_value.setter
    def nodata_value(self, v: Any) -> None:
        self._nodata = convert(v, self._dtype)

    def _valid_mask(self) -> np.ndarray:
        # nodata NaN: las celdas NaN cuentan como nodata
        if self._dtype.kind == "f" and np.isnan(self._nodata):
            return ~np.isnan(self._data)
        return self._data != self._nodata

    # ------------------------------------------------------------------
    # Estadísticos
    # ------------------------------------------------------------------
    def count(self) -> int:
        return int(np.count_nonzero(self._valid_mask()))

    def min(self) -> np.generic:
        """Mínimo ignorando nodata. Si todo es nodata devuelve el nodata."""
        if self._data.size == 0:
            raise UndefinedStatisticError("Band.min: banda vacía")
        vals = self._data[self._valid_mask()]
        return self._nodata if vals.size == 0 else vals.min()

    def max(self) -> np.generic:
        """Máximo ignorando nodata. Si todo es nodata devuelve el nodata."""
        if self._data.size == 0:
            raise UndefinedStatisticError("Band.max: banda vacía")
        vals = self._data[self._valid_mask()]
        return self._nodata if vals.size == 0 else vals.max()

    def sum(self) -> np.generic:
        # aritmética del dtype: los enteros se desbordan sin aviso
        return self._data[self._valid_mask()].sum(dtype=self._dtype)

    def avg(self) -> float:
        n = self.count()
        if n == 0:
            raise UndefinedStatisticError("Band.avg: no hay elementos válidos (count() == 0)")
        return float(self.sum()) / n

    # ------------------------------------------------------------------
    # Mutación
    # ------------------------------------------------------------------
    def init(self, value: Any) -> None:
        self._data.fill(convert(value, self._dtype))

    def scale_multiply(self, factor: Any) -> Band:
        """Multiplica en sitio las celdas válidas por convert(factor); nodata queda igual."""
        f = convert(factor, self._dtype)
        mask = self._valid_mask()
        with np.errstate(over="ignore"):
            np.multiply(self._data, f, out=self._data, where=mask)
        return self

    def __imul__(self, factor: Any) -> Band:
        return self.scale_multiply(factor)

    def transpose(self) -> Band:
        out = self.copy()
        out._width, out._height = self._height, self._width
        out._data = np.ascontiguousarray(self._grid().T).ravel()
        return out

    def copy_props(self, other: Band, nodata: Any = None, fill: Any = None) -> None:
        """
        Copia extensión y georreferencia de `other` (de cualquier dtype) y
        reasigna el almacenamiento a other.size() celdas con convert(fill).
        No copia valores. nodata por defecto: el de `other` convertido.
        """
        if not isinstance(other, Band):
            raise TypeError(f"se esperaba Band, recibido {type(other).__name__}")
        nodata_v = convert(other._nodata if nodata is None else nodata, self._dtype)
        fill_v = nodata_v if fill is None else convert(fill, self._dtype)
        data = np.full(other._data.size, fill_v, dtype=self._dtype)
        self._take_geometry(other)
        self._nodata = nodata_v
        self._data = data

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Band):
            return NotImplemented
        if self._dtype != other._dtype or self.extent != other.extent:
            return False
        if self.geotransform() != other.geotransform() or self._srid != other._srid:
            return False
        floating = self._dtype.kind == "f"
        if not np.array_equal(np.asarray(self._nodata), np.asarray(other._nodata), equal_nan=floating):
            return False
        return bool(np.array_equal(self._data, other._data, equal_nan=floating))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (f"Band(width={self._width}, height={self._height}, "
                f"dtype='{self._dtype.name}', nodata={self._nodata!r})")


class RowAccessor:
    """Vista (banda, fila) para band[r][c]; lectura y escritura."""

    def __init__(self, band: Band, row: int) -> None:
        self._band = band
        self._row = row

    @property
    def row(self) -> int:
        return self._row

    def __getitem__(self, c: int) -> np.generic:
        return self._band(self._row, c)

    def __setitem__(self, c: int, value: Any) -> None:
        self._band[self._row, c] = value


class ConstRowAccessor:
    """Vista (banda, fila) de solo lectura."""

    def __init__(self, band: Band, row: int) -> None:
        self._band = band
        self._row = row

    @property
    def row(self) -> int:
        return self._row

    def __getitem__(self, c: int) -> np.generic:
        return self._band(self._row, c)


__all__ = ["Band", "RowAccessor", "ConstRowAccessor"]
