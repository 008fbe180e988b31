# src/rasterband/contracts/limits.py
"""
Adaptador de límites numéricos.

convert() lleva un valor aritmético de cualquier tipo a un dtype NumPy
destino garantizando que el resultado sea representable:

  • destino entero + origen flotante → redondeo "half away from zero"
    (igual que std::round / round() de C) antes de chequear rango.
  • valor < mínimo del destino → mínimo si clamp, si no ValueOutOfRangeError.
  • valor > máximo del destino → máximo si clamp, si no ValueOutOfRangeError.
  • mismo dtype → identidad (un float de Python cuenta como float64).

Las comparaciones se hacen con int/float de Python (precisión arbitraria y
comparación int/float exacta), así que -1 vs 0 de uint8 o 2**63 vs int64
nunca se desbordan.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any, Tuple, Union

import numpy as np
import numpy.typing as npt

from .errors import ValueOutOfRangeError
from .geo import SUPPORTED_DTYPES

logger = logging.getLogger(__name__)

Number = Union[int, float]
DTypeLike = Union[str, np.dtype, type]


def as_dtype(dtype: DTypeLike) -> np.dtype:
    """Normaliza un dtype y verifica que sea aritmético soportado."""
    try:
        dt = np.dtype(dtype)
    except TypeError as e:
        raise TypeError(f"dtype no reconocido: {dtype!r}") from e
    if dt.name not in SUPPORTED_DTYPES:
        raise TypeError(f"dtype {dt.name} no soportado; usa uno de {SUPPORTED_DTYPES}")
    return dt


@lru_cache(maxsize=None)
def _limits(dt: np.dtype) -> Tuple[Number, Number]:
    if dt.kind in "iu":
        info = np.iinfo(dt)
        return int(info.min), int(info.max)
    finfo = np.finfo(dt)
    return float(finfo.min), float(finfo.max)


def lowest(dtype: DTypeLike) -> np.generic:
    dt = as_dtype(dtype)
    return dt.type(_limits(dt)[0])


def highest(dtype: DTypeLike) -> np.generic:
    dt = as_dtype(dtype)
    return dt.type(_limits(dt)[1])


def is_integral(dtype: DTypeLike) -> bool:
    return as_dtype(dtype).kind in "iu"


def is_arithmetic(value: Any) -> bool:
    return isinstance(value, (bool, int, float, np.bool_, np.integer, np.floating))


def _as_number(value: Any) -> Tuple[Number, bool]:
    # bool antes que int: bool es subclase de int
    if isinstance(value, (bool, np.bool_)):
        return int(value), False
    if isinstance(value, (int, np.integer)):
        return int(value), False
    if isinstance(value, (float, np.floating)):
        return float(value), True
    raise TypeError(f"se requiere un valor aritmético, recibido {type(value).__name__}: {value!r}")


def _round_half_away(x: float) -> Number:
    if not math.isfinite(x):
        return x
    a = abs(x)
    f = math.floor(a)
    r = f + 1 if a - f >= 0.5 else f
    return -r if x < 0 else r


def _round_half_away_array(arr: np.ndarray) -> np.ndarray:
    a = np.abs(arr)
    f = np.floor(a)
    r = np.where(a - f >= 0.5, f + 1, f)
    return np.copysign(r, arr)


def convert(value: Any, dtype: DTypeLike, clamp: bool = False) -> np.generic:
    """
    Convierte `value` al dtype destino.

    Lanza ValueOutOfRangeError si no es representable y clamp=False;
    con clamp=True satura al mínimo/máximo del destino. NaN hacia un
    entero no tiene representación posible y falla siempre.
    TypeError si `value` no es aritmético.
    """
    dt = as_dtype(dtype)
    if isinstance(value, np.generic) and value.dtype == dt:
        return value
    # float de Python es binary64: identidad hacia float64, incluidos ±inf
    if dt == np.float64 and isinstance(value, float):
        return dt.type(value)
    num, is_float = _as_number(value)
    lo, hi = _limits(dt)

    if is_float and dt.kind in "iu":
        if math.isnan(num):
            raise ValueOutOfRangeError(value, dt.name, lo, hi, reason="NaN no es representable")
        num = _round_half_away(num)

    if num < lo:
        if clamp:
            return dt.type(lo)
        raise ValueOutOfRangeError(value, dt.name, lo, hi)
    if num > hi:
        if clamp:
            return dt.type(hi)
        raise ValueOutOfRangeError(value, dt.name, lo, hi)
    return dt.type(num)


def convert_array(values: npt.ArrayLike, dtype: DTypeLike, clamp: bool = False) -> np.ndarray:
    """
    Versión vectorizada de convert(). Devuelve siempre un array nuevo
    (nunca una vista de `values`) con la misma forma.
    """
    dt = as_dtype(dtype)
    arr = np.asarray(values)
    if arr.dtype.kind not in "biuf":
        raise TypeError(f"se requiere un array aritmético, recibido dtype {arr.dtype}")
    if arr.dtype == dt:
        return arr.copy()
    if arr.size == 0:
        return arr.astype(dt)

    lo, hi = _limits(dt)
    src = arr
    if arr.dtype.kind == "f":
        nan_mask = np.isnan(arr)
        if dt.kind in "iu":
            if nan_mask.any():
                raise ValueOutOfRangeError(float("nan"), dt.name, lo, hi, reason="NaN no es representable")
            src = _round_half_away_array(arr)
            finite = src
        else:
            finite = src[~nan_mask]
    else:
        finite = src

    if finite.size == 0:
        return src.astype(dt)

    vmin = finite.min().item()
    vmax = finite.max().item()
    if vmin >= lo and vmax <= hi:
        return src.astype(dt)
    if not clamp:
        raise ValueOutOfRangeError(vmin if vmin < lo else vmax, dt.name, lo, hi)

    logger.debug("clamp a %s: rango origen [%s, %s] excede [%s, %s]", dt.name, vmin, vmax, lo, hi)
    flat = src.ravel().tolist()
    out = np.fromiter((convert(v, dt, clamp=True) for v in flat), dtype=dt, count=len(flat))
    return out.reshape(src.shape)


__all__ = [
    "DTypeLike",
    "as_dtype",
    "lowest",
    "highest",
    "is_integral",
    "is_arithmetic",
    "convert",
    "convert_array",
]
