# src/rasterband/contracts/errors.py
"""
Jerarquía de excepciones de rasterband.

    RasterBandError
    ├── OutOfRangeError
    │   ├── ValueOutOfRangeError      (conversión numérica fuera de rango)
    │   └── IndexOutOfRangeError      (fila/columna/índice lineal inválido)
    ├── InvalidConfigurationError     (parámetros de construcción inconsistentes)
    └── UndefinedStatisticError       (avg/min/max sin datos válidos)

Cada subclase hereda además del builtin equivalente (OverflowError,
IndexError, ValueError, ZeroDivisionError) para que el código que ya
captura los builtins siga funcionando.
"""

from __future__ import annotations

from typing import Any, Optional


class RasterBandError(Exception):
    """Base de todos los errores del paquete."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class OutOfRangeError(RasterBandError):
    """Valor o índice fuera del dominio válido."""


class ValueOutOfRangeError(OutOfRangeError, OverflowError):
    """
    Un valor no es representable en el dtype destino y no se pidió clamp.
    Conserva el valor ofensivo y los límites del destino.
    """

    def __init__(self, value: Any, dtype: str, lo: Any = None, hi: Any = None, reason: Optional[str] = None) -> None:
        if reason is None:
            reason = "valor demasiado pequeño" if (lo is not None and _lt(value, lo)) else "valor demasiado grande"
        super().__init__(f"{reason} para {dtype}: {value!r} (rango [{lo}, {hi}])")
        self.value = value
        self.dtype: str = dtype
        self.lo = lo
        self.hi = hi


class IndexOutOfRangeError(OutOfRangeError, IndexError):
    """Fila, columna o índice lineal fuera del almacenamiento."""

    def __init__(self, where: str, index: Any, limit: Any) -> None:
        super().__init__(f"{where}: índice fuera de rango {index!r} (límite {limit!r})")
        self.where: str = where
        self.index = index
        self.limit = limit


class InvalidConfigurationError(RasterBandError, ValueError):
    """Parámetros de banda/raster inconsistentes (p.ej. extensiones distintas)."""


class UndefinedStatisticError(RasterBandError, ZeroDivisionError):
    """Estadístico indefinido: no hay elementos válidos (todo nodata o vacío)."""


def _lt(a: Any, b: Any) -> bool:
    try:
        return bool(a < b)
    except TypeError:
        return False


__all__ = [
    "RasterBandError",
    "OutOfRangeError",
    "ValueOutOfRangeError",
    "IndexOutOfRangeError",
    "InvalidConfigurationError",
    "UndefinedStatisticError",
]
