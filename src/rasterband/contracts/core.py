# src/rasterband/contracts/core.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator

from .errors import (
    InvalidConfigurationError,
    OutOfRangeError,
    RasterBandError,
    UndefinedStatisticError,
)
from ..config import get_settings
from .geo import DTypeStr

Scalar = Union[int, float]

# -------------------------
# Especificación de banda
# -------------------------
class BandSpec(BaseModel):
    """
    Parámetros de construcción de una banda dentro de un Raster.
    nodata/fill en None → defaults de Band (mínimo del dtype / igual a nodata).
    """
    model_config = ConfigDict(frozen=True)
    dtype: DTypeStr = Field(default_factory=lambda: get_settings().default_dtype)
    nodata: Optional[Scalar] = None
    fill: Optional[Scalar] = None

    @field_validator("nodata", "fill", mode="before")
    @classmethod
    def _arithmetic(cls, v: Any) -> Any:
        if isinstance(v, str):
            raise ValueError("nodata/fill deben ser numéricos, no texto")
        return v


class Extent(BaseModel):
    model_config = ConfigDict(frozen=True)
    width: NonNegativeInt = 0
    height: NonNegativeInt = 0

    @property
    def cells(self) -> int:
        return self.width * self.height

# -------------------------
# Resultados explícitos
# -------------------------
class ErrorKind(str, Enum):
    OUT_OF_RANGE = "out_of_range"
    INVALID_CONFIGURATION = "invalid_configuration"
    UNDEFINED = "undefined"


def _kind_of(exc: RasterBandError) -> ErrorKind:
    if isinstance(exc, OutOfRangeError):
        return ErrorKind.OUT_OF_RANGE
    if isinstance(exc, InvalidConfigurationError):
        return ErrorKind.INVALID_CONFIGURATION
    if isinstance(exc, UndefinedStatisticError):
        return ErrorKind.UNDEFINED
    raise TypeError(f"error sin categoría: {type(exc).__name__}")


class BandFailure(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: ErrorKind
    message: str
    detail: str | None = Field(default=None, description="nombre de la excepción original")


T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Éxito (value) o fallo (error) de una operación, sin excepciones."""
    value: Optional[T] = None
    error: Optional[BandFailure] = None
    exception: Optional[RasterBandError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.exception is not None:
            raise self.exception
        return self.value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        return default if self.error is not None else self.value  # type: ignore[return-value]


def attempt(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    """
    Ejecuta `fn` y convierte los RasterBandError en un Outcome fallido.
    Cualquier otra excepción (TypeError por contrato, bugs) se propaga.
    """
    try:
        return Outcome(value=fn(*args, **kwargs))
    except RasterBandError as e:
        failure = BandFailure(kind=_kind_of(e), message=e.message, detail=type(e).__name__)
        return Outcome(error=failure, exception=e)


__all__ = [
    "Scalar",
    "BandSpec",
    "Extent",
    "ErrorKind",
    "BandFailure",
    "Outcome",
    "attempt",
]
