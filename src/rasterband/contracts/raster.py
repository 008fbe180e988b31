# src/rasterband/contracts/raster.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence, Tuple

import numpy as np

from .band import Band
from .core import BandSpec, Extent
from .errors import IndexOutOfRangeError, InvalidConfigurationError
from .limits import DTypeLike

logger = logging.getLogger(__name__)


def validate_extent_compat(a: Band, b: Band) -> None:
    if a.width != b.width or a.height != b.height:
        raise InvalidConfigurationError(
            f"Dimensiones no coinciden: {a.width}x{a.height} vs {b.width}x{b.height}"
        )


@dataclass(frozen=True, init=False)
class Raster:
    """
    Colección de aridad fija de bandas con la misma extensión; cada banda
    con su propio dtype. La tupla es inmutable; las bandas no.
    """
    bands: Tuple[Band, ...]

    def __init__(self, *bands: Band) -> None:
        for b in bands:
            if not isinstance(b, Band):
                raise TypeError(f"Raster solo acepta Band, recibido {type(b).__name__}")
        object.__setattr__(self, "bands", tuple(bands))
        self._validate()

    def _validate(self) -> None:
        if not self.same_size():
            raise InvalidConfigurationError(
                "Raster: las bandas de entrada no tienen el mismo ancho y alto: "
                + ", ".join(f"{b.width}x{b.height}" for b in self.bands)
            )
        logger.debug("Raster %dx%d con %d banda(s): %s",
                     self.width, self.height, len(self.bands), [d.name for d in self.dtypes])

    # ------ constructores alternativos ------
    @classmethod
    def from_values(
        cls,
        width: int,
        height: int,
        dtypes: Sequence[DTypeLike],
        nodatas: Optional[Sequence[Any]] = None,
        fills: Optional[Sequence[Any]] = None,
    ) -> Raster:
        """Una banda por dtype, con nodata/relleno por banda (None → defaults de Band)."""
        n = len(dtypes)
        nodatas = tuple(nodatas) if nodatas is not None else (None,) * n
        fills = tuple(fills) if fills is not None else (None,) * n
        if len(nodatas) != n or len(fills) != n:
            raise InvalidConfigurationError(
                f"Se esperaban {n} nodata/relleno, recibidos {len(nodatas)}/{len(fills)}"
            )
        return cls(*(
            Band(width, height, nd, fv, dtype=dt)
            for dt, nd, fv in zip(dtypes, nodatas, fills)
        ))

    @classmethod
    def from_specs(cls, width: int, height: int, specs: Sequence[BandSpec]) -> Raster:
        return cls(*(Band(width, height, s.nodata, s.fill, dtype=s.dtype) for s in specs))

    @classmethod
    def empty(cls, dtypes: Sequence[DTypeLike]) -> Raster:
        return cls.from_values(0, 0, dtypes)

    # ------ API pública ------
    @property
    def width(self) -> int:
        return self.bands[0].width if self.bands else 0

    @property
    def height(self) -> int:
        return self.bands[0].height if self.bands else 0

    @property
    def extent(self) -> Extent:
        return Extent(width=self.width, height=self.height)

    @property
    def dtypes(self) -> Tuple[np.dtype, ...]:
        return tuple(b.dtype for b in self.bands)

    def size(self) -> int:
        return len(self.bands)

    def __len__(self) -> int:
        return len(self.bands)

    def band(self, n: int = 0) -> Band:
        if not 0 <= n < len(self.bands):
            raise IndexOutOfRangeError("Raster.band", n, len(self.bands))
        return self.bands[n]

    def __getitem__(self, n: int) -> Band:
        return self.band(n)

    def __iter__(self) -> Iterator[Band]:
        return iter(self.bands)

    def same_size(self) -> bool:
        if not self.bands:
            return True
        first = self.bands[0]
        for b in self.bands[1:]:
            try:
                validate_extent_compat(first, b)
            except InvalidConfigurationError:
                return False
        return True

    def append(self, band: Band) -> Raster:
        """Raster nuevo con `band` al final; valida la extensión."""
        return Raster(*self.bands, band)


__all__ = ["Raster", "validate_extent_compat"]
