# src/rasterband/contracts/geo.py

from __future__ import annotations
from typing import Literal, NamedTuple, Tuple, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

GeoTransform = Tuple[float, float, float, float, float, float]
DTypeStr = Literal[
    "int8", "uint8", "int16", "uint16", "int32", "uint32",
    "int64", "uint64", "float32", "float64",
]
SUPPORTED_DTYPES: Tuple[str, ...] = get_args(DTypeStr)

class Bounds(NamedTuple):
    minx: float; miny: float; maxx: float; maxy: float

# ---------- Metadatos de georreferencia (puro dominio, sin GDAL) ----------
class GeoMetadata(BaseModel):
    """
    Snapshot inmutable de la georreferencia de una banda.
    Los valores se guardan tal cual; no se interpreta el SRID.
    scale_y se normaliza a <= 0 (filas crecen hacia abajo, eje Y al norte).
    """
    model_config = ConfigDict(frozen=True)
    origin_x: float = 0.0
    origin_y: float = 0.0
    scale_x: float = 0.0
    scale_y: float = 0.0
    spatial_reference_id: int = Field(0, ge=-(2**31), le=2**31 - 1)

    @field_validator("scale_y")
    @classmethod
    def _north_up(cls, v: float) -> float:
        return -v if v > 0 else v

    def geotransform(self) -> GeoTransform:
        # sin rotación: skew_x = skew_y = 0
        return (self.origin_x, self.scale_x, 0.0, self.origin_y, 0.0, self.scale_y)

# ---------- GeoTransform helpers (afines a GDAL pero sin dependencia) ----------
def geotransform_bounds(gt: GeoTransform, width: int, height: int) -> Bounds:
    x0, px, rx, y0, ry, py = gt
    x_w = x0 + width * px + height * rx
    y_w = y0 + width * ry + height * py
    minx, maxx = (x0, x_w) if x0 <= x_w else (x_w, x0)
    miny, maxy = (y_w, y0) if y_w <= y0 else (y0, y_w)
    return Bounds(minx, miny, maxx, maxy)

__all__ = [
    "GeoTransform","Bounds","DTypeStr","SUPPORTED_DTYPES","GeoMetadata",
    "geotransform_bounds",
]
