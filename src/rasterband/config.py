# src/rasterband/config.py
from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .contracts.errors import InvalidConfigurationError
from .contracts.geo import DTypeStr


class BoundsPolicy(str, Enum):
    """
    Política de Band.out_of_range().
    - LEGACY: fuera de rango solo si fila Y columna lo están (comportamiento histórico).
    - STRICT: fuera de rango si fila O columna lo están.
    """
    LEGACY = "legacy"
    STRICT = "strict"


class Settings(BaseSettings):
    """
    Config del paquete. No toca disco salvo el .env opcional.
    Solo afecta defaults (política de límites, logging), nunca la
    semántica numérica de conversión o estadísticos.
    """
    bounds_policy: BoundsPolicy = BoundsPolicy.LEGACY
    default_dtype: DTypeStr = "float64"

    # --- logging ---
    log_level: str = "WARNING"
    log_format: str = "[%(asctime)s] %(levelname)-8s %(name)s - %(message)s"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RASTERBAND_",
        extra="forbid",
        frozen=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if v2 not in logging.getLevelNamesMapping():
            raise ValueError(f"log_level inválido: {v}")
        return v2


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Para tests, recuerda limpiar:
        get_settings.cache_clear()
    Variables RASTERBAND_* o .env inválidos → InvalidConfigurationError.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise InvalidConfigurationError(f"configuración de entorno inválida: {e}") from e
