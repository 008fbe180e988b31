from __future__ import annotations
from pathlib import Path
import logging
import yaml

from ..config import Settings, get_settings

_LOGGER_NAME = "rasterband"

def load_settings_from_yaml(path: Path) -> Settings:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"settings.yaml debe ser un mapeo, no {type(data).__name__}")
    return Settings(**data)

def build_settings(project_root: Path) -> Settings:
    cfg = (Path(project_root) / "config" / "settings.yaml").resolve()
    if not cfg.exists():
        return get_settings()
    return load_settings_from_yaml(cfg)

def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """
    Conecta un StreamHandler al logger "rasterband" (una sola vez).
    La librería en sí no agrega handlers; esto es para apps/notebooks.
    """
    st = settings or get_settings()
    logger = logging.getLogger(_LOGGER_NAME)
    if not any(getattr(h, "_rasterband", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=st.log_format, datefmt="%H:%M:%S"))
        handler._rasterband = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(st.log_level)
    return logger
