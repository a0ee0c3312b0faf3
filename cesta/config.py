"""TOML configuration loader for cesta."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_DB_PATH = "~/.config/cesta/cesta.db"
DEFAULT_STORAGE_KEY = "shopping-cart-items"


@dataclass
class StorageConfig:
    db_path: str = DEFAULT_DB_PATH
    key: str = DEFAULT_STORAGE_KEY


@dataclass
class GeminiConfig:
    api_key: str = ""
    text_model: str = "gemini-2.5-flash"
    vision_model: str = "gemini-3-pro-preview"
    image_model: str = "gemini-3-pro-image-preview"
    search_model: str = "gemini-2.5-flash"


@dataclass
class AIConfig:
    backend: str = "gemini"
    gemini: GeminiConfig = field(default_factory=GeminiConfig)


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class CestaConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> CestaConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The Gemini API key can be supplied via GEMINI_API_KEY or API_KEY
    (a ``.env`` file is read first).
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    load_dotenv()

    sto = raw.get("storage", {})
    ai = raw.get("ai", {})
    log = raw.get("logging", {})
    gemini_cfg = ai.get("gemini", {})

    defaults = GeminiConfig()

    # config file → GEMINI_API_KEY → API_KEY
    api_key = (
        gemini_cfg.get("api_key", "")
        or os.environ.get("GEMINI_API_KEY", "")
        or os.environ.get("API_KEY", "")
    )

    return CestaConfig(
        storage=StorageConfig(
            db_path=sto.get("db_path", DEFAULT_DB_PATH),
            key=sto.get("key", DEFAULT_STORAGE_KEY),
        ),
        ai=AIConfig(
            backend=ai.get("backend", "gemini"),
            gemini=GeminiConfig(
                api_key=api_key,
                text_model=gemini_cfg.get("text_model", defaults.text_model),
                vision_model=gemini_cfg.get("vision_model", defaults.vision_model),
                image_model=gemini_cfg.get("image_model", defaults.image_model),
                search_model=gemini_cfg.get("search_model", defaults.search_model),
            ),
        ),
        logging=LoggingConfig(
            level=log.get("level", "INFO"),
        ),
    )
