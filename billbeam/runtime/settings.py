"""Runtime loader for BillBeam settings."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from billbeam.runtime.paths import get_paths

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_EXTRACTION_TIMEOUT = 60.0
DEFAULT_MAX_IMAGE_DIMENSION = 2000
DEFAULT_MAX_SESSIONS = 1000


@dataclass(frozen=True)
class Settings:
    """Values read from config/billbeam.toml, overridden by environment."""

    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    extraction_timeout: float = DEFAULT_EXTRACTION_TIMEOUT
    max_image_dimension: int = DEFAULT_MAX_IMAGE_DIMENSION
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    max_sessions: int = DEFAULT_MAX_SESSIONS


@lru_cache(maxsize=4)
def load_settings(config_path: str | None = None) -> Settings:
    """
    Load settings from TOML and apply environment overrides.

    Args:
        config_path: Optional TOML path override. If None, uses default project path.

    Returns:
        Frozen Settings instance.
    """
    path = Path(config_path) if config_path is not None else get_paths().settings_file
    config: dict = {}
    if path.exists():
        with open(path, "rb") as f:
            config = tomllib.load(f)

    extraction = config.get("extraction", {})
    server = config.get("server", {})

    api_key = os.environ.get("GEMINI_API_KEY") or extraction.get("api_key", "")
    model = os.environ.get("BILLBEAM_GEMINI_MODEL") or extraction.get("model", DEFAULT_GEMINI_MODEL)
    timeout_raw = os.environ.get("BILLBEAM_EXTRACTION_TIMEOUT") or extraction.get(
        "timeout", DEFAULT_EXTRACTION_TIMEOUT
    )

    return Settings(
        gemini_api_key=str(api_key).strip(),
        gemini_model=str(model),
        gemini_base_url=str(extraction.get("base_url", DEFAULT_GEMINI_BASE_URL)).rstrip("/"),
        extraction_timeout=float(timeout_raw),
        max_image_dimension=int(extraction.get("max_image_dimension", DEFAULT_MAX_IMAGE_DIMENSION)),
        server_host=str(server.get("host", "0.0.0.0")),
        server_port=int(server.get("port", 8080)),
        max_sessions=int(server.get("max_sessions", DEFAULT_MAX_SESSIONS)),
    )
