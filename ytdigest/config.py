"""ytdigest configuration — loads settings from .env file or environment.

Config is loaded from (in priority order):
  1. Environment variables (highest priority)
  2. .env file in current directory
  3. .digests/.env file
  4. Defaults

Settings are read once into a Settings value and passed to whatever needs
them; nothing below the service layer reads the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_OUTPUT_DIR = "outputs"

_loaded = False


def _parse_env_file(path: Path) -> dict[str, str]:
    """Parse a simple .env file (KEY=VALUE, one per line)."""
    values: dict[str, str] = {}
    if not path.exists():
        return values
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip().strip("\"'")
    return values


def load_config(force: bool = False) -> None:
    """Load config from .env files into os.environ (if not already set)."""
    global _loaded
    if _loaded and not force:
        return
    _loaded = True

    for env_path in (Path.cwd() / ".env", Path.cwd() / ".digests" / ".env"):
        values = _parse_env_file(env_path)
        if values:
            logger.debug("Loaded config from %s", env_path)
            for key, value in values.items():
                os.environ.setdefault(key, value)
            break


def get(key: str, default: str = "") -> str:
    """Get a config value (loads .env on first call)."""
    load_config()
    return os.environ.get(key, default)


@dataclass(frozen=True)
class Settings:
    llm_api_key: Optional[str] = None
    llm_base_url: Optional[str] = None
    llm_model: str = DEFAULT_MODEL
    youtube_api_key: Optional[str] = None
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)


def load_settings() -> Settings:
    return Settings(
        llm_api_key=get("DIGEST_LLM_API_KEY") or get("OPENAI_API_KEY") or None,
        llm_base_url=get("DIGEST_LLM_BASE_URL") or None,
        llm_model=get("DIGEST_LLM_MODEL") or DEFAULT_MODEL,
        youtube_api_key=get("YOUTUBE_API_KEY") or None,
        output_dir=Path(get("DIGEST_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR),
    )
