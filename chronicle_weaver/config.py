"""Environment-driven settings.

Values come from the process environment, with a ``.env`` file at the repo
root loaded first (existing environment variables win):

    GEMINI_API_KEY     provider API key (falls back to API_KEY)
    GEMINI_BASE_URL    provider API root
    TEXT_MODEL         scenes and character profiles
    FAST_MODEL         names and origin stories
    IMAGE_MODEL        illustrations and portraits
    PROVIDER_TIMEOUT   seconds per provider call
    DATA_DIR           where the save slot lives
    OFFLINE            "1"/"true" to use EchoProvider instead of the network
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

from chronicle_weaver.provider import DEFAULT_BASE_URL, ContentProvider, EchoProvider, GeminiProvider

ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = ROOT / "data"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    text_model: str = "gemini-3-pro-preview"
    fast_model: str = "gemini-3-flash-preview"
    image_model: str = "gemini-2.5-flash-image"
    provider_timeout: float = 120.0
    data_dir: Path = DEFAULT_DATA_DIR
    offline: bool = False


def load_settings(env_file: Path | None = None) -> Settings:
    load_dotenv(env_file or ROOT / ".env")
    defaults = Settings()
    return Settings(
        api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
        base_url=os.getenv("GEMINI_BASE_URL", defaults.base_url),
        text_model=os.getenv("TEXT_MODEL", defaults.text_model),
        fast_model=os.getenv("FAST_MODEL", defaults.fast_model),
        image_model=os.getenv("IMAGE_MODEL", defaults.image_model),
        provider_timeout=float(os.getenv("PROVIDER_TIMEOUT", defaults.provider_timeout)),
        data_dir=Path(os.getenv("DATA_DIR", str(defaults.data_dir))),
        offline=os.getenv("OFFLINE", "").strip().lower() in _TRUTHY,
    )


def make_provider(settings: Settings) -> ContentProvider:
    if settings.offline:
        return EchoProvider()
    return GeminiProvider(
        api_key=settings.api_key,
        base_url=settings.base_url,
        text_model=settings.text_model,
        fast_model=settings.fast_model,
        image_model=settings.image_model,
        timeout=settings.provider_timeout,
    )
