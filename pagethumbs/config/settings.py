"""Centralised environment configuration for pagethumbs.

This module ensures `.env` loading happens in one place and exposes a
typed snapshot of the rasterizer location, output directory, and tuning
knobs. Downstream modules call `get_settings()` instead of touching
`os.environ` directly, making it easier to validate values and override
behaviour in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv


_DEFAULT_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_JOBS = 1
DEFAULT_LOG_LEVEL = "INFO"


def _coerce_int(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _coerce_float(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _coerce_path(value: str | None) -> Path | None:
    if value is None or value.strip() == "":
        return None
    return Path(value.strip()).expanduser()


@dataclass(frozen=True)
class RasterizerSettings:
    path: Path | None
    jobs: int
    timeout: float | None
    scale_to: int | None


@dataclass(frozen=True)
class LoggingSettings:
    console_level: str
    file_path: Path | None


@dataclass(frozen=True)
class PagethumbsSettings:
    """Top-level snapshot of configuration values."""

    env_file: Path
    output_dir: Path | None
    rasterizer: RasterizerSettings
    logging: LoggingSettings


def _resolve_env_path(env_file: os.PathLike[str] | str | None) -> Path:
    if env_file is None:
        return _DEFAULT_ENV_PATH
    return Path(env_file).resolve()


@lru_cache(maxsize=4)
def _load_settings(env_path: Path) -> PagethumbsSettings:
    # Existing environment variables take precedence over `.env` defaults.
    load_dotenv(dotenv_path=env_path, override=False)

    jobs = _coerce_int(os.getenv("PAGETHUMBS_JOBS"))
    timeout = _coerce_float(os.getenv("PAGETHUMBS_RASTER_TIMEOUT"))
    scale_to = _coerce_int(os.getenv("PAGETHUMBS_SCALE_TO"))

    rasterizer = RasterizerSettings(
        path=_coerce_path(os.getenv("PDFTOCAIRO_PATH")),
        jobs=jobs if jobs and jobs > 0 else DEFAULT_JOBS,
        timeout=timeout if timeout and timeout > 0 else None,
        scale_to=scale_to if scale_to and scale_to > 0 else None,
    )

    logging = LoggingSettings(
        console_level=(os.getenv("PAGETHUMBS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        file_path=_coerce_path(os.getenv("PAGETHUMBS_LOG_FILE")),
    )

    return PagethumbsSettings(
        env_file=env_path,
        output_dir=_coerce_path(os.getenv("PAGETHUMBS_OUTPUT_DIR")),
        rasterizer=rasterizer,
        logging=logging,
    )


def get_settings(
    env_file: os.PathLike[str] | str | None = None,
    *,
    reload: bool = False,
) -> PagethumbsSettings:
    """Return the cached settings snapshot.

    Args:
        env_file: Optional explicit path to a `.env` file. When omitted the repo
            root `.env` file is used.
        reload: When True the cached snapshot is cleared before loading.
    """
    env_path = _resolve_env_path(env_file)
    if reload:
        _load_settings.cache_clear()
    return _load_settings(env_path)
