from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(name: str, default: int, min_val: int | None = None) -> int:
    """Get integer from environment with optional minimum enforcement."""
    raw = os.environ.get(name, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            setting=name,
            expected="integer",
        ) from exc
    if min_val is not None and val < min_val:
        return min_val
    return val


def _env_path(name: str) -> Path | None:
    raw = os.environ.get(name)
    if not raw:
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    """Static settings for the editor core.

    Read once from the environment; tests build their own instances.
    """

    log_level: str = os.environ.get("BLOCKPRESS_LOG_LEVEL", "INFO")
    log_path: Path | None = _env_path("BLOCKPRESS_LOG_PATH")
    log_max_bytes: int = _env_int("BLOCKPRESS_LOG_MAX_BYTES", 1_000_000, min_val=1024)
    log_backup_count: int = _env_int("BLOCKPRESS_LOG_BACKUP_COUNT", 3, min_val=0)

    # Sessions raise MutationError instead of silently ignoring invalid targets.
    strict_mutations: bool = _env_bool("BLOCKPRESS_STRICT_MUTATIONS", False)

    # Run the persisted content schema over the serializer output before submitting.
    validate_on_save: bool = _env_bool("BLOCKPRESS_VALIDATE_ON_SAVE", True)

    max_heading_level: int = _env_int("BLOCKPRESS_MAX_HEADING_LEVEL", 6, min_val=1)


settings = Settings()
