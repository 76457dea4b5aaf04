import os
from dataclasses import dataclass
from functools import cache


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite+aiosqlite:///./kendo_grid.db"
    default_take: int = 20
    max_take: int = 1000
    log_level: str = "WARNING"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@cache
def get_settings() -> Settings:
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        default_take=_int_env("KENDO_GRID_DEFAULT_TAKE", defaults.default_take),
        max_take=_int_env("KENDO_GRID_MAX_TAKE", defaults.max_take),
        log_level=os.getenv("KENDO_GRID_LOG_LEVEL", defaults.log_level).upper(),
    )
