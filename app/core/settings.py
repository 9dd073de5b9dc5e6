import os
from typing import Optional, Literal
from pydantic import BaseModel, field_validator
from dotenv import load_dotenv

from app.domain.leaderboard.errors import ConfigurationError

load_dotenv()

CacheBackend = Literal["none", "memory", "database", "rest"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

class LeaderboardSettings(BaseModel):
    """
    Configuración explícita del leaderboard. Se construye una sola vez
    (ver load_settings) y se pasa al servicio; nada del core lee os.environ.
    """
    # --- Roster ---
    roster_csv_path: Optional[str] = None
    google_sheet_id: Optional[str] = None
    google_sheet_gid: str = "0"
    name_column: str = "User Name"
    url_column: str = "Google Cloud Skills Boost Profile URL"

    # --- Cache ---
    cache_backend: CacheBackend = "none"
    cache_key: str = "leaderboard"
    cache_ttl_seconds: int = 1800
    kv_rest_api_url: Optional[str] = None
    kv_rest_api_token: Optional[str] = None
    database_url: Optional[str] = None

    # --- Scraping ---
    concurrency_limit: int = 5
    request_timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    arcade_marker: str = "The Arcade"

    @field_validator("concurrency_limit")
    @classmethod
    def positive_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("concurrency_limit debe ser > 0")
        return v

    @field_validator("cache_ttl_seconds")
    @classmethod
    def positive_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache_ttl_seconds debe ser > 0")
        return v

    @property
    def cache_enabled(self) -> bool:
        return self.cache_backend != "none"


def _infer_backend(env) -> str:
    if env.get("KV_REST_API_URL") and env.get("KV_REST_API_TOKEN"):
        return "rest"
    if env.get("DATABASE_URL"):
        return "database"
    return "none"

def load_settings(env=None) -> LeaderboardSettings:
    """Lee variables de entorno (o un dict, útil en tests) y valida."""
    env = os.environ if env is None else env
    raw = {
        "roster_csv_path": env.get("ROSTER_CSV_PATH") or None,
        "google_sheet_id": env.get("GOOGLE_SHEET_ID") or None,
        "google_sheet_gid": env.get("GOOGLE_SHEET_GID", "0"),
        "name_column": env.get("ROSTER_NAME_COLUMN", "User Name"),
        "url_column": env.get("ROSTER_URL_COLUMN", "Google Cloud Skills Boost Profile URL"),
        "cache_backend": (env.get("CACHE_BACKEND") or _infer_backend(env)).strip().lower(),
        "cache_key": env.get("CACHE_KEY", "leaderboard"),
        "cache_ttl_seconds": env.get("CACHE_TTL_SECONDS", "1800"),
        "kv_rest_api_url": env.get("KV_REST_API_URL") or None,
        "kv_rest_api_token": env.get("KV_REST_API_TOKEN") or None,
        "database_url": env.get("DATABASE_URL") or None,
        "concurrency_limit": env.get("SCRAPE_CONCURRENCY", "5"),
        "request_timeout": env.get("SCRAPE_TIMEOUT", "10"),
        "user_agent": env.get("SCRAPE_USER_AGENT") or DEFAULT_USER_AGENT,
        "arcade_marker": env.get("ARCADE_MARKER", "The Arcade"),
    }
    try:
        settings = LeaderboardSettings(**raw)
    except ValueError as e:
        raise ConfigurationError(f"Configuración inválida: {e}") from e

    if settings.cache_backend == "rest" and not (settings.kv_rest_api_url and settings.kv_rest_api_token):
        raise ConfigurationError("CACHE_BACKEND=rest requiere KV_REST_API_URL y KV_REST_API_TOKEN")
    if settings.cache_backend == "database" and not settings.database_url:
        raise ConfigurationError("CACHE_BACKEND=database requiere DATABASE_URL")
    return settings
