from config.secrets_manager import get_secret


def _as_bool(value) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# -------------------------
# 1. Database
# -------------------------
POSTGRES_USER = get_secret("POSTGRES_USER", "permaplant")
POSTGRES_PASSWORD = get_secret("POSTGRES_PASSWORD", "permaplant")
POSTGRES_HOST = get_secret("POSTGRES_HOST", "localhost")
POSTGRES_PORT = get_secret("POSTGRES_PORT", "5432")
POSTGRES_DB = get_secret("POSTGRES_DB", "permaplant")

_DSN = f"{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}"
DATABASE_URL_SYNC = get_secret("DATABASE_URL_SYNC", f"postgresql+psycopg2://{_DSN}")
DATABASE_URL_ASYNC = get_secret("DATABASE_URL_ASYNC", f"postgresql+asyncpg://{_DSN}")

DB_POOL_SIZE = int(get_secret("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(get_secret("DB_MAX_OVERFLOW", "5"))
DB_POOL_TIMEOUT = float(get_secret("DB_POOL_TIMEOUT", "30"))

# -------------------------
# 2. Search & pagination
# -------------------------
# pg_trgm.similarity_threshold for every new connection; empty keeps the
# extension default (0.3)
_threshold = get_secret("TRGM_SIMILARITY_THRESHOLD", "0.25")
TRGM_SIMILARITY_THRESHOLD = float(_threshold) if _threshold else None

# Run count and data queries of a page in one REPEATABLE READ snapshot
PAGE_SNAPSHOT_ISOLATION = _as_bool(get_secret("PAGE_SNAPSHOT_ISOLATION", "false"))

DEFAULT_PER_PAGE = int(get_secret("DEFAULT_PER_PAGE", "10"))
MAX_PER_PAGE = int(get_secret("MAX_PER_PAGE", "100"))

# -------------------------
# 3. Service
# -------------------------
LOG_LEVEL = get_secret("LOG_LEVEL", "INFO")

API_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in get_secret("API_ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
