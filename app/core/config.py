import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_database_url() -> str:
    """Explicit DATABASE_URL wins, then the DB_* parts, then a local SQLite file."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if os.getenv("DB_NAME"):
        return (
            f"postgresql://{os.getenv('DB_USER')}:{os.getenv('DB_PASS')}"
            f"@{os.getenv('DB_HOST', 'localhost')}:{os.getenv('DB_PORT', '5432')}/{os.getenv('DB_NAME')}"
        )
    return "sqlite:///./timeline.db"


DATABASE_URL = get_database_url()

_DEFAULT_SECRET = "your-secret-key-change-in-production"
JWT_SECRET = os.getenv("JWT_SECRET") or _DEFAULT_SECRET
if JWT_SECRET == _DEFAULT_SECRET:
    logger.warning("JWT_SECRET not set in environment. Using default secret. This is insecure for production!")

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_DAYS = _int_env("JWT_EXPIRE_DAYS", 7)

DEFAULT_PAGE_SIZE = _int_env("DEFAULT_PAGE_SIZE", 10)
MAX_PAGE_SIZE = _int_env("MAX_PAGE_SIZE", 100)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
