from typing import Any, Optional, Tuple
from app.core import config

# largest value a BIGINT column or bound parameter can hold
MAX_DB_INT = 2 ** 63 - 1


def in_db_range(value: int) -> bool:
    return 0 < value <= MAX_DB_INT


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def normalize_page(limit: Any = None, offset: Any = None) -> Tuple[int, int]:
    """Coerce raw limit/offset input into a usable page window.

    Missing, non-numeric, zero or negative limits fall back to the default page
    size and large ones are clamped. Bad offsets become 0 and huge ones are
    clamped to what the database can bind. Nothing is rejected.
    """
    page_limit = _to_int(limit)
    if page_limit is None or page_limit <= 0:
        page_limit = config.DEFAULT_PAGE_SIZE
    page_limit = min(page_limit, config.MAX_PAGE_SIZE)

    page_offset = _to_int(offset)
    if page_offset is None or page_offset < 0:
        page_offset = 0
    page_offset = min(page_offset, MAX_DB_INT)
    return page_limit, page_offset


def has_more(offset: int, returned: int, total: int) -> bool:
    return offset + returned < total


def like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
