from datetime import datetime, timezone

MAX_PAGE_SIZE = 100
# largest value an INTEGER primary key can hold
MAX_ROW_ID = 2**31 - 1


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_timestamp(value: datetime | None) -> int:
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def from_timestamp(value: int | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc).replace(tzinfo=None)


def clamp_pagination(page, page_size) -> tuple[int, int]:
    """
    Normalize paging input: negative pages become 0 and page sizes
    outside 1..100 fall back to 100.
    """
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 0
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = MAX_PAGE_SIZE

    if page < 0:
        page = 0
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return page, page_size
