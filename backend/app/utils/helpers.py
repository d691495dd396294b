import math
from datetime import datetime, timezone


def utcnow() -> datetime:
    # DB에는 timezone 없는 UTC 시각으로 저장한다.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def days_between(start: datetime, end: datetime) -> int:
    """start→end 구간을 일 단위로 올림한 값입니다. 음수 구간은 0 이하로 내려갑니다."""
    return math.ceil((end - start).total_seconds() / 86400)


def paginate(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
