"""Filtering, sorting and pagination of moderation collections.

Everything here is pure and works on in-memory lists of queue items or
submissions. Fields are looked up by name, so an item type that lacks a
field simply never matches on it.
"""

import math

from collections.abc import Mapping
from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from functools import cmp_to_key
from typing import Any

from pydantic import BaseModel
from pydantic import Field

from moderationdesk_api.database.models.base import ModerationStatus
from moderationdesk_api.database.models.base import SortKey
from moderationdesk_api.database.models.base import SortOrder
from moderationdesk_api.database.models.base import StatusFilter

HIGH_PRIORITY_THRESHOLD = 4
DEFAULT_PRIORITY = 1
SEARCH_FIELDS = ("name", "title", "content", "author", "submitter_name")

_MISSING = object()


class QueueView(BaseModel):
    """How a moderator is currently looking at a collection."""

    status: StatusFilter = StatusFilter.ALL
    search: str = ""
    sort_key: SortKey = SortKey.DATE
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)


class Page(BaseModel):
    """One page window over a filtered, sorted collection."""

    items: list[Any]
    page: int
    page_size: int
    total_items: int
    total_pages: int


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, _MISSING)
    return getattr(item, name, _MISSING)


def _value(item: Any, name: str) -> Any:
    value = _field(item, name)
    return None if value is _MISSING else value


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _priority(item: Any) -> int:
    priority = _value(item, "priority")
    return DEFAULT_PRIORITY if priority is None else int(priority)


def is_flagged(item: Any) -> bool:
    """True when the item was flagged automatically or carries flag reasons."""
    if _value(item, "auto_flagged"):
        return True
    return bool(_value(item, "flagged_reasons") or _value(item, "auto_flagged_reasons"))


def matches_search(item: Any, search_term: str) -> bool:
    """Case-insensitive substring match against the item's searchable fields."""
    if not search_term:
        return True

    needle = search_term.lower()
    for name in SEARCH_FIELDS:
        value = _value(item, name)
        if value is not None and needle in str(value).lower():
            return True
    return False


def filter_items(
    items: Sequence[Any],
    status: StatusFilter | str = StatusFilter.ALL,
    search_term: str = "",
) -> list[Any]:
    """Apply a status filter, then the search term."""
    status = StatusFilter(status)

    if status is StatusFilter.PENDING:
        kept = [
            item
            for item in items
            if _text(_value(item, "status")) == ModerationStatus.PENDING.value
        ]
    elif status is StatusFilter.FLAGGED:
        kept = [item for item in items if is_flagged(item)]
    elif status is StatusFilter.HIGH_PRIORITY:
        kept = [item for item in items if _priority(item) >= HIGH_PRIORITY_THRESHOLD]
    else:
        kept = list(items)

    if not search_term:
        return kept
    return [item for item in kept if matches_search(item, search_term)]


def _timestamp(item: Any) -> float:
    value = _value(item, "submitted_at") or _value(item, "created_at")
    if value is None:
        return -math.inf
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.timestamp()


def _sort_value(item: Any, key: SortKey) -> Any:
    if key is SortKey.PRIORITY:
        return _priority(item)
    if key is SortKey.STATUS:
        status = _value(item, "status")
        return "" if status is None else _text(status)
    return _timestamp(item)


def _compare(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def sort_items(
    items: Sequence[Any],
    key: SortKey | str = SortKey.DATE,
    order: SortOrder | str = SortOrder.DESC,
) -> list[Any]:
    """Sort by date, priority or status.

    Equal keys are ordered by id ascending regardless of direction, so the
    result does not depend on the input order.
    """
    key = SortKey(key)
    direction = 1 if SortOrder(order) is SortOrder.ASC else -1

    def comparator(a: Any, b: Any) -> int:
        result = _compare(_sort_value(a, key), _sort_value(b, key)) * direction
        if result:
            return result
        return _compare(str(_value(a, "id") or ""), str(_value(b, "id") or ""))

    return sorted(items, key=cmp_to_key(comparator))


def total_pages(total_items: int, page_size: int) -> int:
    """Number of pages needed for ``total_items``; zero when there are none."""
    return math.ceil(total_items / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp a requested page number into ``[1, pages]``."""
    return min(max(page, 1), max(pages, 1))


def paginate(items: Sequence[Any], page: int, page_size: int) -> Page:
    """Slice out one page. The page number is used as given, never clamped."""
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    start = max((page - 1) * page_size, 0)
    end = max(page * page_size, 0)
    return Page(
        items=list(items[start:end]),
        page=page,
        page_size=page_size,
        total_items=len(items),
        total_pages=total_pages(len(items), page_size),
    )


def apply_view(items: Sequence[Any], view: QueueView) -> Page:
    """Filter, sort, clamp the page number and paginate in one go."""
    filtered = filter_items(items, view.status, view.search)
    ordered = sort_items(filtered, view.sort_key, view.sort_order)
    page = clamp_page(view.page, total_pages(len(ordered), view.page_size))
    return paginate(ordered, page, view.page_size)
