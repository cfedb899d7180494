"""
Pagination helpers shared by the relationship queries.

A page size of ``0`` means "everything, unpaginated". Any other size switches to
offset pagination (`Page`) or, when ``use_cursor`` is set, to cursor pagination
(`CursorPage`). Sources can be SQLAlchemy queries or plain Python lists.
"""

import base64
import json
import math
from typing import Any, List, Optional, Sequence, Union

from sqlalchemy.orm import Query

from acquaintances.models import CursorPage, Page

Source = Union[Query, Sequence[Any]]


def encode_cursor(offset: int) -> str:
    raw = json.dumps({"offset": offset}).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_cursor(cursor: Optional[str]) -> int:
    if not cursor:
        return 0
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
        offset = int(payload["offset"])
    except (ValueError, KeyError, TypeError) as e:
        raise ValueError(f"Malformed pagination cursor: {cursor!r}") from e
    if offset < 0:
        raise ValueError(f"Malformed pagination cursor: {cursor!r}")
    return offset


def _count(source: Source) -> int:
    if isinstance(source, Query):
        return source.order_by(None).count()
    return len(source)


def _slice(source: Source, offset: int, limit: int) -> List[Any]:
    if isinstance(source, Query):
        return source.offset(offset).limit(limit).all()
    return list(source[offset:offset + limit])


def get_or_paginate(
    source: Source,
    per_page: int = 0,
    page: int = 1,
    cursor: Optional[str] = None,
    use_cursor: bool = False,
) -> Union[List[Any], Page, CursorPage]:
    """
    Return every item of `source`, or one page of it.

    Parameters
    ----------
    source : Query | Sequence
        Items to paginate; queries are executed, sequences are sliced.
    per_page : int
        Page size. ``0`` returns a plain list of all items.
    page : int
        1-based page number for offset pagination.
    cursor : str | None
        Cursor returned by a previous `CursorPage` (cursor pagination only).
    use_cursor : bool
        Switch from offset to cursor pagination.

    Raises
    ------
    ValueError
        Negative page size, page lower than 1, or malformed cursor.
    """
    if per_page < 0:
        raise ValueError("per_page must be >= 0")

    if per_page == 0:
        if isinstance(source, Query):
            return source.all()
        return list(source)

    if use_cursor:
        offset = decode_cursor(cursor)
        # One extra row tells us whether another page exists.
        rows = _slice(source, offset, per_page + 1)
        next_cursor = encode_cursor(offset + per_page) if len(rows) > per_page else None
        return CursorPage(items=rows[:per_page], per_page=per_page, next_cursor=next_cursor)

    if page < 1:
        raise ValueError("page must be >= 1")
    total = _count(source)
    items = _slice(source, (page - 1) * per_page, per_page)
    return Page(
        items=items,
        total=total,
        per_page=per_page,
        current_page=page,
        last_page=max(1, math.ceil(total / per_page)),
    )
