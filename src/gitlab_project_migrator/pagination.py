"""Reading complete collections from page-based endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger: logging.Logger = logging.getLogger(__name__)

PAGE_SIZE: Final[int] = 20

T = TypeVar("T")


def fetch_all(fetch_page: Callable[[int, int], Sequence[T]], page_size: int = PAGE_SIZE) -> list[T]:
    """Fetch every page of a collection and return the rows in server order.

    Pages are requested starting at 1 until one comes back shorter than
    ``page_size``; an empty first page ends the read after a single request.
    No total count is required from the server and rows are not deduplicated.

    Any exception raised by ``fetch_page`` propagates unchanged, so callers
    never see a partial collection.
    """
    if page_size < 1:
        msg = f"Invalid page size: {page_size}"
        raise ValueError(msg)

    rows: list[T] = []
    page = 1
    while True:
        batch = fetch_page(page, page_size)
        rows.extend(batch)
        if len(batch) < page_size:
            break
        page += 1

    logger.debug(f"Fetched {len(rows)} rows in {page} page(s)")
    return rows
