"""Page/offset/size reconciliation for list views."""

import math
from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageWindow:
    """Effective paging for one request.

    Attributes:
        offset: Rows skipped
        page: 0-based page index
        size: Rows per page
    """

    offset: int
    page: int
    size: int


def clamp_size(size: int) -> int:
    if size == 0:
        return DEFAULT_PAGE_SIZE
    return max(1, min(size, MAX_PAGE_SIZE))


def reconcile_pagination(offset: int, page: int, size: int) -> PageWindow:
    """Derive a consistent window from the request's paging parameters.

    ``page`` is 1-based as sent by clients. An explicit offset wins over
    the page; when only a page is given the offset is derived from it,
    and when only an offset is given the page is derived from that.

    Example:
        reconcile_pagination(offset=0, page=3, size=10)
        # PageWindow(offset=20, page=2, size=10)
    """
    size = clamp_size(size)
    offset = max(offset, 0)
    if offset == 0 and page > 0:
        page = page - 1
        offset = page * size
    elif offset > 0:
        page = offset // size
    else:
        page = 0
    return PageWindow(offset=offset, page=page, size=size)


def total_pages(total: int, size: int) -> int:
    """Number of pages needed for ``total`` rows, at least one."""
    if size <= 0:
        return 1
    return max(1, math.ceil(total / size))
