from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, TypeVar

from ..config import PAGE_SIZE

T = TypeVar("T")


class PageOutOfRange(ValueError):
    def __init__(self, page: int, total_pages: int) -> None:
        super().__init__(f"page must be between 1 and {max(total_pages, 1)}, got {page}")
        self.page = page
        self.total_pages = total_pages


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    if count <= 0:
        return 0
    return math.ceil(count / page_size)


def jump_to_page(page: int, pages: int) -> int:
    if isinstance(page, bool) or not isinstance(page, int):
        raise PageOutOfRange(page, pages)
    if page < 1 or page > pages:
        raise PageOutOfRange(page, pages)
    return page


def page_slice(items: Sequence[T], page: int, page_size: int = PAGE_SIZE) -> list[T]:
    pages = total_pages(len(items), page_size)
    if pages == 0 and page == 1:
        return []
    jump_to_page(page, pages)
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


@dataclass
class PageCursor:
    """Current page, reset to 1 whenever the filter/sort/search fingerprint changes."""

    page: int = 1
    fingerprint: str = ""

    def sync(self, fingerprint: str) -> int:
        if fingerprint != self.fingerprint:
            self.fingerprint = fingerprint
            self.page = 1
        return self.page

    def jump(self, page: int, pages: int) -> int:
        self.page = jump_to_page(page, pages)
        return self.page
