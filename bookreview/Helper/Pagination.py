import math
from dataclasses import dataclass, replace
from typing import Optional


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def total_pages(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if total_count > 0 else 0


@dataclass(frozen=True)
class BrowseState:
    """Catalog browsing position: current page, page size and search term.

    ``previous``/``next`` are clamped to the available pages and a new search
    term always starts over from page 1.
    """
    page: int = 1
    page_size: int = 5
    search_term: str = ""

    def with_search(self, term: Optional[str]) -> "BrowseState":
        return replace(self, search_term=(term or "").strip(), page=1)

    def pages(self, total_count: int) -> int:
        return total_pages(total_count, self.page_size)

    def has_previous(self, total_count: int) -> bool:
        return self.pages(total_count) > 0 and self.page > 1

    def has_next(self, total_count: int) -> bool:
        return self.page < self.pages(total_count)

    def previous(self, total_count: int) -> "BrowseState":
        if not self.has_previous(total_count):
            return self
        return replace(self, page=min(self.page - 1, self.pages(total_count)))

    def next(self, total_count: int) -> "BrowseState":
        if not self.has_next(total_count):
            return self
        return replace(self, page=self.page + 1)
