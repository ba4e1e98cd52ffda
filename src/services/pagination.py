"""Pagination state for the wallet transaction table.

The server descriptor and the rows-per-page choice are the only stored
values; the zero-based table page is always derived from them, clamped to
what the loaded data supports:

    zero_based_page = max(0, current_page - 1)
    max_page        = max(0, ceil(total_count / limit) - 1)
    safe_page       = min(zero_based_page, max_page)

``total_count`` falls back to the number of loaded rows and ``limit`` to the
default page size when the server sends zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from models.finance import PaginationDescriptor, TransactionPage

DEFAULT_PAGE_LIMIT = 1000
ELLIPSIS = "..."


@dataclass(frozen=True)
class PaginationState:
    """Immutable snapshot of the transaction table's pagination.

    Attributes:
        descriptor: Last server descriptor applied (verbatim).
        rows_per_page: Page size used for the next request.
        loaded_rows: Rows in the currently displayed page.
        default_limit: Page size used when the descriptor's limit is 0.
    """

    descriptor: PaginationDescriptor = field(default_factory=PaginationDescriptor)
    rows_per_page: int = DEFAULT_PAGE_LIMIT
    loaded_rows: int = 0
    default_limit: int = DEFAULT_PAGE_LIMIT

    @classmethod
    def initial(cls, rows_per_page: int = DEFAULT_PAGE_LIMIT) -> PaginationState:
        """State before any page has been loaded."""
        return cls(
            descriptor=PaginationDescriptor(limit=rows_per_page),
            rows_per_page=rows_per_page,
            default_limit=rows_per_page,
        )

    def with_page(self, page: TransactionPage) -> PaginationState:
        """Apply a successful server response."""
        return replace(
            self,
            descriptor=page.descriptor(),
            rows_per_page=page.limit or self.rows_per_page,
            loaded_rows=len(page.transactions),
        )

    def with_rows_per_page(self, rows_per_page: int) -> PaginationState:
        """Change the page size used by the next request."""
        return replace(self, rows_per_page=rows_per_page)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def current_page(self) -> int:
        return self.descriptor.current_page

    @property
    def total_pages(self) -> int:
        return self.descriptor.total_pages

    @property
    def total_count(self) -> int:
        """Server count, or the loaded row count when the server sent 0."""
        return self.descriptor.total_count or self.loaded_rows

    @property
    def limit(self) -> int:
        return self.descriptor.limit or self.default_limit or DEFAULT_PAGE_LIMIT

    @property
    def zero_based_page(self) -> int:
        return max(0, self.current_page - 1)

    @property
    def max_page(self) -> int:
        return max(0, math.ceil(self.total_count / self.limit) - 1)

    @property
    def safe_page(self) -> int:
        """Zero-based page the table may display."""
        return min(self.zero_based_page, self.max_page)

    @property
    def can_go_next(self) -> bool:
        return self.descriptor.has_next

    @property
    def can_go_prev(self) -> bool:
        return self.descriptor.has_prev

    def page_numbers(self, max_visible: int = 5) -> list[int | str]:
        """1-based page buttons with ``"..."`` gaps.

        All pages are listed when there are at most ``max_visible``; otherwise
        the first page, the current page +/- 2 and the last page are shown.
        """
        total = self.total_pages
        if total <= 0:
            return []
        if total <= max_visible:
            return list(range(1, total + 1))

        current = min(max(self.current_page, 1), total)
        start = max(2, current - 2)
        end = min(total - 1, current + 2)

        pages: list[int | str] = [1]
        if start > 2:
            pages.append(ELLIPSIS)
        pages.extend(range(start, end + 1))
        if end < total - 1:
            pages.append(ELLIPSIS)
        pages.append(total)
        return pages

    def range_label(self) -> str:
        """Row range of the displayed page, e.g. ``"101-132 of 132"``."""
        total = self.total_count
        if total <= 0:
            return "0 of 0"
        first = self.safe_page * self.limit + 1
        last = min((self.safe_page + 1) * self.limit, total)
        return f"{first}-{last} of {total}"
