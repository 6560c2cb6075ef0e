from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Protocol

from pydantic import ValidationError

from coursemaster.data_models import Course, CoursePage, CourseQuery, CourseSort, Pagination
from coursemaster.errors import ApiError, InputError, describe_error

logger = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch courses"


class CourseLister(Protocol):
    def list_courses(self, query: CourseQuery) -> CoursePage: ...


@dataclass(frozen=True)
class CatalogFilters:
    """User-editable catalog filters; everything except the page cursor."""

    search: str = ""
    category: str = ""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    sort: CourseSort = CourseSort.NEWEST


@dataclass(frozen=True)
class CatalogRequest:
    """Ticket for one in-flight list request."""

    sequence: int
    query: CourseQuery


class CatalogQuery:
    """
    Filter, sort and paginate the course catalog against the list endpoint.

    Each filter setter resets the page cursor to 1 and re-queries; page moves keep the
    filters, and `apply_filters` swaps several filters with one re-query. Requests
    are numbered, and only the response to the newest request is committed, so a slow
    earlier response can never overwrite a later one. A failed request leaves the
    previously loaded page on display and records `error`; a failed page move also
    points the cursor back at the displayed page.

    Front ends that run requests off the main loop can use `begin_request`, then
    `commit`/`fail` with the returned ticket; `refresh` does all of it inline.
    """

    def __init__(self, courses: CourseLister, limit: int = 12, filters: Optional[CatalogFilters] = None):
        if limit <= 0:
            raise InputError("limit must be positive")
        self._service = courses
        self.filters = filters or CatalogFilters()
        self.page = 1
        self.limit = limit
        self.courses: List[Course] = []
        self.pagination: Optional[Pagination] = None
        self.loading = False
        self.error: Optional[str] = None
        self._shown_filters: Optional[CatalogFilters] = None
        self._sequence = 0
        self._closed = False

    # --- Derived state ---

    @property
    def pages(self) -> int:
        return self.pagination.pages if self.pagination else 0

    @property
    def can_go_previous(self) -> bool:
        return self.page > 1

    @property
    def can_go_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_loaded(self) -> bool:
        return self.pagination is not None

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.courses

    def build_query(self) -> CourseQuery:
        try:
            return CourseQuery(
                search=self.filters.search,
                category=self.filters.category,
                min_price=self.filters.min_price,
                max_price=self.filters.max_price,
                sort=self.filters.sort,
                page=self.page,
                limit=self.limit,
            )
        except ValidationError as exc:
            raise InputError(f"Invalid catalog filters: {exc.errors()[0]['msg']}") from exc

    # --- Filter changes ---

    def set_search(self, search: str) -> bool:
        return self.apply_filters(replace(self.filters, search=search))

    def set_category(self, category: str) -> bool:
        return self.apply_filters(replace(self.filters, category=category))

    def set_price_range(self, min_price: Optional[float], max_price: Optional[float]) -> bool:
        return self.apply_filters(replace(self.filters, min_price=min_price, max_price=max_price))

    def set_sort(self, sort: CourseSort | str) -> bool:
        return self.apply_filters(replace(self.filters, sort=sort))

    def clear_filters(self) -> None:
        """Restore the default filters, go back to page 1 and re-query."""
        self.filters = CatalogFilters()
        self.page = 1
        self.refresh()

    def apply_filters(self, filters: CatalogFilters) -> bool:
        """Switch to a whole set of filters with a single re-query; returns False when nothing changed."""
        filters = self.normalize_filters(filters)
        if filters == self.filters:
            return False
        self.filters = filters
        self.page = 1
        self.refresh()
        return True

    @staticmethod
    def normalize_filters(filters: CatalogFilters) -> CatalogFilters:
        """Trim text filters and check prices and sort; raises `InputError` on bad values."""
        min_price, max_price = filters.min_price, filters.max_price
        if (min_price is not None and min_price < 0) or (max_price is not None and max_price < 0):
            raise InputError("Prices cannot be negative")
        if min_price is not None and max_price is not None and min_price > max_price:
            raise InputError("Minimum price cannot exceed maximum price")
        try:
            sort = CourseSort(filters.sort)
        except ValueError as exc:
            raise InputError(f"Unknown sort order: {filters.sort}") from exc
        return replace(filters, search=filters.search.strip(), category=filters.category.strip(), sort=sort)

    # --- Pagination ---

    def set_page(self, page: int) -> None:
        last_page = max(self.pages, 1)
        if not 1 <= page <= last_page:
            raise InputError(f"Page must be between 1 and {last_page}")
        self.page = page
        self.refresh()

    def next_page(self) -> bool:
        if not self.can_go_next:
            return False
        self.set_page(self.page + 1)
        return True

    def previous_page(self) -> bool:
        if not self.can_go_previous:
            return False
        self.set_page(self.page - 1)
        return True

    # --- Request lifecycle ---

    def begin_request(self) -> CatalogRequest:
        query = self.build_query()
        self._sequence += 1
        self.loading = True
        self.error = None
        return CatalogRequest(sequence=self._sequence, query=query)

    def is_current(self, request: CatalogRequest) -> bool:
        return not self._closed and request.sequence == self._sequence

    def commit(self, request: CatalogRequest, result: CoursePage) -> bool:
        """Apply a response; returns False when the response was stale and dropped."""
        if not self.is_current(request):
            logger.debug("Discarding stale catalog response #%s", request.sequence)
            return False
        self.courses = list(result.items)
        self.pagination = result.pagination
        self._shown_filters = self.filters
        self.page = result.pagination.page
        self.loading = False
        self.error = None
        return True

    def fail(self, request: CatalogRequest, message: str) -> bool:
        if not self.is_current(request):
            return False
        self.loading = False
        self.error = message or FETCH_FAILED
        # Point the cursor back at the page on display when only the page moved.
        if self.pagination is not None and self.filters == self._shown_filters:
            self.page = self.pagination.page
        return True

    def refresh(self) -> bool:
        """Issue the query for the current state; returns True when results were committed."""
        request = self.begin_request()
        try:
            result = self._service.list_courses(request.query)
        except ApiError as exc:
            logger.warning("Catalog query failed: %s", exc)
            self.fail(request, describe_error(exc, FETCH_FAILED))
            return False
        return self.commit(request, result)

    def close(self) -> None:
        """Stop accepting responses, e.g. when the view that owns this query goes away."""
        self._closed = True
        self.loading = False
