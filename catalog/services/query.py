"""Query builder for the product search endpoint.

Translates optional request parameters into filter conditions, a sort
directive and a pagination window. The page query and the count query share
the same ``ProductFilters`` so page totals always agree with the page content.
"""

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from sqlalchemy.sql.expression import ColumnElement, UnaryExpression

from catalog.config import settings
from catalog.models import Product


class SortDirection(StrEnum):
    """Price sort order for search results."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class Pagination:
    """A page window over search results."""

    page: int = 1
    page_size: int = 10

    @property
    def offset(self) -> int:
        return self.page_size * (self.page - 1)

    @property
    def limit(self) -> int:
        return self.page_size

    def total_pages(self, total: int) -> int:
        """Number of pages needed to show ``total`` matches."""
        return math.ceil(total / self.page_size)


@dataclass(frozen=True)
class ProductFilters:
    """Filters for searching products.

    Attributes:
        search: Case-insensitive substring of the product name
        max_price: Match products priced at or below this value
        category: Exact category match
        sort: Optional price sort; None keeps natural store order
    """

    search: str | None = None
    max_price: float | None = None
    category: str | None = None
    sort: SortDirection | None = None

    def conditions(self) -> list[ColumnElement[bool]]:
        """WHERE conditions, combined with AND by the caller."""
        conditions: list[ColumnElement[bool]] = []
        if self.search:
            conditions.append(
                Product.name.ilike(f"%{_escape_like(self.search)}%", escape="\\")
            )
        if self.max_price is not None:
            conditions.append(Product.price <= self.max_price)
        if self.category:
            conditions.append(Product.category == self.category)
        return conditions

    def order_by(self) -> list[UnaryExpression[Any]]:
        if self.sort is None:
            return []
        if self.sort is SortDirection.ASCENDING:
            return [Product.price.asc()]
        return [Product.price.desc()]


@dataclass(frozen=True)
class ProductQuery:
    """Filters plus the requested page."""

    filters: ProductFilters = field(default_factory=ProductFilters)
    pagination: Pagination = field(default_factory=Pagination)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def parse_page(value: Any) -> int:
    """Parse a page number, defaulting to 1 when absent or invalid."""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def parse_price(value: Any) -> float | None:
    """Parse a price upper bound; blank, non-numeric or infinite values disable it."""
    if value is None or value == "":
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def parse_sort(value: Any) -> SortDirection | None:
    """Anything other than "ascending" sorts descending; blank means unsorted."""
    if not value:
        return None
    if str(value) == SortDirection.ASCENDING:
        return SortDirection.ASCENDING
    return SortDirection.DESCENDING


def build_product_query(
    search: str | None = None,
    price: Any = None,
    category: str | None = None,
    sort: str | None = None,
    page: Any = None,
    page_size: int | None = None,
) -> ProductQuery:
    """Build the filter specification and page window for a search request.

    Args:
        search: Substring to look for in product names.
        price: Upper bound on price.
        category: Exact category to match.
        sort: "ascending" for cheapest first, any other value for most expensive first.
        page: 1-based page number.
        page_size: Products per page. Defaults to settings.

    Returns:
        ProductQuery consumed by the product store.
    """
    filters = ProductFilters(
        search=search or None,
        max_price=parse_price(price),
        category=category or None,
        sort=parse_sort(sort),
    )
    pagination = Pagination(
        page=parse_page(page),
        page_size=page_size or settings.product_per_page,
    )
    return ProductQuery(filters=filters, pagination=pagination)
