"""Catalog filter families compiled to parameterized SQLAlchemy clauses.

Families combine with AND; the values inside one family combine with OR.
"""
from dataclasses import dataclass, field
from decimal import Decimal

from wigcatalog.errors import ValidationError
from wigcatalog.validators import (
    parse_bool,
    parse_decimal,
    parse_enum,
    parse_positive_int,
    split_csv,
)
from wigcatalog.extensions import db
from wigcatalog.models.product import Product, ProductType, Category
from wigcatalog.models.variant import Variant

LENGTH_BUCKETS = {
    "SHORT": (0, 15),
    "MEDIUM": (16, 30),
    "LONG": (31, 100),
}

SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class IdsFilter:
    ids: tuple

    def compile(self):
        return Product.id.in_(self.ids)


@dataclass(frozen=True)
class CategoryFilter:
    category: Category

    def compile(self):
        return Product.category_id == int(self.category)


@dataclass(frozen=True)
class TypeFilter:
    types: tuple

    def compile(self):
        return Product.type.in_([int(t) for t in self.types])


@dataclass(frozen=True)
class LengthFilter:
    buckets: tuple

    def compile(self):
        return db.or_(
            *[
                Product.length.between(*LENGTH_BUCKETS[bucket])
                for bucket in self.buckets
            ]
        )


@dataclass(frozen=True)
class PriceRangeFilter:
    """Matches a variant whose price or promo price falls in range."""

    min_price: Decimal = None
    max_price: Decimal = None

    def _in_range(self, column):
        clauses = [column.isnot(None)]
        if self.min_price is not None:
            clauses.append(column >= self.min_price)
        if self.max_price is not None:
            clauses.append(column <= self.max_price)
        return db.and_(*clauses)

    def compile(self):
        return db.or_(
            self._in_range(Variant.price), self._in_range(Variant.promo_price)
        )


@dataclass
class CatalogFilters:
    predicates: list = field(default_factory=list)

    def add(self, predicate):
        self.predicates.append(predicate)
        return self

    def compile(self):
        """Single AND clause over all families, or None when unfiltered."""
        if not self.predicates:
            return None
        return db.and_(*[p.compile() for p in self.predicates])


@dataclass
class CatalogQuery:
    """Parsed `/v2/products` query string."""

    filters: CatalogFilters
    page: int = None
    limit: int = None
    sort_order: str = "asc"
    no_cache: bool = False
    raw: dict = field(default_factory=dict)

    @property
    def paginated(self):
        return self.page is not None and self.limit is not None

    @property
    def descending(self):
        return self.sort_order == "desc"

    @classmethod
    def from_args(cls, args):
        raw = {
            key: args.get(key, "").strip()
            for key in (
                "maxPrice", "minPrice", "length", "type", "category",
                "page", "limit", "sortOrder", "ids",
            )
            if args.get(key, "").strip()
        }
        filters = CatalogFilters()

        ids = split_csv(raw.get("ids"))
        if ids:
            filters.add(IdsFilter(tuple(ids)))

        if "category" in raw:
            filters.add(CategoryFilter(parse_enum(Category, raw["category"], "category")))

        min_price = max_price = None
        if "minPrice" in raw:
            min_price = parse_decimal(raw["minPrice"], "minPrice")
        if "maxPrice" in raw:
            max_price = parse_decimal(raw["maxPrice"], "maxPrice")
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationError("minPrice must not exceed maxPrice")
        if min_price is not None or max_price is not None:
            filters.add(PriceRangeFilter(min_price, max_price))

        buckets = [b.upper() for b in split_csv(raw.get("length"))]
        unknown = [b for b in buckets if b not in LENGTH_BUCKETS]
        if unknown:
            raise ValidationError(
                f"Unknown length bucket(s): {', '.join(unknown)}. "
                f"Allowed: {', '.join(LENGTH_BUCKETS)}"
            )
        if buckets:
            filters.add(LengthFilter(tuple(dict.fromkeys(buckets))))

        types = [parse_enum(ProductType, t, "type") for t in split_csv(raw.get("type"))]
        if types:
            filters.add(TypeFilter(tuple(dict.fromkeys(types))))

        page = parse_positive_int(raw["page"], "page") if "page" in raw else None
        limit = parse_positive_int(raw["limit"], "limit") if "limit" in raw else None

        sort_order = raw.get("sortOrder", "asc").lower()
        if sort_order not in SORT_ORDERS:
            raise ValidationError("sortOrder must be 'asc' or 'desc'")

        return cls(
            filters=filters,
            page=page,
            limit=limit,
            sort_order=sort_order,
            no_cache=parse_bool(args.get("noCache")),
            raw=raw,
        )
