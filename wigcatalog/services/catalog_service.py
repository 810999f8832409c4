"""Catalog listings: filtered, sorted, paginated product pages with their
variants and images, served through the read-through cache."""
import logging
import math
from collections import defaultdict

from flask import current_app
from sqlalchemy.orm import selectinload

from wigcatalog.errors import NotFoundError
from wigcatalog.extensions import db
from wigcatalog.models.color import Color
from wigcatalog.models.product import Product
from wigcatalog.models.variant import Variant
from wigcatalog.services import cache_service
from wigcatalog.services.filters import CatalogFilters, CatalogQuery

logger = logging.getLogger(__name__)


def _filtered(stmt, filters):
    stmt = stmt.outerjoin(Variant, Variant.product_id == Product.id)
    predicate = filters.compile()
    if predicate is not None:
        stmt = stmt.where(predicate)
    return stmt


def find_product_ids(query):
    """Ids of matching products in display order, one page if paginated.

    Products are ranked by the lowest effective price among their matching
    variants; products with no matching variant go last.
    """
    min_price = db.func.min(Variant.effective_price_expr())
    stmt = _filtered(db.select(Product.id, min_price.label("min_price")), query.filters)
    stmt = stmt.group_by(Product.id).order_by(
        min_price.is_(None),
        min_price.desc() if query.descending else min_price.asc(),
        Product.id,
    )
    if query.paginated:
        stmt = stmt.limit(query.limit).offset((query.page - 1) * query.limit)
    return [row.id for row in db.session.execute(stmt)]


def count_products(filters):
    stmt = _filtered(
        db.select(db.func.count(db.distinct(Product.id))).select_from(Product),
        filters,
    )
    return db.session.execute(stmt).scalar() or 0


def expand_products(product_ids, descending=False):
    """Serialize products with all their variants, colors and images.

    One batched query loads the variants of every product; the result keeps
    the order of `product_ids`.
    """
    if not product_ids:
        return []

    products = {
        p.id: p
        for p in db.session.scalars(
            db.select(Product).where(Product.id.in_(product_ids))
        )
    }

    effective = Variant.effective_price_expr()
    stmt = (
        db.select(Variant, Color.display_name)
        .outerjoin(Color, Color.name == Variant.color)
        .where(Variant.product_id.in_(product_ids))
        .options(selectinload(Variant.images))
        .order_by(effective.desc() if descending else effective.asc(), Variant.id)
    )
    variants_by_product = defaultdict(list)
    for variant, color_display_name in db.session.execute(stmt):
        variants_by_product[variant.product_id].append(
            variant.to_dict(color_display_name=color_display_name)
        )

    return [
        products[pid].to_dict(variants=variants_by_product.get(pid, []))
        for pid in product_ids
        if pid in products
    ]


def build_listing(query):
    """Uncached listing payload for a parsed query."""
    product_ids = find_product_ids(query)
    total = count_products(query.filters)
    limit = query.limit or current_app.config["CATALOG_DEFAULT_LIMIT"]
    return {
        "products": expand_products(product_ids, descending=query.descending),
        "totalPages": math.ceil(total / limit),
        "totalProducts": total,
    }


def _cached(key, no_cache, compute):
    if not no_cache:
        cached = cache_service.get(key)
        if cached is not None:
            return cached

    body = current_app.json.dumps(compute())
    cache_service.put(key, body)
    logger.debug("Cached %s (%d bytes)", key, len(body))
    return body


def list_products(query):
    """JSON text of a listing, from cache unless missing or bypassed."""
    key = cache_service.list_key(query.raw)
    return _cached(key, query.no_cache, lambda: build_listing(query))


def list_all_products(no_cache=False):
    """Whole catalog, unpaginated, under the bare collection key."""
    return list_products(CatalogQuery(filters=CatalogFilters(), no_cache=no_cache))


def build_product(product_id):
    expanded = expand_products([product_id])
    if not expanded:
        raise NotFoundError("Product not found")
    return {"product": expanded[0]}


def get_product(product_id, no_cache=False):
    """JSON text of one expanded product; 404s are never cached."""
    key = cache_service.detail_key(product_id)
    return _cached(key, no_cache, lambda: build_product(product_id))
