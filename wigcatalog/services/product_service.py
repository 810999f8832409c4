import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from wigcatalog.errors import ConflictError, NotFoundError, StorageError
from wigcatalog.extensions import db
from wigcatalog.models.comment import Comment
from wigcatalog.models.image import VariantImage
from wigcatalog.models.product import Product, ProductType, Category
from wigcatalog.models.variant import Variant
from wigcatalog.services import cache_service, storage_service
from wigcatalog.validators import (
    optional,
    parse_decimal,
    parse_enum,
    parse_int,
    require,
)

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("display_name", "description", "short_description")


def get_or_404(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def _parse_fields(data):
    """Typed product columns for every field present in `data`."""
    fields = {}
    if "name" in data:
        require(data, "name")
        fields["name"] = str(data["name"]).strip()
    for key in TEXT_FIELDS:
        if key in data:
            fields[key] = data[key]
    if "type" in data:
        fields["type"] = optional(
            lambda raw: int(parse_enum(ProductType, raw, "type")), data["type"]
        )
    if "category_id" in data:
        fields["category_id"] = optional(
            lambda raw: int(parse_enum(Category, raw, "category_id")),
            data["category_id"],
        )
    if "length" in data:
        fields["length"] = optional(parse_int, data["length"], "length", minimum=0)
    for key in ("base_price", "base_promo_price"):
        if key in data:
            fields[key] = optional(parse_decimal, data[key], key, minimum=0)
    return fields


def _ensure_unique_name(name, exclude_id=None):
    query = Product.query.filter(Product.name == name)
    if exclude_id:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ConflictError(f"Product with name '{name}' already exists")


def _commit_or_conflict(name):
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise ConflictError(f"Product with name '{name}' already exists") from e


def create_product(data):
    require(data, "name")
    fields = _parse_fields(data)
    _ensure_unique_name(fields["name"])

    product = Product(**fields)
    db.session.add(product)
    _commit_or_conflict(fields["name"])
    logger.info("Created product %s (%s)", product.id, product.name)
    cache_service.after_write()
    return product


def update_product(product_id, data):
    product = get_or_404(product_id)
    fields = _parse_fields(data)
    if "name" in fields and fields["name"] != product.name:
        _ensure_unique_name(fields["name"], exclude_id=product.id)

    for key, value in fields.items():
        setattr(product, key, value)
    _commit_or_conflict(product.name)
    logger.info("Updated product %s: %s", product.id, sorted(fields))
    cache_service.after_write()
    return product


def delete_product(product_id):
    """Delete a product, its variants, their images and the stored payloads.

    Stored objects are removed first; rows are then deleted in one
    transaction, images before variants before the product.
    """
    product = get_or_404(product_id)
    variant_ids = [
        vid for (vid,) in db.session.execute(
            db.select(Variant.id).where(Variant.product_id == product.id)
        )
    ]
    storage_keys = []
    if variant_ids:
        storage_keys = list(
            db.session.scalars(
                db.select(VariantImage.url).where(VariantImage.variant_id.in_(variant_ids))
            )
        )

    storage_service.delete_many(storage_keys)

    try:
        if variant_ids:
            db.session.execute(
                db.delete(VariantImage).where(VariantImage.variant_id.in_(variant_ids))
            )
            db.session.execute(db.delete(Variant).where(Variant.id.in_(variant_ids)))
        db.session.execute(db.delete(Comment).where(Comment.product_id == product.id))
        db.session.execute(db.delete(Product).where(Product.id == product.id))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageError(f"Cascade delete of product {product_id} failed") from e

    logger.info(
        "Deleted product %s with %d variants and %d images",
        product_id, len(variant_ids), len(storage_keys),
    )
    cache_service.after_write()


def get_stats():
    """Product counts by category for the `stats` command."""
    rows = (
        db.session.query(Product.category_id, db.func.count(Product.id))
        .group_by(Product.category_id)
        .all()
    )
    return dict(rows)
