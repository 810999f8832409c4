"""Variants and the ordered image list each variant owns."""
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from wigcatalog.errors import NotFoundError, StorageError, ValidationError
from wigcatalog.extensions import db
from wigcatalog.models.color import Color
from wigcatalog.models.image import VariantImage
from wigcatalog.models.variant import Variant
from wigcatalog.services import cache_service, image_service, storage_service
from wigcatalog.services.product_service import get_or_404 as get_product_or_404
from wigcatalog.validators import (
    is_blank,
    optional,
    parse_decimal,
    parse_int,
    require,
)

logger = logging.getLogger(__name__)


def get_or_404(variant_id, lock=False):
    stmt = db.select(Variant).where(Variant.id == variant_id)
    if lock:
        stmt = stmt.with_for_update()
    variant = db.session.execute(stmt).scalar_one_or_none()
    if not variant:
        raise NotFoundError("Variant not found")
    return variant


def _parse_fields(data):
    fields = {}
    if "sku" in data:
        fields["sku"] = None if is_blank(data["sku"]) else str(data["sku"]).strip()
    if "price" in data:
        require(data, "price")
        fields["price"] = parse_decimal(data["price"], "price", minimum=0)
    if "promo_price" in data:
        fields["promo_price"] = optional(
            parse_decimal, data["promo_price"], "promo_price", minimum=0
        )
    if "color" in data:
        require(data, "color")
        fields["color"] = str(data["color"]).strip()
    if "stock_quantity" in data:
        fields["stock_quantity"] = optional(
            parse_int, data["stock_quantity"], "stock_quantity", minimum=0
        ) or 0
    return fields


def serialize(variants):
    """Variant dicts with color display names and ordered images."""
    if not variants:
        return []
    names = {v.color for v in variants if v.color}
    display_names = {}
    if names:
        display_names = dict(
            db.session.execute(
                db.select(Color.name, Color.display_name).where(Color.name.in_(names))
            ).all()
        )
    return [v.to_dict(color_display_name=display_names.get(v.color)) for v in variants]


def list_variants(product_id=None):
    stmt = (
        db.select(Variant)
        .options(selectinload(Variant.images))
        .order_by(Variant.effective_price_expr().asc(), Variant.id)
    )
    if not is_blank(product_id):
        stmt = stmt.where(Variant.product_id == product_id)
    return serialize(list(db.session.scalars(stmt)))


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

def prepare_uploads(files):
    """Validate uploads and assign storage keys before anything is written.

    Returns a list of (storage_key, bytes, content_type) in input order.
    """
    prepared = []
    for upload in files:
        data = upload.read()
        image_format, content_type = image_service.validate_image(data, upload.filename)
        key = storage_service.generate_key(
            upload.filename, image_service.extension_for(image_format)
        )
        prepared.append((key, data, content_type))
    return prepared


def next_sort_order(variant_id):
    current_max = db.session.execute(
        db.select(db.func.max(VariantImage.sort_order)).where(
            VariantImage.variant_id == variant_id
        )
    ).scalar()
    return 0 if current_max is None else current_max + 1


def _discard_uploads(storage_keys):
    if not storage_keys:
        return
    try:
        storage_service.delete_many(storage_keys, attempts=1)
    except StorageError:
        logger.exception("Could not remove %d orphaned uploads", len(storage_keys))


def _store_images(variant, prepared):
    """Upload payloads and add their rows after the variant's last image.

    The caller holds the variant row lock and commits. Returns the new rows
    and the keys already uploaded, which the caller discards on failure.
    """
    uploaded = []
    images = []
    for key, data, content_type in prepared:
        storage_service.upload(key, data, content_type)
        uploaded.append(key)
    start = next_sort_order(variant.id)
    for offset, key in enumerate(uploaded):
        image = VariantImage(variant_id=variant.id, url=key, sort_order=start + offset)
        db.session.add(image)
        images.append(image)
    return images, uploaded


def _commit_with_uploads(variant, prepared):
    uploaded = []
    try:
        images, uploaded = _store_images(variant, prepared)
        db.session.commit()
    except (StorageError, SQLAlchemyError):
        db.session.rollback()
        _discard_uploads(uploaded)
        raise
    return images


def list_images(variant_id):
    variant = get_or_404(variant_id)
    return [image.to_dict() for image in variant.images]


def append_images(variant_id, files):
    get_or_404(variant_id)
    prepared = prepare_uploads(files)
    if not prepared:
        raise ValidationError("No images provided")

    variant = get_or_404(variant_id, lock=True)
    images = _commit_with_uploads(variant, prepared)
    logger.info(
        "Appended %d images to variant %s (sort orders %s)",
        len(images), variant.id, [i.sort_order for i in images],
    )
    cache_service.after_write()
    return [image.to_dict() for image in images]


def resort_images(variant_id, image_orders):
    """Apply new sort orders to a variant's images, all or nothing.

    Every referenced image must belong to the variant and the resulting
    orders must stay unique across the variant's images.
    """
    variant = get_or_404(variant_id, lock=True)
    if not isinstance(image_orders, list) or not image_orders:
        raise ValidationError("image_orders must be a non-empty list")

    requested = {}
    for entry in image_orders:
        if not isinstance(entry, dict):
            raise ValidationError("Each image order needs 'id' and 'sort_order'")
        require(entry, "id", "sort_order")
        image_id = str(entry["id"])
        if image_id in requested:
            raise ValidationError(f"Image {image_id} listed more than once")
        requested[image_id] = parse_int(entry["sort_order"], "sort_order", minimum=0)

    images = {
        image.id: image
        for image in VariantImage.query.filter_by(variant_id=variant.id)
    }
    foreign = [image_id for image_id in requested if image_id not in images]
    if foreign:
        raise ValidationError(
            f"Images do not belong to variant {variant.id}: {', '.join(foreign)}"
        )

    final = {
        image_id: requested.get(image_id, image.sort_order)
        for image_id, image in images.items()
    }
    if len(set(final.values())) != len(final):
        raise ValidationError("Resulting sort orders must be unique per variant")

    # Park the moved rows on negative slots so the unique index holds mid-update
    for slot, image_id in enumerate(requested, start=1):
        images[image_id].sort_order = -slot
    db.session.flush()
    for image_id, sort_order in requested.items():
        images[image_id].sort_order = sort_order
    db.session.commit()

    logger.info("Resorted %d images of variant %s", len(requested), variant.id)
    cache_service.after_write()
    ordered = sorted(images.values(), key=lambda image: image.sort_order)
    return [image.to_dict() for image in ordered]


def delete_image(image_id):
    image = db.session.get(VariantImage, image_id)
    if not image:
        raise NotFoundError("Image not found")

    storage_service.delete(image.url)
    db.session.delete(image)
    db.session.commit()
    logger.info("Deleted image %s (%s)", image_id, image.url)
    cache_service.after_write()


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

def get_variant(variant_id):
    return serialize([get_or_404(variant_id)])[0]


def create_variant(data, files=()):
    require(data, "product_id", "price", "color")
    product = get_product_or_404(str(data["product_id"]).strip())
    fields = _parse_fields(data)
    prepared = prepare_uploads(files)

    variant = Variant(product_id=product.id, **fields)
    db.session.add(variant)
    db.session.flush()
    images = _commit_with_uploads(variant, prepared)
    logger.info(
        "Created variant %s for product %s with %d images",
        variant.id, product.id, len(images),
    )
    cache_service.after_write()
    return serialize([variant])[0]


def update_variant(variant_id, data):
    variant = get_or_404(variant_id)
    fields = _parse_fields(data)
    for key, value in fields.items():
        setattr(variant, key, value)
    db.session.commit()
    logger.info("Updated variant %s: %s", variant.id, sorted(fields))
    cache_service.after_write()
    return serialize([variant])[0]


def delete_variant(variant_id):
    """Delete a variant and its images, stored payloads first."""
    variant = get_or_404(variant_id)
    storage_keys = [image.url for image in variant.images]
    storage_service.delete_many(storage_keys)

    try:
        db.session.execute(
            db.delete(VariantImage).where(VariantImage.variant_id == variant.id)
        )
        db.session.execute(db.delete(Variant).where(Variant.id == variant.id))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StorageError(f"Cascade delete of variant {variant_id} failed") from e

    logger.info("Deleted variant %s with %d images", variant_id, len(storage_keys))
    cache_service.after_write()
