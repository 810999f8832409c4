import uuid
from datetime import datetime, timezone
from wigcatalog.extensions import db
from wigcatalog.models.product import money, isoformat


class Variant(db.Model):
    __tablename__ = "variants"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id = db.Column(
        db.String(36),
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sku = db.Column(db.String(100))
    price = db.Column(db.Numeric(10, 2), nullable=False)
    promo_price = db.Column(db.Numeric(10, 2))
    color = db.Column(db.String(100), index=True)  # colors.name, not colors.id
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    images = db.relationship(
        "VariantImage",
        backref="variant",
        lazy="select",
        passive_deletes=True,
        order_by="VariantImage.sort_order",
    )

    __table_args__ = (
        db.CheckConstraint("stock_quantity >= 0", name="ck_variant_stock"),
    )

    @classmethod
    def effective_price_expr(cls):
        """SQL expression for promo_price when set, else price."""
        return db.func.coalesce(cls.promo_price, cls.price)

    @property
    def effective_price(self):
        return self.promo_price if self.promo_price is not None else self.price

    @property
    def availability(self):
        return (self.stock_quantity or 0) > 0

    def to_dict(self, color_display_name=None, include_images=True):
        data = {
            "id": self.id,
            "product_id": self.product_id,
            "sku": self.sku,
            "price": money(self.price),
            "promo_price": money(self.promo_price),
            "effective_price": money(self.effective_price),
            "color": self.color,
            "color_display_name": color_display_name,
            "stock_quantity": self.stock_quantity,
            "availability": self.availability,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_images:
            data["images"] = [image.to_dict() for image in self.images]
        return data

    def __repr__(self):
        return f"<Variant {self.id} {self.color} @ {self.price}>"
