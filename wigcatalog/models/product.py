import enum
import uuid
from datetime import datetime, timezone
from wigcatalog.extensions import db


class ProductType(enum.IntEnum):
    NATURAL = 1
    SYNTHETIC = 2


class Category(enum.IntEnum):
    WIGS = 1
    TAILS = 2
    TOPPERS = 3


def money(value):
    """Decimal column value as a JSON number."""
    return float(value) if value is not None else None


def isoformat(value):
    return value.isoformat() if value is not None else None


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(255))
    description = db.Column(db.Text, default="")
    short_description = db.Column(db.String(512), default="")
    type = db.Column(db.Integer, index=True)  # ProductType
    length = db.Column(db.Integer, index=True)  # cm
    base_price = db.Column(db.Numeric(10, 2))
    base_promo_price = db.Column(db.Numeric(10, 2))
    category_id = db.Column(db.Integer, index=True)  # Category
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Rows are removed explicitly by product_service so stored images go first
    variants = db.relationship(
        "Variant", backref="product", lazy="select", passive_deletes=True
    )

    def to_dict(self, variants=None):
        data = {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "short_description": self.short_description,
            "type": self.type,
            "length": self.length,
            "base_price": money(self.base_price),
            "base_promo_price": money(self.base_promo_price),
            "category_id": self.category_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if variants is not None:
            data["variants"] = variants
        return data

    def __repr__(self):
        return f"<Product {self.id}: {self.name}>"
