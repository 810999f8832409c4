import uuid
from wigcatalog.extensions import db


class VariantImage(db.Model):
    __tablename__ = "variant_images"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    variant_id = db.Column(
        db.String(36),
        db.ForeignKey("variants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = db.Column(db.String(512), nullable=False)  # object-store key
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint("variant_id", "sort_order", name="uq_variant_image_order"),
    )

    def to_dict(self):
        return {"id": self.id, "url": self.url, "sort_order": self.sort_order}

    def __repr__(self):
        return f"<VariantImage {self.url} #{self.sort_order}>"
