import uuid
from datetime import datetime, timezone
from wigcatalog.extensions import db
from wigcatalog.models.product import isoformat


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id = db.Column(
        db.String(36),
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author = db.Column(db.String(255), nullable=False, default="Anonymous")
    text = db.Column(db.Text)
    rating = db.Column(db.Integer, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "author": self.author,
            "text": self.text,
            "rating": self.rating,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<Comment {self.rating}/5 by {self.author}>"
