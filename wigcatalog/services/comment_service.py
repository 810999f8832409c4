import logging
from wigcatalog.errors import NotFoundError, ValidationError
from wigcatalog.extensions import db
from wigcatalog.models.comment import Comment
from wigcatalog.services.product_service import get_or_404 as get_product_or_404
from wigcatalog.validators import is_blank, parse_int, require

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Anonymous"
MIN_RATING = 1
MAX_RATING = 5


def list_comments(product_id):
    """Reviews of a product, newest first."""
    if is_blank(product_id):
        raise ValidationError("Missing required field(s): product_id")
    return (
        Comment.query.filter_by(product_id=product_id)
        .order_by(Comment.created_at.desc(), Comment.id)
        .all()
    )


def create_comment(data):
    require(data, "product_id", "rating")
    product = get_product_or_404(str(data["product_id"]).strip())
    rating = parse_int(data["rating"], "rating", minimum=MIN_RATING, maximum=MAX_RATING)
    author = data.get("author")
    text = data.get("text")

    comment = Comment(
        product_id=product.id,
        author=DEFAULT_AUTHOR if is_blank(author) else str(author).strip(),
        text=None if is_blank(text) else text,
        rating=rating,
    )
    db.session.add(comment)
    db.session.commit()
    logger.info("New %d-star review on product %s", rating, product.id)
    return comment


def delete_comment(comment_id):
    comment = db.session.get(Comment, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    db.session.delete(comment)
    db.session.commit()
    logger.info("Deleted review %s", comment_id)


def get_rating(product_id):
    """Mean rating rounded to one decimal, or None without reviews."""
    if is_blank(product_id):
        raise ValidationError("Missing required field(s): product_id")
    average, count = db.session.execute(
        db.select(db.func.avg(Comment.rating), db.func.count(Comment.id)).where(
            Comment.product_id == product_id
        )
    ).one()
    return {
        "average": round(float(average), 1) if count else None,
        "count": count,
    }
