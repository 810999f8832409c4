import logging
from sqlalchemy.exc import IntegrityError
from wigcatalog.errors import ConflictError, NotFoundError
from wigcatalog.extensions import db
from wigcatalog.models.color import Color
from wigcatalog.services import cache_service
from wigcatalog.validators import is_blank, optional, parse_int, require

logger = logging.getLogger(__name__)


def list_colors():
    return Color.query.order_by(Color.name).all()


def get_or_404(color_id):
    color = db.session.get(Color, color_id)
    if not color:
        raise NotFoundError("Color not found")
    return color


def create_color(data):
    require(data, "name")
    name = str(data["name"]).strip()
    if Color.query.filter_by(name=name).first():
        raise ConflictError(f"Color '{name}' already exists")

    display_name = data.get("display_name")
    color = Color(
        name=name,
        display_name=None if is_blank(display_name) else display_name,
        color_category=optional(
            parse_int, data.get("color_category"), "color_category"
        ),
    )
    db.session.add(color)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise ConflictError(f"Color '{name}' already exists") from e
    logger.info("Created color %s", name)
    cache_service.after_write()
    return color


def delete_color(color_id):
    # Variants keep the color name; their display name becomes null
    color = get_or_404(color_id)
    db.session.delete(color)
    db.session.commit()
    logger.info("Deleted color %s", color.name)
    cache_service.after_write()
