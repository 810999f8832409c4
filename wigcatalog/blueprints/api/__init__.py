from flask import Blueprint, request

from wigcatalog.errors import ValidationError

api_v1_bp = Blueprint("api_v1", __name__)
api_v2_bp = Blueprint("api_v2", __name__)


def json_body():
    """Parsed JSON object from the request, or a 400."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def uploaded_images():
    """Files sent as `images` or `images[]`, in form order."""
    return request.files.getlist("images") + request.files.getlist("images[]")


from wigcatalog.blueprints.api import (  # noqa: F401, E402
    products,
    variants,
    colors,
    comments,
)
