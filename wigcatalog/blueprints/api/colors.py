from wigcatalog.blueprints.api import api_v1_bp, json_body
from wigcatalog.blueprints.api.auth import require_admin
from wigcatalog.services import color_service


@api_v1_bp.route("/colors")
def list_colors():
    return {"colors": [c.to_dict() for c in color_service.list_colors()]}


@api_v1_bp.route("/colors/<color_id>")
def get_color(color_id):
    return {"color": color_service.get_or_404(color_id).to_dict()}


@api_v1_bp.route("/colors", methods=["POST"])
@require_admin
def create_color():
    color = color_service.create_color(json_body())
    return {"success": True, "color": color.to_dict()}


@api_v1_bp.route("/colors/<color_id>", methods=["DELETE"])
@require_admin
def delete_color(color_id):
    color_service.delete_color(color_id)
    return {"success": True}
