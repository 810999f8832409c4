"""Customer reviews and the per-product rating aggregate."""
from flask import request
from wigcatalog.blueprints.api import api_v1_bp, json_body
from wigcatalog.blueprints.api.auth import require_admin
from wigcatalog.services import comment_service


@api_v1_bp.route("/comments")
def list_comments():
    comments = comment_service.list_comments(request.args.get("product_id"))
    return {"comments": [c.to_dict() for c in comments]}


@api_v1_bp.route("/comments", methods=["POST"])
def create_comment():
    # Open to shoppers; no admin token
    comment = comment_service.create_comment(json_body())
    return {"success": True, "comment": comment.to_dict()}


@api_v1_bp.route("/comments/<comment_id>", methods=["DELETE"])
@require_admin
def delete_comment(comment_id):
    comment_service.delete_comment(comment_id)
    return {"success": True}


@api_v1_bp.route("/rating")
def get_rating():
    return comment_service.get_rating(request.args.get("product_id"))
