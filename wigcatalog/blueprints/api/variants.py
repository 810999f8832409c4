"""Variant CRUD and the ordered image list of each variant."""
import io
from flask import request, send_file
from wigcatalog.blueprints.api import api_v1_bp, json_body, uploaded_images
from wigcatalog.blueprints.api.auth import require_admin
from wigcatalog.services import storage_service, variant_service


@api_v1_bp.route("/variants")
def list_variants():
    return {"variants": variant_service.list_variants(request.args.get("product_id"))}


@api_v1_bp.route("/variants/<variant_id>")
def get_variant(variant_id):
    return {"variant": variant_service.get_variant(variant_id)}


@api_v1_bp.route("/variants", methods=["POST"])
@require_admin
def create_variant():
    """Multipart form: variant fields plus optional `images[]` files."""
    variant = variant_service.create_variant(request.form, uploaded_images())
    return {"success": True, "variant": variant}


@api_v1_bp.route("/variants/<variant_id>", methods=["PUT"])
@require_admin
def update_variant(variant_id):
    variant = variant_service.update_variant(variant_id, json_body())
    return {"success": True, "variant": variant}


@api_v1_bp.route("/variants/<variant_id>", methods=["DELETE"])
@require_admin
def delete_variant(variant_id):
    variant_service.delete_variant(variant_id)
    return {"success": True}


@api_v1_bp.route("/variants/<variant_id>/images")
def list_images(variant_id):
    return {"images": variant_service.list_images(variant_id)}


@api_v1_bp.route("/variants/<variant_id>/images", methods=["POST"])
@require_admin
def append_images(variant_id):
    images = variant_service.append_images(variant_id, uploaded_images())
    return {"success": True, "images": images}


@api_v1_bp.route("/variants/<variant_id>/images/resort", methods=["PUT"])
@require_admin
def resort_images(variant_id):
    image_orders = json_body().get("image_orders")
    images = variant_service.resort_images(variant_id, image_orders)
    return {"success": True, "images": images}


@api_v1_bp.route("/images/<image_id>", methods=["DELETE"])
@require_admin
def delete_image(image_id):
    variant_service.delete_image(image_id)
    return {"success": True}


@api_v1_bp.route("/files/<path:storage_key>")
def serve_file(storage_key):
    """Stream a stored image payload."""
    data = storage_service.download(storage_key)
    return send_file(
        io.BytesIO(data),
        mimetype=storage_service.guess_content_type(storage_key),
        max_age=31536000,  # keys are never reused
    )
