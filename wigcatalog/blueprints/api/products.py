"""Catalog listings and product CRUD."""
from flask import current_app, request
from wigcatalog.blueprints.api import api_v1_bp, api_v2_bp, json_body
from wigcatalog.blueprints.api.auth import require_admin
from wigcatalog.services import catalog_service, product_service
from wigcatalog.services.filters import CatalogQuery
from wigcatalog.validators import parse_bool


def _json_text(body):
    return current_app.response_class(body, mimetype="application/json")


@api_v2_bp.route("/products")
def list_products():
    """Filtered, sorted, paginated catalog listing (cached)."""
    query = CatalogQuery.from_args(request.args)
    return _json_text(catalog_service.list_products(query))


@api_v1_bp.route("/products")
def list_all_products():
    no_cache = parse_bool(request.args.get("noCache"))
    return _json_text(catalog_service.list_all_products(no_cache=no_cache))


@api_v1_bp.route("/products/<product_id>")
def get_product(product_id):
    no_cache = parse_bool(request.args.get("noCache"))
    return _json_text(catalog_service.get_product(product_id, no_cache=no_cache))


@api_v1_bp.route("/products", methods=["POST"])
@require_admin
def create_product():
    product = product_service.create_product(json_body())
    return {"success": True, "product": product.to_dict(variants=[])}


@api_v1_bp.route("/products/<product_id>", methods=["PUT"])
@require_admin
def update_product(product_id):
    product = product_service.update_product(product_id, json_body())
    return {"success": True, "product": product.to_dict()}


@api_v1_bp.route("/products/<product_id>", methods=["DELETE"])
@require_admin
def delete_product(product_id):
    product_service.delete_product(product_id)
    return {"success": True}
