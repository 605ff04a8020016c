# inventory/api/routes/products.py
# Routes for reading and maintaining inventory products.

from flask import Blueprint, request, jsonify, current_app
from inventory.services.product_service import ProductService
from inventory.domain.product import Product, ProductFilter
from inventory.api.errors import ServiceError, ValidationError
from inventory.utils.logger import logger

# --- Get Service Instance ---
def _get_product_service() -> ProductService:
    service = current_app.config.get('product_service')
    if not service:
        logger.critical("ProductService not found in application config!")
        raise ServiceError("Product service is unavailable.", 503)
    return service

def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be a JSON object.")
    return data

# --- Blueprint Definition ---
products_bp = Blueprint('products', __name__)

# --- Routes ---
# ApiError subclasses raised below are turned into JSON responses by the handlers in api/errors.py.

@products_bp.route('', methods=['GET'])
def list_products():
    """Lists every product."""
    products = _get_product_service().list_products()
    return jsonify([p.to_dict() for p in products]), 200

@products_bp.route('', methods=['POST'])
def create_product():
    """
    Creates a product. Body: product JSON without productId.
    Responds 201 with {"productId": <new id>}.
    """
    product = Product.from_dict(_json_body())
    new_id = _get_product_service().create_product(product)
    logger.info(f"Product created via API: ID {new_id}")
    return jsonify({"productId": new_id}), 201

@products_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id: int):
    product = _get_product_service().get_product(product_id)
    return jsonify(product.to_dict()), 200

@products_bp.route('/<int:product_id>', methods=['PUT'])
def update_product(product_id: int):
    """Replaces a product. The body's productId, if present, must equal the path ID."""
    product = Product.from_dict(_json_body())
    updated = _get_product_service().update_product(product_id, product)
    return jsonify(updated.to_dict()), 200

@products_bp.route('/<int:product_id>', methods=['DELETE'])
def delete_product(product_id: int):
    _get_product_service().delete_product(product_id)
    return jsonify({"message": f"Product {product_id} deleted."}), 200

@products_bp.route('/top', methods=['GET'])
def top_products():
    """Products with the most stock on hand. Query param: limit (1-10, default 10)."""
    raw_limit = request.args.get('limit', '10')
    try:
        limit = int(raw_limit)
    except ValueError:
        raise ValidationError(f"limit must be an integer, got '{raw_limit}'.")
    products = _get_product_service().get_top_products(limit)
    return jsonify([p.to_dict() for p in products]), 200

@products_bp.route('/search', methods=['POST'])
def search_products():
    """
    Searches products by substring. Body keys (all optional): productName, manufacturer, sku.
    Text fields in the response are lower-cased.
    """
    criteria = ProductFilter.from_dict(request.get_json(silent=True))
    products = _get_product_service().search_products(criteria)
    return jsonify([p.to_dict() for p in products]), 200
