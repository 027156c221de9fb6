from flask import Blueprint, request

from auth.utils import admin_required
from common.response import success_response
from controllers.product_controller import ProductController
from schemas.product_schemas import CreateProductSchema, UpdateProductSchema, ProductFilterSchema

product_bp = Blueprint('product', __name__)


@product_bp.route('', methods=['GET'])
def list_products():
    """
    List products with optional filters
    ---
    tags:
      - Products
    parameters:
      - in: query
        name: season
        type: array
        items:
          type: string
          enum: [regular, halloween, dia_muertos, navidad]
        collectionFormat: multi
        description: One or more seasons (`temporada` is accepted as an alias)
      - in: query
        name: category
        type: integer
      - in: query
        name: active
        type: boolean
    responses:
      200:
        description: Products ordered by name, each with category name and current stock
      400:
        description: Invalid filter value
    """
    raw = {}
    seasons = request.args.getlist('season') or request.args.getlist('temporada')
    if seasons:
        raw['season'] = seasons
    if request.args.get('category'):
        raw['category'] = request.args.get('category')
    if request.args.get('active') is not None:
        raw['active'] = request.args.get('active')

    filters = ProductFilterSchema().load(raw)
    products = ProductController.list_products(
        season=filters.get('season'),
        category_id=filters.get('category'),
        active=filters.get('active')
    )
    return success_response("Products retrieved", products)


@product_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id):
    """
    Get a single product
    ---
    tags:
      - Products
    parameters:
      - in: path
        name: product_id
        type: integer
        required: true
    responses:
      200:
        description: Product
      404:
        description: Product not found
    """
    return success_response("Product retrieved", ProductController.get_product(product_id))


@product_bp.route('', methods=['POST'])
@admin_required
def create_product():
    """
    Create a product with its opening stock (admin only)
    ---
    tags:
      - Products
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - name
            - price
            - stock
          properties:
            name:
              type: string
            description:
              type: string
            price:
              type: number
              minimum: 0
            stock:
              type: integer
              minimum: 0
            category_id:
              type: integer
            season:
              type: string
              enum: [regular, halloween, dia_muertos, navidad]
            image_url:
              type: string
    responses:
      201:
        description: Product created
      400:
        description: Missing or invalid fields
      401:
        description: Not authenticated
      403:
        description: Admin role required
    """
    data = CreateProductSchema().load(request.get_json(silent=True) or {})
    result = ProductController.create_product(data)
    return success_response("Product created successfully", result, 201)


@product_bp.route('/<int:product_id>', methods=['PUT'])
@admin_required
def update_product(product_id):
    """
    Update a product (admin only)
    ---
    tags:
      - Products
    parameters:
      - in: path
        name: product_id
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name:
              type: string
            description:
              type: string
            price:
              type: number
            stock:
              type: integer
              description: New counted stock; the difference is logged as a movement
            category_id:
              type: integer
            season:
              type: string
            image_url:
              type: string
            active:
              type: boolean
    responses:
      200:
        description: Product updated
      404:
        description: Product not found
    """
    data = UpdateProductSchema().load(request.get_json(silent=True) or {})
    result = ProductController.update_product(product_id, data)
    return success_response("Product updated successfully", result)


@product_bp.route('/<int:product_id>', methods=['DELETE'])
@admin_required
def deactivate_product(product_id):
    """
    Deactivate (soft-delete) a product (admin only)
    ---
    tags:
      - Products
    parameters:
      - in: path
        name: product_id
        type: integer
        required: true
    responses:
      200:
        description: Product deactivated
      404:
        description: Product not found
    """
    result = ProductController.deactivate_product(product_id)
    return success_response("Product deactivated successfully", result)
