from flask import Blueprint, request

from auth.utils import admin_required
from common.response import success_response
from controllers.category_controller import CategoryController
from schemas.product_schemas import CreateCategorySchema

category_bp = Blueprint('category', __name__)


@category_bp.route('', methods=['GET'])
def list_categories():
    """
    List all categories ordered by name
    ---
    tags:
      - Categories
    responses:
      200:
        description: Categories
    """
    return success_response("Categories retrieved", CategoryController.list_categories())


@category_bp.route('', methods=['POST'])
@admin_required
def create_category():
    """
    Create a category (admin only)
    ---
    tags:
      - Categories
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - name
          properties:
            name:
              type: string
            description:
              type: string
    responses:
      201:
        description: Category created
      409:
        description: Category name already exists
    """
    data = CreateCategorySchema().load(request.get_json(silent=True) or {})
    category = CategoryController.create_category(data['name'], data.get('description'))
    return success_response("Category created successfully", category, 201)
