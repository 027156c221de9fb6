from flask import Blueprint, request

from auth.utils import admin_required
from common.response import success_response
from controllers.inventory_controller import InventoryController
from schemas.inventory_schemas import StockEntrySchema, StockExitSchema, AdjustInventorySchema

inventory_bp = Blueprint('inventory', __name__)


@inventory_bp.route('', methods=['GET'])
@admin_required
def list_inventory():
    """
    Full inventory, lowest stock first (admin only)
    ---
    tags:
      - Inventory
    responses:
      200:
        description: Inventory records with product name, price and category
      403:
        description: Admin role required
    """
    return success_response("Inventory retrieved", InventoryController.list_inventory())


@inventory_bp.route('/<int:product_id>', methods=['GET'])
@admin_required
def get_inventory(product_id):
    """
    Inventory record of one product (admin only)
    ---
    tags:
      - Inventory
    parameters:
      - in: path
        name: product_id
        type: integer
        required: true
    responses:
      200:
        description: Inventory record
      404:
        description: Inventory record not found
    """
    return success_response("Inventory retrieved", InventoryController.get_inventory(product_id))


@inventory_bp.route('/entries', methods=['POST'])
@admin_required
def record_entry():
    """
    Record a stock entry (admin only)
    ---
    tags:
      - Inventory
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - product_id
            - quantity
          properties:
            product_id:
              type: integer
            quantity:
              type: integer
              minimum: 1
    responses:
      200:
        description: Entry recorded
      400:
        description: Invalid quantity or unknown product
    """
    data = StockEntrySchema().load(request.get_json(silent=True) or {})
    record = InventoryController.record_entry(data['product_id'], data['quantity'])
    return success_response("Entry recorded successfully", record)


@inventory_bp.route('/exits', methods=['POST'])
@admin_required
def record_exit():
    """
    Record a stock exit (admin only)
    ---
    tags:
      - Inventory
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - product_id
            - quantity
          properties:
            product_id:
              type: integer
            quantity:
              type: integer
              minimum: 1
            reference:
              type: string
    responses:
      200:
        description: Exit recorded
      400:
        description: Invalid quantity
      404:
        description: Inventory record not found
      409:
        description: Insufficient stock
    """
    data = StockExitSchema().load(request.get_json(silent=True) or {})
    record = InventoryController.record_exit(data['product_id'], data['quantity'], data.get('reference'))
    return success_response("Exit recorded successfully", record)


@inventory_bp.route('/<int:product_id>', methods=['PUT'])
@admin_required
def adjust_inventory(product_id):
    """
    Set the counted stock of a product (admin only)
    ---
    tags:
      - Inventory
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
          required:
            - current_quantity
          properties:
            current_quantity:
              type: integer
              minimum: 0
    responses:
      200:
        description: Inventory adjusted; the difference is logged as a movement
      400:
        description: Invalid quantity or no inventory record
    """
    data = AdjustInventorySchema().load(request.get_json(silent=True) or {})
    record = InventoryController.adjust_inventory(product_id, data['current_quantity'])
    return success_response("Inventory adjusted successfully", record)


@inventory_bp.route('/<int:product_id>/movements', methods=['GET'])
@admin_required
def list_movements(product_id):
    """
    Entry and exit history of a product, most recent first (admin only)
    ---
    tags:
      - Inventory
    parameters:
      - in: path
        name: product_id
        type: integer
        required: true
    responses:
      200:
        description: Movements
    """
    return success_response("Movements retrieved", InventoryController.list_movements(product_id))
