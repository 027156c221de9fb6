from flask import Blueprint, request, g
import logging

from auth.utils import customer_required
from common.response import success_response
from controllers.cart_controller import CartController
from schemas.cart_schemas import AddToCartSchema, UpdateCartItemSchema, CheckoutSchema

logger = logging.getLogger(__name__)

cart_bp = Blueprint('cart', __name__)


@cart_bp.route('', methods=['GET'])
@customer_required
def get_cart():
    """
    Get the current customer's cart
    ---
    tags:
      - Cart
    responses:
      200:
        description: Active cart rows, newest first, each with subtotal and live stock
        schema:
          type: object
          properties:
            message:
              type: string
            data:
              type: object
              properties:
                items:
                  type: array
                  items:
                    type: object
                    properties:
                      cart_item_id:
                        type: integer
                      product_id:
                        type: integer
                      quantity:
                        type: integer
                      price:
                        type: number
                      stock_available:
                        type: integer
                      subtotal:
                        type: number
                item_count:
                  type: integer
                total:
                  type: number
                unavailable_items:
                  type: integer
      401:
        description: Not authenticated
    """
    return success_response("Cart retrieved", CartController.get_cart(g.customer_id))


@cart_bp.route('/items', methods=['POST'])
@customer_required
def add_to_cart():
    """
    Add a product to the cart
    ---
    tags:
      - Cart
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
        description: Product added (or merged into the existing row)
      400:
        description: Invalid quantity or product not available
      404:
        description: Product not found
      409:
        description: Insufficient stock
    """
    data = AddToCartSchema().load(request.get_json(silent=True) or {})
    result = CartController.add_to_cart(g.customer_id, data['product_id'], data['quantity'])
    return success_response("Product added to cart", result)


@cart_bp.route('/items/<int:cart_item_id>', methods=['PUT'])
@customer_required
def update_cart_item(cart_item_id):
    """
    Set the quantity of a cart item
    ---
    tags:
      - Cart
    parameters:
      - in: path
        name: cart_item_id
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - quantity
          properties:
            quantity:
              type: integer
              minimum: 1
    responses:
      200:
        description: Quantity updated
      404:
        description: Item not found in this customer's cart
      409:
        description: Insufficient stock
    """
    data = UpdateCartItemSchema().load(request.get_json(silent=True) or {})
    result = CartController.update_cart_item(g.customer_id, cart_item_id, data['quantity'])
    return success_response("Quantity updated", result)


@cart_bp.route('/items/<int:cart_item_id>', methods=['DELETE'])
@customer_required
def remove_cart_item(cart_item_id):
    """
    Remove an item from the cart
    ---
    tags:
      - Cart
    parameters:
      - in: path
        name: cart_item_id
        type: integer
        required: true
    responses:
      200:
        description: Item removed
      404:
        description: Item not found in this customer's cart
    """
    result = CartController.remove_cart_item(g.customer_id, cart_item_id)
    return success_response("Item removed from cart", result)


@cart_bp.route('', methods=['DELETE'])
@customer_required
def clear_cart():
    """
    Empty the cart (idempotent)
    ---
    tags:
      - Cart
    responses:
      200:
        description: Cart emptied; `removed` is the number of rows affected
    """
    removed = CartController.clear_cart(g.customer_id)
    return success_response("Cart emptied", {"removed": removed})


@cart_bp.route('/checkout', methods=['POST'])
@customer_required
def checkout():
    """
    Check out the cart
    ---
    tags:
      - Cart
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - address
            - city
            - postal_code
            - payment_method
          properties:
            address:
              type: string
            city:
              type: string
            postal_code:
              type: string
            payment_method:
              type: string
            notes:
              type: string
    responses:
      201:
        description: Order placed; stock has left the inventory
      400:
        description: Missing shipping fields, empty cart or unavailable product
      409:
        description: Insufficient stock
    """
    shipping = CheckoutSchema().load(request.get_json(silent=True) or {})
    summary = CartController.checkout(g.customer_id, shipping)
    return success_response("Order placed successfully", summary, 201)
