from datetime import datetime, timezone
from decimal import Decimal
import logging
import uuid

from flask import current_app
from sqlalchemy import update, case

from common.database import db, transaction
from common.errors import (
    ValidationError, NotFoundError, ConflictError, ProductInactiveError, InsufficientStockError
)
from common.validators import require_positive
from models.cart import CartItem
from models.enums import CartItemStatus
from models.inventory import InventoryRecord
from models.product import Product
from models.stock_movement import StockExit

logger = logging.getLogger(__name__)

CHECKOUT_FIELDS = ('address', 'city', 'postal_code', 'payment_method')


def _fresh_inventory(product_id):
    return InventoryRecord.query.filter_by(product_id=product_id).populate_existing().first()


def _released(quantity):
    return case(
        (InventoryRecord.reserved_quantity >= quantity, InventoryRecord.reserved_quantity - quantity),
        else_=0
    )


class CartController:
    """
    Per-customer cart. Cart quantities are reserved against the inventory
    record with conditional updates, so the sum of all active cart rows for a
    product never exceeds its current stock.

    Cart rows are read with locking reads and leave the active state through
    a conditional UPDATE, so a row's reservation is released or consumed at
    most once even when the same request is submitted twice.
    """

    @staticmethod
    def _reserve(product_id, quantity):
        result = db.session.execute(
            update(InventoryRecord)
            .where(InventoryRecord.product_id == product_id,
                   InventoryRecord.current_quantity - InventoryRecord.reserved_quantity >= quantity)
            .values(reserved_quantity=InventoryRecord.reserved_quantity + quantity),
            execution_options={'synchronize_session': False}
        )
        if result.rowcount == 0:
            record = _fresh_inventory(product_id)
            raise InsufficientStockError(record.available_quantity if record else 0)

    @staticmethod
    def _release(product_id, quantity):
        db.session.execute(
            update(InventoryRecord)
            .where(InventoryRecord.product_id == product_id)
            .values(reserved_quantity=_released(quantity)),
            execution_options={'synchronize_session': False}
        )

    @staticmethod
    def _active_rows(customer_id, **criteria):
        """Active cart rows of the customer, locked until the transaction ends."""
        return CartItem.query.filter_by(
            customer_id=customer_id,
            status=CartItemStatus.ACTIVE,
            **criteria
        ).with_for_update().populate_existing()

    @staticmethod
    def _get_active_item(customer_id, cart_item_id):
        item = CartController._active_rows(customer_id, cart_item_id=cart_item_id).first()
        if not item:
            raise NotFoundError("Cart item not found")
        return item

    @staticmethod
    def _close(item, status):
        """
        Move an active row to `status`.

        Returns:
            bool: False when the row had already left the active state
        """
        result = db.session.execute(
            update(CartItem)
            .where(CartItem.cart_item_id == item.cart_item_id,
                   CartItem.status == CartItemStatus.ACTIVE)
            .values(status=status),
            execution_options={'synchronize_session': False}
        )
        return result.rowcount == 1

    @staticmethod
    def get_cart(customer_id):
        """
        Get the customer's active cart rows, newest first, with live stock and subtotals.

        Rows pointing at archived products are left out of the listing and only counted.
        """
        items = CartItem.query.join(Product).filter(
            CartItem.customer_id == customer_id,
            CartItem.status == CartItemStatus.ACTIVE
        ).order_by(CartItem.cart_item_id.desc()).all()

        available = [item for item in items if item.product.is_active]
        total = sum((item.subtotal for item in available), Decimal('0'))

        return {
            'items': [item.serialize() for item in available],
            'item_count': sum(item.quantity for item in available),
            'total': float(total),
            'unavailable_items': len(items) - len(available)
        }

    @staticmethod
    def add_to_cart(customer_id, product_id, quantity):
        """
        Add a product to the customer's cart, merging with an existing active row.
        """
        require_positive(quantity, "Product and a quantity greater than zero are required")

        with transaction("add product to cart"):
            product = Product.get_by_id(product_id)
            if not product:
                raise NotFoundError("Product not found")
            if not product.is_active:
                raise ProductInactiveError("Product is not available")

            # The reservation holds the inventory row lock, and the locking read
            # below sees rows committed by an add that held it before us.
            CartController._reserve(product_id, quantity)

            cart_item = CartController._active_rows(customer_id, product_id=product_id).first()

            if cart_item:
                cart_item.quantity += quantity
            else:
                cart_item = CartItem(
                    customer_id=customer_id,
                    product_id=product_id,
                    quantity=quantity,
                    status=CartItemStatus.ACTIVE
                )
                db.session.add(cart_item)

        logger.info(f"Cart add: customer={customer_id} product={product_id} quantity={quantity}")
        return {
            'cart_item_id': cart_item.cart_item_id,
            'product': product.name,
            'quantity': cart_item.quantity
        }

    @staticmethod
    def update_cart_item(customer_id, cart_item_id, quantity):
        """Set the quantity of one of the customer's active cart rows."""
        require_positive(quantity, "Invalid quantity")

        with transaction("update cart item"):
            cart_item = CartController._get_active_item(customer_id, cart_item_id)
            delta = quantity - cart_item.quantity

            if delta > 0:
                if not cart_item.product.is_active:
                    raise ProductInactiveError("Product is not available")
                try:
                    CartController._reserve(cart_item.product_id, delta)
                except InsufficientStockError as e:
                    # The row's own reservation counts towards what it may hold
                    raise InsufficientStockError(e.available + cart_item.quantity) from e
            elif delta < 0:
                CartController._release(cart_item.product_id, -delta)

            cart_item.quantity = quantity

        return {'cart_item_id': cart_item_id, 'quantity': quantity}

    @staticmethod
    def remove_cart_item(customer_id, cart_item_id):
        """Soft-delete one of the customer's cart rows and release its reservation."""
        with transaction("remove cart item"):
            cart_item = CartController._get_active_item(customer_id, cart_item_id)
            if not CartController._close(cart_item, CartItemStatus.REMOVED):
                raise NotFoundError("Cart item not found")
            CartController._release(cart_item.product_id, cart_item.quantity)

        return {'cart_item_id': cart_item_id}

    @staticmethod
    def clear_cart(customer_id):
        """
        Soft-delete every active cart row of the customer.

        Returns:
            int: number of rows affected, 0 when the cart was already empty
        """
        removed = 0
        with transaction("clear cart"):
            for item in CartController._active_rows(customer_id).all():
                if CartController._close(item, CartItemStatus.REMOVED):
                    CartController._release(item.product_id, item.quantity)
                    removed += 1

        logger.info(f"Cart cleared: customer={customer_id} rows={removed}")
        return removed

    @staticmethod
    def checkout(customer_id, shipping):
        """
        Turn the customer's cart into stock exits.

        Every reserved unit leaves the inventory with an exit movement
        referencing the generated order reference, and the cart rows are
        marked as checked out. Nothing is written if any row fails.
        """
        missing = [field for field in CHECKOUT_FIELDS if not (shipping or {}).get(field)]
        if missing:
            raise ValidationError("Please fill in all required checkout fields", details={'missing': missing})

        order_reference = f"ORDER-{uuid.uuid4().hex[:10].upper()}"
        shipping_fee = Decimal(str(current_app.config.get('SHIPPING_FEE', 0)))

        with transaction("check out cart"):
            items = CartController._active_rows(customer_id).order_by(CartItem.cart_item_id.asc()).all()
            if not items:
                raise ValidationError("Your cart is empty")

            lines = []
            subtotal = Decimal('0')
            for item in items:
                product = item.product
                if not product.is_active:
                    raise ProductInactiveError(f"{product.name} is no longer available")

                if not CartController._close(item, CartItemStatus.CHECKED_OUT):
                    raise ConflictError("Your cart changed during checkout, please review it")

                result = db.session.execute(
                    update(InventoryRecord)
                    .where(InventoryRecord.product_id == item.product_id,
                           InventoryRecord.current_quantity >= item.quantity)
                    .values(current_quantity=InventoryRecord.current_quantity - item.quantity,
                            reserved_quantity=_released(item.quantity),
                            last_updated=datetime.now(timezone.utc)),
                    execution_options={'synchronize_session': 'fetch'}
                )
                if result.rowcount == 0:
                    record = _fresh_inventory(item.product_id)
                    remaining = record.current_quantity if record else 0
                    raise InsufficientStockError(
                        remaining,
                        f"Insufficient stock for {product.name}. Only {remaining} units available"
                    )

                db.session.add(StockExit(product_id=item.product_id,
                                         quantity=item.quantity,
                                         reference=order_reference))
                lines.append(item.serialize())
                subtotal += item.subtotal

        logger.info(f"Checkout: customer={customer_id} reference={order_reference} lines={len(lines)}")
        return {
            'order_reference': order_reference,
            'items': lines,
            'item_count': sum(line['quantity'] for line in lines),
            'subtotal': float(subtotal),
            'shipping_fee': float(shipping_fee),
            'total': float(subtotal + shipping_fee),
            'shipping': {field: shipping.get(field) for field in CHECKOUT_FIELDS + ('notes',)}
        }
