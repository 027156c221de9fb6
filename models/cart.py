from datetime import datetime, timezone
from decimal import Decimal

from common.database import db
from models.enums import CartItemStatus


class CartItem(db.Model):
    __tablename__ = 'cart_items'
    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_cart_items_quantity_positive'),
        db.Index('ix_cart_items_customer_status', 'customer_id', 'status'),
    )

    cart_item_id = db.Column(db.Integer, primary_key=True)
    customer_id  = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    product_id   = db.Column(db.Integer, db.ForeignKey('products.product_id'), nullable=False)
    quantity     = db.Column(db.Integer, default=1, nullable=False)
    status       = db.Column(db.Enum(CartItemStatus, values_callable=lambda e: [m.value for m in e]),
                             default=CartItemStatus.ACTIVE, nullable=False)
    added_at     = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relationships
    product  = db.relationship('Product', backref=db.backref('cart_items', lazy='dynamic'))
    customer = db.relationship('Customer', back_populates='cart_items')

    @property
    def is_active(self):
        return self.status == CartItemStatus.ACTIVE

    @property
    def subtotal(self):
        return Decimal(self.quantity) * self.product.price

    def serialize(self):
        product = self.product
        inventory = product.inventory
        return {
            'cart_item_id': self.cart_item_id,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'name': product.name,
            'description': product.description,
            'price': float(product.price),
            'season': product.season.value if product.season else None,
            'image_url': product.image_url,
            'stock_available': inventory.current_quantity if inventory else 0,
            'subtotal': float(self.subtotal),
            'added_at': self.added_at.isoformat() if self.added_at else None
        }
