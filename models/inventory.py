from datetime import datetime, timezone

from common.database import db


class InventoryRecord(db.Model):
    __tablename__ = 'inventory'
    __table_args__ = (
        db.CheckConstraint('current_quantity >= 0', name='ck_inventory_current_non_negative'),
        db.CheckConstraint('reserved_quantity >= 0', name='ck_inventory_reserved_non_negative'),
    )

    inventory_id      = db.Column(db.Integer, primary_key=True)
    product_id        = db.Column(db.Integer, db.ForeignKey('products.product_id'), nullable=False, unique=True)
    current_quantity  = db.Column(db.Integer, default=0, nullable=False)
    # Units held by active cart rows; released on removal, consumed on checkout
    reserved_quantity = db.Column(db.Integer, default=0, nullable=False)
    last_updated      = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relationship
    product = db.relationship('Product', back_populates='inventory')

    @property
    def available_quantity(self):
        return max((self.current_quantity or 0) - (self.reserved_quantity or 0), 0)

    def serialize(self):
        product = self.product
        return {
            'inventory_id': self.inventory_id,
            'product_id': self.product_id,
            'product_name': product.name if product else None,
            'price': float(product.price) if product and product.price is not None else None,
            'category_name': product.category.name if product and product.category else None,
            'current_quantity': self.current_quantity,
            'reserved_quantity': self.reserved_quantity,
            'available_quantity': self.available_quantity,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None
        }
