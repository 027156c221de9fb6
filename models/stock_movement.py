from datetime import datetime, timezone

from common.database import db
from models.enums import MovementType


class StockMovement(db.Model):
    """Append-only stock history. The autoincrement id doubles as insertion sequence."""
    __tablename__ = 'stock_movements'
    __table_args__ = (
        db.CheckConstraint('quantity > 0', name='ck_stock_movements_quantity_positive'),
        db.Index('ix_stock_movements_product_time', 'product_id', 'occurred_at'),
    )

    movement_id   = db.Column(db.Integer, primary_key=True)
    product_id    = db.Column(db.Integer, db.ForeignKey('products.product_id'), nullable=False)
    movement_type = db.Column(db.Enum(MovementType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    quantity      = db.Column(db.Integer, nullable=False)
    occurred_at   = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    reference     = db.Column(db.String(255), nullable=True)

    product = db.relationship('Product', backref=db.backref('movements', lazy='dynamic'))

    __mapper_args__ = {
        'polymorphic_on': movement_type,
    }

    def serialize(self):
        return {
            'movement_id': self.movement_id,
            'product_id': self.product_id,
            'type': self.movement_type.value,
            'quantity': self.quantity,
            'occurred_at': self.occurred_at.isoformat() if self.occurred_at else None,
            'reference': self.reference
        }


class StockEntry(StockMovement):
    __mapper_args__ = {'polymorphic_identity': MovementType.ENTRY}


class StockExit(StockMovement):
    __mapper_args__ = {'polymorphic_identity': MovementType.EXIT}
