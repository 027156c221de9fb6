from datetime import datetime, timezone
import logging

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from common.database import db, transaction
from common.errors import ValidationError, NotFoundError, ConflictError, InsufficientStockError
from common.validators import require_positive, require_non_negative
from models.product import Product
from models.inventory import InventoryRecord
from models.stock_movement import StockMovement, StockEntry, StockExit

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


class InventoryController:
    """Authoritative stock per product plus its append-only movement history."""

    @staticmethod
    def list_inventory():
        records = InventoryRecord.query.join(Product).order_by(
            InventoryRecord.current_quantity.asc(),
            Product.name.asc()
        ).all()
        return [record.serialize() for record in records]

    @staticmethod
    def get_inventory(product_id):
        record = InventoryRecord.query.filter_by(product_id=product_id).first()
        if not record:
            raise NotFoundError("Inventory record not found")
        return record.serialize()

    @staticmethod
    def _locked_record(product_id):
        return InventoryRecord.query.filter_by(product_id=product_id).with_for_update().populate_existing().first()

    @staticmethod
    def record_entry(product_id, quantity):
        """
        Add stock for a product and log an entry movement.

        The inventory record is created at `quantity` when the product has none yet.
        If a concurrent request creates that record first, the entry is retried
        once as a plain increment.
        """
        require_positive(quantity)

        try:
            record = InventoryController._apply_entry(product_id, quantity)
        except ConflictError:
            logger.info(f"Inventory record for product {product_id} created concurrently, retrying entry")
            record = InventoryController._apply_entry(product_id, quantity)

        logger.info(f"Stock entry recorded: product={product_id} quantity={quantity}")
        return record.serialize()

    @staticmethod
    def _apply_entry(product_id, quantity):
        with transaction("record stock entry"):
            if not Product.get_by_id(product_id):
                raise ValidationError(f"Product {product_id} does not exist")

            record = InventoryController._locked_record(product_id)
            if record is None:
                # No row to lock yet; the unique product_id index arbitrates concurrent creators
                record = InventoryRecord(product_id=product_id, current_quantity=quantity,
                                         reserved_quantity=0, last_updated=_now())
                db.session.add(record)
                try:
                    db.session.flush()
                except IntegrityError as e:
                    raise ConflictError("Inventory record already exists") from e
            else:
                db.session.execute(
                    update(InventoryRecord)
                    .where(InventoryRecord.product_id == product_id)
                    .values(current_quantity=InventoryRecord.current_quantity + quantity,
                            last_updated=_now()),
                    execution_options={'synchronize_session': False}
                )

            db.session.add(StockEntry(product_id=product_id, quantity=quantity))

        db.session.refresh(record)
        return record

    @staticmethod
    def record_exit(product_id, quantity, reference=None):
        """
        Remove stock for a product and log an exit movement.

        The decrement is a single conditional UPDATE, so concurrent exits can
        never drive the current quantity below zero.
        """
        require_positive(quantity)

        with transaction("record stock exit"):
            record = InventoryRecord.query.filter_by(product_id=product_id).first()
            if record is None:
                raise NotFoundError("Inventory record not found")

            result = db.session.execute(
                update(InventoryRecord)
                .where(InventoryRecord.product_id == product_id,
                       InventoryRecord.current_quantity >= quantity)
                .values(current_quantity=InventoryRecord.current_quantity - quantity,
                        last_updated=_now()),
                execution_options={'synchronize_session': False}
            )
            if result.rowcount == 0:
                db.session.refresh(record)
                raise InsufficientStockError(record.current_quantity)

            db.session.add(StockExit(product_id=product_id, quantity=quantity, reference=reference))

        db.session.refresh(record)
        logger.info(f"Stock exit recorded: product={product_id} quantity={quantity} reference={reference}")
        return record.serialize()

    @staticmethod
    def adjust_inventory(product_id, new_quantity):
        """Set the current quantity to a counted value, logging the difference."""
        require_non_negative(new_quantity)

        with transaction("adjust inventory"):
            record = InventoryController._locked_record(product_id)
            if record is None:
                raise ValidationError("Inventory record not found")
            delta = InventoryController.apply_adjustment(record, new_quantity)

        logger.info(f"Inventory adjusted: product={product_id} quantity={new_quantity} delta={delta}")
        return record.serialize()

    @staticmethod
    def apply_adjustment(record, new_quantity):
        """
        Set `record` to `new_quantity` inside the caller's transaction.

        Appends one entry movement for a positive difference, one exit movement
        tagged as a manual adjustment for a negative one, nothing for zero.
        The record must already be locked by the caller.

        Returns:
            int: the applied difference
        """
        delta = new_quantity - record.current_quantity
        record.current_quantity = new_quantity
        record.last_updated = _now()

        if delta > 0:
            db.session.add(StockEntry(product_id=record.product_id, quantity=delta))
        elif delta < 0:
            db.session.add(StockExit(
                product_id=record.product_id,
                quantity=abs(delta),
                reference=current_app.config.get('MANUAL_ADJUSTMENT_REFERENCE', 'MANUAL ADJUSTMENT')
            ))
        return delta

    @staticmethod
    def list_movements(product_id):
        """Entries and exits merged, most recent first; same-instant ties fall back to insertion order."""
        movements = StockMovement.query.filter_by(product_id=product_id).order_by(
            StockMovement.occurred_at.desc(),
            StockMovement.movement_id.desc()
        ).all()
        return [movement.serialize() for movement in movements]
