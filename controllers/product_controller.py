import logging

from sqlalchemy import func

from common.database import db, transaction
from common.errors import ValidationError, NotFoundError
from common.validators import require_non_negative
from controllers.inventory_controller import InventoryController
from models.category import Category
from models.enums import Season, ProductStatus
from models.inventory import InventoryRecord
from models.product import Product
from models.stock_movement import StockEntry

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('name', 'description', 'price', 'category_id', 'season', 'image_url')


def _parse_seasons(season):
    values = season if isinstance(season, (list, tuple, set)) else [season]
    parsed = []
    for value in values:
        if isinstance(value, Season):
            parsed.append(value)
            continue
        try:
            parsed.append(Season(value))
        except ValueError:
            raise ValidationError(f"Unknown season '{value}'")
    return parsed


def _check_category(category_id):
    if category_id is not None and not Category.get_by_id(category_id):
        raise ValidationError(f"Category {category_id} does not exist")


class ProductController:
    @staticmethod
    def list_products(season=None, category_id=None, active=None):
        """
        List products with their category name and current stock.

        Filters are conjunctive and only applied when given. `season` accepts
        a single value or a collection of values.
        """
        stock = func.coalesce(InventoryRecord.current_quantity, 0).label('stock')
        query = db.session.query(Product, stock).outerjoin(
            InventoryRecord, InventoryRecord.product_id == Product.product_id
        )

        if season:
            seasons = _parse_seasons(season)
            if len(seasons) == 1:
                query = query.filter(Product.season == seasons[0])
            else:
                query = query.filter(Product.season.in_(seasons))

        if category_id is not None:
            query = query.filter(Product.category_id == category_id)

        if active is not None:
            wanted = ProductStatus.ACTIVE if active else ProductStatus.ARCHIVED
            query = query.filter(Product.status == wanted)

        rows = query.order_by(Product.name.asc(), Product.product_id.asc()).all()
        return [product.serialize(stock=qty) for product, qty in rows]

    @staticmethod
    def get_product(product_id):
        product = Product.get_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product.serialize()

    @staticmethod
    def create_product(data):
        """Create a product together with its inventory record and initial entry movement."""
        if not data.get('name') or data.get('price') is None or data.get('stock') is None:
            raise ValidationError("Name, price and stock are required")
        stock = require_non_negative(data['stock'], "Stock cannot be negative")
        if data['price'] < 0:
            raise ValidationError("Price cannot be negative")

        with transaction("create product"):
            _check_category(data.get('category_id'))

            product = Product(
                name=data['name'],
                description=data.get('description'),
                price=data['price'],
                category_id=data.get('category_id'),
                season=data.get('season') or Season.REGULAR,
                image_url=data.get('image_url'),
                status=ProductStatus.ACTIVE
            )
            db.session.add(product)
            db.session.flush()

            db.session.add(InventoryRecord(product_id=product.product_id,
                                           current_quantity=stock,
                                           reserved_quantity=0))
            if stock > 0:
                db.session.add(StockEntry(product_id=product.product_id, quantity=stock))

        logger.info(f"Product created: id={product.product_id} name={product.name} stock={stock}")
        return {'product_id': product.product_id}

    @staticmethod
    def update_product(product_id, data):
        """
        Update the provided fields of a product.

        A provided `stock` is reconciled with the ledger the same way a manual
        adjustment is, creating the inventory record first when missing.
        """
        with transaction("update product"):
            product = Product.get_by_id(product_id)
            if not product:
                raise NotFoundError("Product not found")

            if 'category_id' in data:
                _check_category(data['category_id'])
            if data.get('price') is not None and data['price'] < 0:
                raise ValidationError("Price cannot be negative")
            if 'name' in data and not data['name']:
                raise ValidationError("Name cannot be empty")

            for field in UPDATABLE_FIELDS:
                if field in data:
                    setattr(product, field, data[field])
            if 'active' in data:
                product.status = ProductStatus.ACTIVE if data['active'] else ProductStatus.ARCHIVED

            if data.get('stock') is not None:
                require_non_negative(data['stock'], "Stock cannot be negative")
                record = InventoryController._locked_record(product_id)
                if record is None:
                    record = InventoryRecord(product_id=product_id, current_quantity=0, reserved_quantity=0)
                    db.session.add(record)
                InventoryController.apply_adjustment(record, data['stock'])

        logger.info(f"Product updated: id={product_id} fields={sorted(data.keys())}")
        return {'product_id': product_id}

    @staticmethod
    def deactivate_product(product_id):
        """Soft-delete a product. Inventory and cart rows keep referencing it."""
        with transaction("deactivate product"):
            product = Product.get_by_id(product_id)
            if not product:
                raise NotFoundError("Product not found")
            product.archive()

        logger.info(f"Product archived: id={product_id}")
        return {'product_id': product_id}
