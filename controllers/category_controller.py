import logging

from sqlalchemy.exc import IntegrityError

from common.database import db, transaction
from common.errors import ValidationError, ConflictError
from models.category import Category

logger = logging.getLogger(__name__)


class CategoryController:
    @staticmethod
    def list_categories():
        """Get all categories ordered by name"""
        categories = Category.query.order_by(Category.name.asc()).all()
        return [category.serialize() for category in categories]

    @staticmethod
    def create_category(name, description=None):
        name = (name or '').strip()
        if not name:
            raise ValidationError("Category name is required")

        if Category.get_by_name(name):
            raise ConflictError(f"Category '{name}' already exists")

        with transaction("create category"):
            category = Category(name=name, description=description)
            db.session.add(category)
            try:
                db.session.flush()
            except IntegrityError as e:
                raise ConflictError(f"Category '{name}' already exists") from e

        logger.info(f"Category created: id={category.category_id} name={name}")
        return category.serialize()
