# models/product.py
from common.database import db, BaseModel
from models.category import Category
from models.enums import Season, ProductStatus


class Product(BaseModel):
    __tablename__ = 'products'
    __table_args__ = (
        db.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
    )

    product_id  = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.category_id'), nullable=True)
    name        = db.Column(db.String(150), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    price       = db.Column(db.Numeric(10, 2), nullable=False)
    season      = db.Column(db.Enum(Season, values_callable=lambda e: [m.value for m in e]),
                            default=Season.REGULAR, nullable=False)
    image_url   = db.Column(db.String(255), nullable=True)

    # Soft delete: archived products are never physically removed
    status      = db.Column(db.Enum(ProductStatus, values_callable=lambda e: [m.value for m in e]),
                            default=ProductStatus.ACTIVE, nullable=False)

    category    = db.relationship('Category', backref='products')
    inventory   = db.relationship('InventoryRecord', back_populates='product', uselist=False)

    @property
    def is_active(self):
        return self.status == ProductStatus.ACTIVE

    def archive(self):
        self.status = ProductStatus.ARCHIVED

    def serialize(self, stock=None):
        if stock is None:
            stock = self.inventory.current_quantity if self.inventory else 0
        return {
            "product_id": self.product_id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price) if self.price is not None else None,
            "season": self.season.value if self.season else None,
            "image_url": self.image_url,
            "active": self.is_active,
            "status": self.status.value if self.status else None,
            "category_id": self.category_id,
            "category_name": self.category.name if self.category else None,
            "stock": stock
        }

    def __repr__(self):
        return f'<Product {self.name}>'
