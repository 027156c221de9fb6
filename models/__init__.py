from auth.models import Customer, CustomerSession, CustomerRole
from .category import Category
from .product import Product
from .inventory import InventoryRecord
from .stock_movement import StockMovement, StockEntry, StockExit
from .cart import CartItem
from .enums import Season, ProductStatus, CartItemStatus, MovementType
