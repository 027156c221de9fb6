from enum import Enum

class Season(Enum):
    REGULAR = 'regular'
    HALLOWEEN = 'halloween'
    DIA_MUERTOS = 'dia_muertos'
    NAVIDAD = 'navidad'

class ProductStatus(Enum):
    ACTIVE = 'active'
    ARCHIVED = 'archived'

class CartItemStatus(Enum):
    ACTIVE = 'active'
    REMOVED = 'removed'
    CHECKED_OUT = 'checked_out'

class MovementType(Enum):
    ENTRY = 'entry'
    EXIT = 'exit'
