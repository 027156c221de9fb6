from .models import (
    Customer,
    CustomerSession,
    CustomerRole
)
