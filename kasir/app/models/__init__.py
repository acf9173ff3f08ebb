# Import every model so Base.metadata and relationship() strings resolve.

from kasir.app.models.user import CASHIER_ROLES, RoleEnum, User
from kasir.app.models.inventory import MovementType, Product, StockMovement
from kasir.app.models.sales import InvoiceStatus, PaymentMethod, Sale, SaleItem
from kasir.app.models.setting import Setting
from kasir.app.models.storage import StorageBucket, StorageObject

__all__ = [
    "CASHIER_ROLES",
    "RoleEnum",
    "User",
    "MovementType",
    "Product",
    "StockMovement",
    "InvoiceStatus",
    "PaymentMethod",
    "Sale",
    "SaleItem",
    "Setting",
    "StorageBucket",
    "StorageObject",
]
