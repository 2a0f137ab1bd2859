# Importing every model module registers its table on ``Base.metadata``.
from .category import Category
from .client import Client
from .employee import Employee
from .payment_method import PaymentMethod
from .product import InventoryStock, Product
from .purchase import Purchase, PurchaseLine, PurchaseStatus
from .sale import Commission, Sale, SaleLine, SaleStatus
from .sales_return import ReturnStatus, SalesReturn
from .supplier import Supplier
from .user import User, UserAction, UserLogEntry

__all__ = [
    "Category",
    "Client",
    "Commission",
    "Employee",
    "InventoryStock",
    "PaymentMethod",
    "Product",
    "Purchase",
    "PurchaseLine",
    "PurchaseStatus",
    "ReturnStatus",
    "Sale",
    "SaleLine",
    "SaleStatus",
    "SalesReturn",
    "Supplier",
    "User",
    "UserAction",
    "UserLogEntry",
]
