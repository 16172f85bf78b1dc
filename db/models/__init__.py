from .user import User, UserRole
from .supplier import Supplier
from .customer import Customer
from .warehouse import Warehouse
from .product import Product, ProductCategory
from .cost_item_type import CostItemType

from .batch import Batch, BatchStatus, LandedCostItem
from .inventory import Inventory
from .transfer import InventoryTransfer, TransferItem, TransferStatus

from .purchase import PurchaseOrder, PurchaseOrderItem, POStatus
from .sales import SalesOrder, SalesOrderItem, SalesOrderAllocation, SOStatus

from .accounting import (
    AccountCategory,
    ChartOfAccount,
    JournalEntry,
    JournalEntryLine,
    AccountReceivable,
    AccountPayable,
    AccountType,
    NormalBalance,
    JournalStatus,
    InvoiceStatus,
)
from .setting import SystemSetting, NumberSeries

__all__ = [n for n in dir() if n[:1].isupper()]
