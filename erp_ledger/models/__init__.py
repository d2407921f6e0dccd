# erp_ledger/models/__init__.py
from .account import Account, AccountType, AccountingPeriod, PeriodStatus
from .journal import JournalEntry, JournalEntryLine
from .catalog import Product, ProductType, Customer, Supplier, Warehouse
from .payment import PaymentMethod, PaymentStatus
from .inventory import (
    InventoryItem,
    InventoryMovement,
    MovementType,
    InventoryAdjustment,
    InventoryAdjustmentItem,
    StockTransfer,
    StockTransferItem,
    TransferStatus,
)
from .sales import Order, OrderItem, OrderStatus, SalesReturn, SalesReturnItem, SalesReturnStatus
from .purchase import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus
from .production import BillOfMaterials, BillOfMaterialsItem, WorkOrder, WorkOrderStatus, ProductionStep
from .sequence import DocumentSequence
