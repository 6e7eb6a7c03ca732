from .inventory import Product
from .customers import Customer
from .sales import Transaction, TransactionItem, PaymentLog
from .shopping import ShoppingList, ShoppingListItem, ShoppingListTransfer, ShoppingListTransferLine
from .auth import User
from .metadata import StoreMetadata

__all__ = [
    'Product',
    'Customer',
    'Transaction', 'TransactionItem', 'PaymentLog',
    'ShoppingList', 'ShoppingListItem', 'ShoppingListTransfer', 'ShoppingListTransferLine',
    'User',
    'StoreMetadata',
]
