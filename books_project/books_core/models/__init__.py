from .company import Company
from .edit_log import SaleEditLog
from .party import Party
from .payment import Payment
from .product import Product
from .purchase import Purchase
from .sale import Sale, SaleItem
from .sales_return import SalesReturn
