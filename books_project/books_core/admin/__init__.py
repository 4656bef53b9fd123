from .actions import recompute_sale_totals
from .company import CompanyAdmin, PartyAdmin, ProductAdmin
from .inlines import SaleEditLogInline, SaleItemInline
from .ReadOnly import ReadOnlyInline
from .sale import SaleAdmin
from .transactions import (PaymentAdmin, PurchaseAdmin, SalesReturnAdmin)
