from .edit_history import diff_sale, edit_history, snapshot_sale
from .ledger import LEDGER_SOURCES, build_party_ledger, parse_date_range
from .pricing import (backsolve_grand_total, compute_invoice_totals,
                      direct_totals, item_totals)
from .sales import (UNSET, SalePatch, SaleUpdateResult, create_sale,
                    recalculate_sale, resolve_sale_update, sale_detail)
