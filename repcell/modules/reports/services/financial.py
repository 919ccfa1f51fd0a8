"""
Financial Reports Service

Period summary (income vs expenses by calendar bucket), top products sold
by invoice and expenses grouped by category.

Income for a bucket is invoice totals plus manual income transactions.
Income transactions linked to an invoice are skipped so a sale is counted
once.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import or_

from .base import BaseReportService
from repcell.core.config import settings
from repcell.modules.accounting.models import Transaction, TransactionType
from repcell.modules.invoices.models import Invoice, InvoiceItem
from repcell.modules.inventory.models import Product

ZERO = Decimal("0")
UNCATEGORIZED = "uncategorized"
SORT_FIELDS = ("quantity", "value")


class FinancialReportService(BaseReportService):
    """Service for generating financial reports"""

    def get_summary(
        self,
        date_from=None,
        date_to=None,
        granularity: Optional[str] = None
    ) -> Dict:
        """
        Income, expense and net per bucket, sorted ascending by bucket.
        """
        start, end = self._parse_range(date_from, date_to)
        granularity = self._normalize_granularity(granularity)

        by_bucket: Dict[str, Dict[str, Decimal]] = {}

        def bucket(key: str) -> Dict[str, Decimal]:
            return by_bucket.setdefault(key, {"sales": ZERO, "income": ZERO, "expense": ZERO})

        invoice_query = self._apply_date_filter(
            self.db.query(Invoice.created_at, Invoice.total), Invoice.created_at, start, end
        )
        for row in invoice_query.yield_per(500):
            bucket(self._bucket_key(row.created_at, granularity))["sales"] += Decimal(row.total)

        tx_query = self._apply_date_filter(
            self.db.query(Transaction.date, Transaction.type, Transaction.amount),
            Transaction.date, start, end
        ).filter(
            or_(
                Transaction.type == TransactionType.EXPENSE,
                Transaction.invoice_id.is_(None)
            )
        )
        for row in tx_query.yield_per(500):
            values = bucket(self._bucket_key(row.date, granularity))
            if row.type == TransactionType.INCOME:
                values["income"] += Decimal(row.amount)
            else:
                values["expense"] += Decimal(row.amount)

        rows = []
        for key in sorted(by_bucket, key=lambda k: self._bucket_order(k, granularity)):
            values = by_bucket[key]
            income = values["sales"] + values["income"]
            expense = values["expense"]
            rows.append({
                "bucket": key,
                "income": income,
                "expense": expense,
                "net": income - expense
            })

        return {
            "from": start,
            "to": end,
            "granularity": granularity,
            "rows": rows
        }

    def get_top_products(
        self,
        date_from=None,
        date_to=None,
        sort_by: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Dict:
        """
        Invoice items grouped by (product, description), best sellers first.

        The current product name is shown when the product still exists,
        otherwise the item description.
        """
        start, end = self._parse_range(date_from, date_to)
        sort_by = sort_by if sort_by in SORT_FIELDS else "quantity"
        if limit is None:
            limit = settings.TOP_PRODUCTS_DEFAULT
        limit = min(settings.TOP_PRODUCTS_MAX, max(1, limit))

        item_query = self._apply_date_filter(
            self.db.query(
                InvoiceItem.product_id,
                InvoiceItem.description,
                InvoiceItem.quantity,
                InvoiceItem.unit_price,
                Product.name.label("product_name")
            ).join(
                Invoice, InvoiceItem.invoice_id == Invoice.id
            ).outerjoin(
                Product, InvoiceItem.product_id == Product.id
            ),
            Invoice.created_at, start, end
        )

        groups: Dict[tuple, Dict] = {}
        for row in item_query.yield_per(500):
            key = (row.product_id, row.description)
            group = groups.get(key)
            if group is None:
                group = groups[key] = {
                    "product_id": row.product_id,
                    "name": row.product_name or row.description,
                    "quantity": 0,
                    "value": ZERO
                }
            group["quantity"] += row.quantity
            group["value"] += Decimal(row.quantity) * Decimal(row.unit_price)

        rows = sorted(groups.values(), key=lambda g: g[sort_by], reverse=True)[:limit]

        return {
            "from": start,
            "to": end,
            "sort_by": sort_by,
            "rows": rows
        }

    def get_expenses_by_category(self, date_from=None, date_to=None) -> Dict:
        """Expense transactions grouped by category, largest first, plus grand total."""
        start, end = self._parse_range(date_from, date_to)

        expense_query = self._apply_date_filter(
            self.db.query(Transaction.category, Transaction.amount),
            Transaction.date, start, end
        ).filter(Transaction.type == TransactionType.EXPENSE)

        totals: Dict[str, Decimal] = {}
        for row in expense_query.yield_per(500):
            category = row.category or UNCATEGORIZED
            totals[category] = totals.get(category, ZERO) + Decimal(row.amount)

        rows: List[Dict] = [
            {"category": category, "total": total}
            for category, total in sorted(totals.items(), key=lambda item: item[1], reverse=True)
        ]

        return {
            "from": start,
            "to": end,
            "total": sum((row["total"] for row in rows), ZERO),
            "rows": rows
        }
