"""
Dashboard figures.

Every number is derived through invoice_service so the dashboard can never
disagree with the editor or a printed invoice:
- Total revenue: sum of invoice totals (items + extra charges)
- Outstanding: sum of balances due (overpayments reduce it)
- Counts per derived status
- Monthly sales keyed by YYYY-MM of the invoice date
"""
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable

from billing.schemas.analytics import DashboardSummary, MonthlySales
from billing.schemas.invoice import Invoice, InvoiceStatus
from billing.services.invoice_service import derive_status, invoice_totals


def monthly_sales(invoices: Iterable[Invoice]) -> list:
    """Invoices with an unparseable date are left out of the chart."""
    by_month: Dict[str, float] = defaultdict(float)
    for inv in invoices:
        try:
            day = date.fromisoformat(inv.date)
        except ValueError:
            continue
        by_month[day.strftime("%Y-%m")] += invoice_totals(inv).total
    return [MonthlySales(month=m, amount=by_month[m]) for m in sorted(by_month)]


def dashboard_summary(invoices: Iterable[Invoice]) -> DashboardSummary:
    invoices = list(invoices)
    total_revenue = 0.0
    outstanding = 0.0
    status_counts = {s.value: 0 for s in InvoiceStatus}

    for inv in invoices:
        totals = invoice_totals(inv)
        total_revenue += totals.total
        outstanding += totals.balance_due
        status_counts[derive_status(totals.total, inv.amount_paid).value] += 1

    return DashboardSummary(
        total_revenue=total_revenue,
        outstanding=outstanding,
        invoice_count=len(invoices),
        status_counts=status_counts,
        monthly_sales=monthly_sales(invoices),
    )
