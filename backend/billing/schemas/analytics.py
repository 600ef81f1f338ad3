from typing import Dict, List

from billing.schemas.invoice import CamelModel


class MonthlySales(CamelModel):
    month: str  # YYYY-MM
    amount: float


class DashboardSummary(CamelModel):
    total_revenue: float
    outstanding: float
    invoice_count: int
    status_counts: Dict[str, int]
    monthly_sales: List[MonthlySales]
