"""Dashboard cards and the monthly sales chart."""
from fastapi import APIRouter, Depends

from billing.api.deps import get_context
from billing.schemas.analytics import DashboardSummary
from billing.services.context import BillingContext
from billing.services.report_service import dashboard_summary

router = APIRouter()


@router.get("/summary", response_model=DashboardSummary)
async def get_analytics_summary(ctx: BillingContext = Depends(get_context)):
    return dashboard_summary(await ctx.invoice_store.list())
