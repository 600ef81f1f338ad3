"""Company profile shown on every invoice."""
from fastapi import APIRouter, Depends

from billing.api.deps import get_context
from billing.schemas.settings import CompanySettings
from billing.services.context import BillingContext

router = APIRouter()


@router.get("", response_model=CompanySettings)
def get_settings(ctx: BillingContext = Depends(get_context)):
    return ctx.company


@router.put("", response_model=CompanySettings)
def replace_settings(data: CompanySettings, ctx: BillingContext = Depends(get_context)):
    return ctx.update_company(data)
