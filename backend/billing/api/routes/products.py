"""Product catalog CRUD. Name/price checks live here, at the editing boundary."""
from typing import List

from fastapi import APIRouter, Depends, status

from billing.api.deps import get_context
from billing.core.exceptions import BusinessError
from billing.core.tokens import new_token
from billing.schemas.product import Product, ProductCreate, ProductUpdate
from billing.services.context import BillingContext

router = APIRouter()


def _validate(data: ProductCreate):
    if not data.name.strip():
        raise BusinessError.bad_request("Product name cannot be empty")
    if data.price < 0:
        raise BusinessError.bad_request("Price cannot be negative")


@router.get("", response_model=List[Product])
def list_products(ctx: BillingContext = Depends(get_context)):
    return ctx.catalog.list()


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(data: ProductCreate, ctx: BillingContext = Depends(get_context)):
    _validate(data)
    product = Product(
        id=new_token({p.id for p in ctx.catalog.list()}),
        name=data.name.strip(),
        type=data.type,
        price=data.price,
        description=data.description,
    )
    return ctx.catalog.add(product)


@router.put("/{product_id}", response_model=Product)
def update_product(product_id: str, data: ProductUpdate, ctx: BillingContext = Depends(get_context)):
    _validate(data)
    product = Product(id=product_id, **data.model_dump(exclude={"name"}), name=data.name.strip())
    return ctx.catalog.update(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: str, ctx: BillingContext = Depends(get_context)):
    ctx.catalog.remove(product_id)
