from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ProductType(str, Enum):
    READYMADE = "READYMADE"
    PERSONALIZED = "PERSONALIZED"


class Product(BaseModel):
    id: str
    name: str
    type: ProductType = ProductType.READYMADE
    price: float = 0
    description: Optional[str] = None


class ProductCreate(BaseModel):
    name: str
    type: ProductType = ProductType.READYMADE
    price: float = 0
    description: Optional[str] = None


class ProductUpdate(ProductCreate):
    pass
