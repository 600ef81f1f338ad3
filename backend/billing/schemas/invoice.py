from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire format uses camelCase keys (invoiceNumber, amountPaid, ...)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class InvoiceStatus(str, Enum):
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class LineItem(CamelModel):
    id: str
    description: str = ""
    quantity: float = Field(1, ge=0)
    rate: float = Field(0, ge=0)
    product_id: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.quantity * self.rate


class Invoice(CamelModel):
    id: Optional[str] = None  # None while still a draft
    invoice_number: str = ""
    date: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    address: str = ""
    email: str = ""
    office_no: str = ""
    msme_no: str = ""
    items: List[LineItem] = Field(default_factory=list)
    extra_charges: float = Field(0, ge=0)
    extra_charges_label: str = "Extra Charges"
    amount_paid: float = Field(0, ge=0)
    total_amount: float = 0
    status: InvoiceStatus = InvoiceStatus.UNPAID

    def to_record(self) -> dict:
        """Flat storage/wire record, camelCase keys, no id."""
        return self.model_dump(by_alias=True, mode="json", exclude={"id"})


class InvoiceSummary(CamelModel):
    """Read surface for anything that prints or displays an invoice."""
    sub_total: float
    extra_charges: float
    extra_charges_label: str
    amount_paid: float
    balance_due: float
    total: float
    status: InvoiceStatus
    items: List[LineItem]


class NextNumberResponse(CamelModel):
    invoice_number: str
