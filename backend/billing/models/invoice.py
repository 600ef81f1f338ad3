from sqlalchemy import Column, BigInteger, String, Float, DateTime, JSON
from sqlalchemy.sql import func
from billing.db.base import Base


class InvoiceRow(Base):
    """
    Persisted invoice record.

    Flat copy of the domain Invoice. total_amount and status are snapshots
    taken at save time for fast listing; the derivation in
    services.invoice_service stays the source of truth.
    """
    __tablename__ = "invoices"

    id = Column(String(32), primary_key=True, index=True)  # store-assigned
    seq = Column(BigInteger, nullable=False, index=True)  # insertion order, breaks created_at ties
    invoice_number = Column(String(64), nullable=False, default="")
    date = Column(String(32), nullable=False, default="")  # ISO-8601 calendar date
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(64), default="")
    address = Column(String(1024), default="")
    email = Column(String(255), default="")
    office_no = Column(String(64), default="")
    msme_no = Column(String(64), default="")
    items = Column(JSON, nullable=False, default=list)  # [{id, description, quantity, rate, productId}]
    extra_charges = Column(Float, nullable=False, default=0.0)
    extra_charges_label = Column(String(128), nullable=False, default="Extra Charges")
    amount_paid = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    status = Column(String(16), nullable=False, default="UNPAID")  # UNPAID, PARTIAL, PAID
    created_at = Column(DateTime(timezone=True), server_default=func.now())
