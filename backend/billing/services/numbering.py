"""Invoice numbering. Next number = highest numeric invoice number + 1.

The number is proposed from a snapshot of the current list and is not
reserved, so two sessions drafting at the same moment can be offered the
same number. Identity is the store-assigned id; the invoice number is only
the human-facing label.
"""
import re
from typing import Iterable, Optional

from billing.core.config import settings
from billing.schemas.invoice import Invoice

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_invoice_number(value: str) -> Optional[int]:
    """Leading integer of an invoice number ("1500abc" -> 1500), or None if it has none.

    Only ASCII digits count; "1_500" reads as 1 and "abc" as None.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def next_invoice_number(invoices: Iterable[Invoice], floor: int = None) -> str:
    """Recompute the next number from scratch every time a draft is started."""
    highest = settings.INVOICE_NUMBER_FLOOR if floor is None else floor
    for inv in invoices:
        num = parse_invoice_number(inv.invoice_number)
        if num is not None and num > highest:
            highest = num
    return str(highest + 1)
