"""Process-local identifiers for line items, products and stored invoices."""
import secrets
import uuid
from typing import Container


def new_token(taken: Container[str] = ()) -> str:
    """Short random token, unique among `taken` (e.g. the ids of one invoice's items)."""
    while True:
        token = secrets.token_hex(6)
        if token not in taken:
            return token


def new_record_id() -> str:
    return uuid.uuid4().hex
