from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class InvoiceInput(BaseModel):
    vendor_name: str = Field(min_length=1)
    invoice_number: str = Field(min_length=1)
    amount: Decimal = Field(ge=0)
    description: Optional[str] = None
    issue_date: Optional[date] = None  # defaults to today
    due_date: Optional[date] = None  # defaults to today + invoice term
    notes: Optional[str] = None
