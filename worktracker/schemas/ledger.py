from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


LedgerCategory = Literal["note", "reminder", "plan", "document"]


class LedgerNoteInput(BaseModel):
    title: str = Field(min_length=1)
    content: Optional[str] = None
    category: LedgerCategory = "note"
    reminder_date: Optional[datetime] = None
