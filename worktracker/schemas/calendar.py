from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field


class CalendarEventCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    event_type: Literal["reminder", "deadline", "meeting"] = "reminder"
    event_date: date
