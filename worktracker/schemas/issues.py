from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .common import known_department


Category = Literal["hardware", "software", "network", "general"]
Priority = Literal["low", "medium", "high", "critical"]


class IssueCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: Category = "general"
    priority: Priority = "medium"
    department: Optional[str] = None  # honoured for admins filing on behalf of a department

    @field_validator('department')
    @classmethod
    def validate_department(cls, v):
        return known_department(v)


class ResolveRequest(BaseModel):
    resolution_notes: str = Field(min_length=1)
