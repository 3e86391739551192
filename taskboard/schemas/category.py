"""Category schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CategoryCreate(BaseModel):
    """Schema for creating a category."""
    name: str = Field(..., max_length=100)
    color: Optional[str] = Field(None, max_length=32)


class CategoryUpdate(BaseModel):
    """Schema for updating a category; blank values keep the current ones."""
    name: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=32)


class CategorySummary(BaseModel):
    """Category fields embedded in task responses."""
    id: str
    name: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class CategoryResponse(BaseModel):
    """Schema for category API responses."""
    id: str
    name: str
    color: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)
