"""Pydantic/SQLModel schemas for API payloads and validation."""
from typing import Optional
from decimal import Decimal
import datetime as dt

from sqlmodel import SQLModel, Field
from pydantic import field_validator, BaseModel

from utils import normalize_iso_datetime

CATEGORY_MAX_LEN = 50
DESCRIPTION_MAX_LEN = 300


class CategoryRead(BaseModel):
    """Response model for a category."""
    id: str
    name: str
    icon: str


class TransactionCreate(SQLModel):
    """Payload for recording an expense. The server fills in the owner."""
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    category: str = Field(min_length=1, max_length=CATEGORY_MAX_LEN)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LEN)
    date: Optional[dt.datetime] = None

    @field_validator("category", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("description")
    @classmethod
    def empty_description_is_none(cls, v):
        return v or None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        if v is None:
            return None
        return normalize_iso_datetime(v)


class FinancialProfileCreate(SQLModel):
    """Payload for the setup flow (create or update)."""
    base_income: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    pre_deducted: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    fixed_costs: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)


# User & Auth schemas

class UserRead(SQLModel):
    """Response model for the current user."""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
