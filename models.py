from typing import Optional
from decimal import Decimal
from datetime import datetime

from sqlmodel import SQLModel, Field

from utils import utcnow

# These classes describe what data will be stored in the database.
# Each class = one table.
# Each variable inside becomes a column in that table.
class User(SQLModel, table=True):
    """Identity record. Created on first login, never deleted here."""
    __tablename__ = "users"

    id: str = Field(primary_key=True, max_length=255)
    email: Optional[str] = Field(default=None, index=True, max_length=255)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AuthSession(SQLModel, table=True):
    """One row per issued session cookie.
    - 'sid' is the opaque token carried by the cookie
    - 'expire' is checked at lookup time, rows are never swept
    """
    __tablename__ = "sessions"

    sid: str = Field(primary_key=True, max_length=255)
    user_id: str = Field(foreign_key="users.id", index=True)
    expire: datetime = Field(index=True)


class FinancialProfile(SQLModel, table=True):
    """Monthly baseline used to derive the daily budget.
    - 'pre_deducted' = debts or advances already taken from the income
    - 'fixed_costs' = rent, bills and other fixed monthly costs
    """
    __tablename__ = "financial_profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True, unique=True)
    base_income: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    pre_deducted: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    fixed_costs: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    start_date: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Transaction(SQLModel, table=True):
    """A single expense recorded by the user."""
    __tablename__ = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True) # unique ID
    user_id: str = Field(foreign_key="users.id", index=True)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2) # always an expense
    category: str = Field(min_length=1, max_length=50) # id from CATEGORIES, e.g. 'super'
    description: Optional[str] = None
    date: datetime = Field(default_factory=utcnow, index=True)


# Fixed category table shared by every user (id -> name, icon).
CATEGORIES = [
    {"id": "super", "name": "Super", "icon": "🛒"},
    {"id": "delivery", "name": "Delivery", "icon": "🍔"},
    {"id": "transporte", "name": "Transp.", "icon": "🚌"},
    {"id": "ocio", "name": "Ocio", "icon": "🍻"},
    {"id": "servicios", "name": "Servicios", "icon": "💡"},
    {"id": "varios", "name": "Varios", "icon": "📦"},
]
GENERIC_ICON = "📦"


def resolve_category(category_id: str) -> dict:
    """Look up a category, degrading to the generic icon when unknown."""
    for category in CATEGORIES:
        if category["id"] == category_id:
            return category
    return {"id": category_id, "name": None, "icon": GENERIC_ICON}
