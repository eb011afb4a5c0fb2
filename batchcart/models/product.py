"""Catalog models"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Decimal in memory, JSON number on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]


class Category(BaseModel):
    """Product category"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    description: str = ""
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class Product(BaseModel):
    """Product in the catalog (remote-owned, read-only)"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="_id")
    name: str
    description: str = ""
    category_id: Optional[str] = None
    price: Money = Field(ge=0)
    quantity: int = Field(ge=0, default=0)
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0
