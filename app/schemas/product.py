"""
Product schemas for API request/response validation.
"""

from typing import Optional

from pydantic import BaseModel, Field

# Largest stock count a 32-bit INTEGER column holds
MAX_STOCK = 2**31 - 1


class ProductCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    price: float = Field(gt=0, allow_inf_nan=False)
    category: str = Field(min_length=1, max_length=100)
    stock: int = Field(ge=0, le=MAX_STOCK)


class ProductUpdate(BaseModel):
    """Partial update; omitted fields keep their stored values."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=1000)
    price: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    stock: Optional[int] = Field(default=None, ge=0, le=MAX_STOCK)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ProductRead(BaseModel):
    id: str
    name: str
    description: str
    price: float
    category: str
    stock: int

    model_config = {"from_attributes": True}
