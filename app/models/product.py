"""
Product document stored in the ``products`` collection.
"""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel

from app.core.ids import new_object_id


class Product(SQLModel, table=True):
    """Catalog product. Deleted rows are removed, there is no soft delete."""

    __tablename__ = "products"  # type: ignore

    id: str = Field(default_factory=new_object_id, primary_key=True, max_length=24)
    name: str = Field(max_length=100, index=True)
    description: str = Field(max_length=1000)
    price: float
    category: str = Field(index=True, max_length=100)
    stock: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
