import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    __tablename__ = "producto"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, index=True)
    category: str = Field(nullable=False)
    unit: str = Field(nullable=False)  # "kg", "pieza"...
    supplier: str = Field(nullable=False)
    price: float = Field(nullable=False, ge=0)
    stock: float = Field(nullable=False, ge=0)  # Nunca negativo
    expiry_date: datetime.date = Field(nullable=False)
