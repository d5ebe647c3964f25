import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class StockExit(SQLModel, table=True):
    __tablename__ = "salida_stock"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(nullable=False, index=True)
    product_name: str = Field(nullable=False)
    quantity: float = Field(nullable=False, gt=0)
    date: datetime.date = Field(nullable=False)
    reason: str = Field(
        nullable=False
    )  # Motivo como `str`, la restricción la ponemos en el esquema
    customer: str = Field(nullable=False)
