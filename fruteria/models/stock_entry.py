import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class StockEntry(SQLModel, table=True):
    __tablename__ = "entrada_stock"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Sin foreign key: borrar un producto no borra su historial
    product_id: int = Field(nullable=False, index=True)
    product_name: str = Field(nullable=False)  # Copia del nombre al registrar
    quantity: float = Field(nullable=False, gt=0)
    purchase_price: float = Field(nullable=False)
    date: datetime.date = Field(nullable=False)
    supplier: str = Field(nullable=False)
