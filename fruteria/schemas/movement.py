import datetime
from typing import Literal, Union
from pydantic import Field, computed_field
from fruteria.schemas.base import CamelModel

ExitReason = Literal["Venta", "Merma", "Uso Interno", "Donación"]


class StockEntryBase(CamelModel):
    """Campos comunes de una entrada de stock."""

    product_id: int = Field(..., gt=0, description="ID del producto que entra")
    quantity: float = Field(..., gt=0, description="Cantidad recibida (mayor a 0)")
    purchase_price: float = Field(
        ..., ge=0.01, description="Costo unitario de compra"
    )
    date: datetime.date = Field(default_factory=datetime.date.today)
    supplier: str = Field(..., min_length=3, max_length=100)


class StockEntryCreate(StockEntryBase):
    """Petición de entrada. El nombre del producto lo copia el servidor."""

    pass


class StockEntryRecord(StockEntryBase):
    """Entrada lista para guardarse, con la copia del nombre del producto."""

    product_name: str = Field(..., min_length=1)


class StockEntryResponse(StockEntryRecord):
    id: int

    @computed_field
    @property
    def total(self) -> float:
        """Costo total de la entrada (cantidad x costo unitario)."""
        return round(self.quantity * self.purchase_price, 2)


class StockExitBase(CamelModel):
    """Campos comunes de una salida de stock."""

    product_id: int = Field(..., gt=0, description="ID del producto que sale")
    quantity: float = Field(..., gt=0, description="Cantidad que sale (mayor a 0)")
    date: datetime.date = Field(default_factory=datetime.date.today)
    reason: ExitReason = Field(
        "Venta", description="Venta, Merma, Uso Interno o Donación"
    )
    customer: str = Field(..., min_length=3, max_length=100)


class StockExitCreate(StockExitBase):
    pass


class StockExitRecord(StockExitBase):
    product_name: str = Field(..., min_length=1)


class StockExitResponse(StockExitRecord):
    id: int


Movement = Union[StockEntryResponse, StockExitResponse]
