import datetime
from typing import Optional
from pydantic import Field, model_validator
from fruteria.schemas.base import CamelModel


class ProductBase(CamelModel):
    """
    Esquema base para productos.
    - `price` en MXN, con dos decimales.
    - `stock` nunca puede ser negativo.
    """

    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=50)
    unit: str = Field(..., min_length=1, max_length=20)
    supplier: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    stock: float = Field(..., ge=0)
    expiry_date: datetime.date


class ProductCreate(ProductBase):
    """Esquema para la creación de un producto. El `id` lo asigna el almacén."""

    pass


class ProductUpdate(CamelModel):
    """
    Esquema para la actualización parcial (PATCH) de un producto.
    Solo se modifican los campos enviados.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    supplier: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[float] = Field(None, ge=0)
    expiry_date: Optional[datetime.date] = None

    @model_validator(mode="after")
    def check_no_nulls(self):
        # Un campo enviado como null dejaría la fila sin un dato obligatorio
        null_fields = [
            name for name in self.model_fields_set if getattr(self, name) is None
        ]
        if null_fields:
            raise ValueError(
                f"Los campos no pueden ser nulos: {', '.join(sorted(null_fields))}"
            )
        return self


class ProductResponse(ProductBase):
    """Esquema para respuestas de la API. Incluye el `id` generado."""

    id: int
