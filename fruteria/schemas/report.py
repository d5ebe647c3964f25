import datetime
from enum import Enum
from typing import List
from pydantic import Field
from fruteria.schemas.base import CamelModel
from fruteria.schemas.movement import StockEntryResponse, StockExitResponse
from fruteria.schemas.product import ProductResponse


class ExpiryStatus(str, Enum):
    """Estado de caducidad. Se calcula, nunca se guarda."""

    EXPIRED = "expired"
    EXPIRING_SOON = "expiringSoon"
    VALID = "valid"


class ProductExpiry(ProductResponse):
    """Producto con su estado de caducidad calculado."""

    status: ExpiryStatus
    days_remaining: int
    label: str = Field(..., description="Texto para mostrar: 'Vence en 3d'...")


class ExpiryGroup(CamelModel):
    status: ExpiryStatus
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)
    products: List[ProductExpiry] = Field(default=[])


class ExpiryReport(CamelModel):
    """Control de caducidad: productos agrupados en vigentes, por caducar y caducados."""

    reference_date: datetime.date
    total: int
    groups: List[ExpiryGroup]


class DashboardResponse(CamelModel):
    """Vista rápida: stock total, próximos a vencer y últimos movimientos."""

    reference_date: datetime.date
    total_stock: float
    expiring_soon_count: int
    recent_movements_count: int
    recent_entries: List[StockEntryResponse] = Field(default=[])
    recent_exits: List[StockExitResponse] = Field(default=[])
    errors: List[str] = Field(
        default=[], description="Colecciones que no se pudieron cargar"
    )
