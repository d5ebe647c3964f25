import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fruteria.dependencies import get_inventory_service
from fruteria.errors import InventoryError
from fruteria.schemas.report import DashboardResponse, ExpiryReport
from fruteria.services.inventory import InventoryService
from fruteria.utils.http_errors import to_http_exception

router = APIRouter(tags=["Reportes"])


@router.get("/expiry", response_model=ExpiryReport)
def get_expiry_report(
    service: InventoryService = Depends(get_inventory_service),
    reference_date: Optional[datetime.date] = Query(None, alias="referenceDate"),
):
    """Productos agrupados en vigentes, próximos a vencer (7 días) y caducados."""
    try:
        return service.expiry_report(reference_date)
    except InventoryError as e:
        raise to_http_exception(e)


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    service: InventoryService = Depends(get_inventory_service),
    reference_date: Optional[datetime.date] = Query(None, alias="referenceDate"),
):
    """Stock total, productos que expiran pronto y los últimos 5 ingresos y egresos."""
    return service.dashboard(reference_date)
