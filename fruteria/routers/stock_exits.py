from typing import List
from fastapi import APIRouter, Depends, status
from fruteria.dependencies import get_inventory_service
from fruteria.errors import InventoryError
from fruteria.schemas.movement import StockExitCreate, StockExitResponse
from fruteria.services.inventory import InventoryService
from fruteria.utils.http_errors import to_http_exception

router = APIRouter(prefix="/stock/exit", tags=["Salidas"])


@router.get("", response_model=List[StockExitResponse])
def get_exits(service: InventoryService = Depends(get_inventory_service)):
    """Lista todas las salidas de stock."""
    try:
        return service.list_exits()
    except InventoryError as e:
        raise to_http_exception(e)


@router.get("/{id}", response_model=StockExitResponse)
def get_exit(id: int, service: InventoryService = Depends(get_inventory_service)):
    try:
        return service.get_exit(id)
    except InventoryError as e:
        raise to_http_exception(e)


@router.post("", response_model=StockExitResponse, status_code=status.HTTP_201_CREATED)
def create_exit(
    exit_data: StockExitCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    """
    Registra una salida y descuenta la cantidad del stock.
    - Si no hay stock suficiente responde 409 y no se guarda nada.
    """
    try:
        return service.register_exit(exit_data)
    except InventoryError as e:
        raise to_http_exception(e)


@router.delete("/{id}", response_model=StockExitResponse)
def delete_exit(id: int, service: InventoryService = Depends(get_inventory_service)):
    """Elimina una salida y devuelve su cantidad al stock."""
    try:
        return service.delete_exit(id)
    except InventoryError as e:
        raise to_http_exception(e)
