from typing import List
from fastapi import APIRouter, Depends, status
from fruteria.dependencies import get_inventory_service
from fruteria.errors import InventoryError
from fruteria.schemas.movement import StockEntryCreate, StockEntryResponse
from fruteria.services.inventory import InventoryService
from fruteria.utils.http_errors import to_http_exception

router = APIRouter(prefix="/stock/entry", tags=["Entradas"])


@router.get("", response_model=List[StockEntryResponse])
def get_entries(service: InventoryService = Depends(get_inventory_service)):
    """Lista todas las entradas de stock."""
    try:
        return service.list_entries()
    except InventoryError as e:
        raise to_http_exception(e)


@router.get("/{id}", response_model=StockEntryResponse)
def get_entry(id: int, service: InventoryService = Depends(get_inventory_service)):
    try:
        return service.get_entry(id)
    except InventoryError as e:
        raise to_http_exception(e)


@router.post("", response_model=StockEntryResponse, status_code=status.HTTP_201_CREATED)
def create_entry(
    entry_data: StockEntryCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    """
    Registra una entrada y suma la cantidad al stock del producto,
    ambas cosas en una sola transacción.
    """
    try:
        return service.register_entry(entry_data)
    except InventoryError as e:
        raise to_http_exception(e)


@router.delete("/{id}", response_model=StockEntryResponse)
def delete_entry(id: int, service: InventoryService = Depends(get_inventory_service)):
    """
    Elimina una entrada y revierte su efecto en el stock.
    - Si el stock ya se consumió y quedaría negativo, responde 409.
    """
    try:
        return service.delete_entry(id)
    except InventoryError as e:
        raise to_http_exception(e)
