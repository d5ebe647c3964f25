from typing import List
from fastapi import APIRouter, Depends, status
from fruteria.dependencies import get_inventory_service
from fruteria.errors import InventoryError
from fruteria.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from fruteria.services.inventory import InventoryService
from fruteria.utils.http_errors import to_http_exception

router = APIRouter(prefix="/products", tags=["Productos"])


@router.get("", response_model=List[ProductResponse])
def get_products(service: InventoryService = Depends(get_inventory_service)):
    """Lista todos los productos en orden de alta."""
    try:
        return service.list_products()
    except InventoryError as e:
        raise to_http_exception(e)


@router.get("/{id}", response_model=ProductResponse)
def get_product(id: int, service: InventoryService = Depends(get_inventory_service)):
    """Obtiene un producto específico por su ID."""
    try:
        return service.get_product(id)
    except InventoryError as e:
        raise to_http_exception(e)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    """Crea un nuevo producto."""
    try:
        return service.create_product(product_data)
    except InventoryError as e:
        raise to_http_exception(e)


@router.patch("/{id}", response_model=ProductResponse)
def update_product(
    id: int,
    product_update: ProductUpdate,
    service: InventoryService = Depends(get_inventory_service),
):
    """Actualiza solo los campos enviados. El stock tampoco puede quedar negativo aquí."""
    try:
        return service.update_product(id, product_update)
    except InventoryError as e:
        raise to_http_exception(e)


@router.delete("/{id}", response_model=ProductResponse)
def delete_product(id: int, service: InventoryService = Depends(get_inventory_service)):
    """Elimina un producto. Sus entradas y salidas se conservan en el historial."""
    try:
        return service.delete_product(id)
    except InventoryError as e:
        raise to_http_exception(e)
