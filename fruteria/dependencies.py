from fastapi import Depends
from sqlmodel import Session

from fruteria import config
from fruteria.models.database import get_db
from fruteria.routers.websocket import notify_movement
from fruteria.services.inventory import InventoryService
from fruteria.store.base import InventoryStore
from fruteria.store.rest import RestStore
from fruteria.store.sql import SQLStore
from fruteria.utils.getenv import get_required_env


def get_store(db: Session = Depends(get_db)):
    """Almacén de inventario según STORE_BACKEND: base de datos local o API remota."""
    if config.STORE_BACKEND == "rest":
        store = RestStore(get_required_env("API_BASE_URL"), timeout=config.API_TIMEOUT)
        try:
            yield store
        finally:
            store.close()
    else:
        yield SQLStore(db)


def get_inventory_service(
    store: InventoryStore = Depends(get_store),
) -> InventoryService:
    return InventoryService(store, notify=notify_movement)
