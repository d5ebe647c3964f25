import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional

from pydantic import BaseModel, Field

from fruteria.errors import StoreUnavailable
from fruteria.schemas.movement import (
    StockEntryRecord,
    StockEntryResponse,
    StockExitRecord,
    StockExitResponse,
)
from fruteria.schemas.product import ProductCreate, ProductResponse, ProductUpdate

logger = logging.getLogger(__name__)


class InventorySnapshot(BaseModel):
    """
    Todo el inventario cargado de una vez.
    Una colección que no se pudo leer queda en `None` y su error en `errors`.
    """

    products: Optional[List[ProductResponse]] = None
    entries: Optional[List[StockEntryResponse]] = None
    exits: Optional[List[StockExitResponse]] = None
    errors: List[str] = Field(default=[])


class InventoryStore(ABC):
    """
    Almacén de productos, entradas y salidas: lectura de todos, lectura por id,
    alta, actualización parcial (solo productos) y borrado.

    Los métodos lanzan `NotFound` si el id no existe y `StoreUnavailable`
    si el almacén falla. Las listas se devuelven en orden de alta.
    """

    # Productos
    @abstractmethod
    def list_products(self) -> List[ProductResponse]: ...

    @abstractmethod
    def get_product(self, product_id: int) -> ProductResponse: ...

    @abstractmethod
    def create_product(self, data: ProductCreate) -> ProductResponse: ...

    @abstractmethod
    def update_product(self, product_id: int, changes: ProductUpdate) -> ProductResponse: ...

    @abstractmethod
    def delete_product(self, product_id: int) -> ProductResponse: ...

    @abstractmethod
    def adjust_stock(
        self,
        product_id: int,
        delta: float,
        insufficient_message: str = "Stock insuficiente",
    ) -> ProductResponse:
        """
        Suma `delta` (positivo o negativo) al stock del producto y devuelve el
        producto actualizado. La comprobación `stock + delta >= 0` se hace en
        el mismo paso que la escritura; si no se cumple lanza `InsufficientStock`
        y el stock no cambia.
        """
        ...

    # Entradas
    @abstractmethod
    def list_entries(self) -> List[StockEntryResponse]: ...

    @abstractmethod
    def get_entry(self, entry_id: int) -> StockEntryResponse: ...

    @abstractmethod
    def create_entry(self, record: StockEntryRecord) -> StockEntryResponse: ...

    @abstractmethod
    def delete_entry(self, entry_id: int) -> StockEntryResponse: ...

    # Salidas
    @abstractmethod
    def list_exits(self) -> List[StockExitResponse]: ...

    @abstractmethod
    def get_exit(self, exit_id: int) -> StockExitResponse: ...

    @abstractmethod
    def create_exit(self, record: StockExitRecord) -> StockExitResponse: ...

    @abstractmethod
    def delete_exit(self, exit_id: int) -> StockExitResponse: ...

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator["InventoryStore"]:
        """Agrupa varias escrituras: o se aplican todas o ninguna (si el almacén lo permite)."""
        ...

    def snapshot(self) -> InventorySnapshot:
        """Carga productos, entradas y salidas. Un fallo en una colección no bloquea las demás."""
        snapshot = InventorySnapshot()
        loaders = (
            ("products", self.list_products, "Error al cargar los productos"),
            ("entries", self.list_entries, "Error al cargar las entradas"),
            ("exits", self.list_exits, "Error al cargar las salidas"),
        )
        for attr, loader, message in loaders:
            try:
                setattr(snapshot, attr, loader())
            except StoreUnavailable as e:
                logger.warning("%s: %s", message, e)
                snapshot.errors.append(message)
        return snapshot

    def close(self):
        """Libera recursos (conexiones HTTP...). Por defecto no hace nada."""
        pass
