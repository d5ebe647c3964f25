"""
Cliente de la API REST original (productos y movimientos de stock).

Esa API solo guarda recursos: crear o borrar un movimiento no toca el stock,
el stock se escribe aparte con PATCH /products/{id}. Por eso `transaction()`
no puede ser atómica aquí; si falla la segunda escritura queda un registro
inconsistente que hay que conciliar a mano, y se deja constancia en el log.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Type, TypeVar

import anyio
import httpx
import pydantic
from pydantic import BaseModel

from fruteria.errors import InsufficientStock, NotFound, StoreUnavailable, ValidationError
from fruteria.schemas.movement import (
    StockEntryRecord,
    StockEntryResponse,
    StockExitRecord,
    StockExitResponse,
)
from fruteria.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from fruteria.services.ledger import QUANTITY_DECIMALS
from fruteria.store.base import InventorySnapshot, InventoryStore

logger = logging.getLogger(__name__)

Schema = TypeVar("Schema", bound=BaseModel)

PRODUCTS = "/products"
ENTRIES = "/stock/entry"
EXITS = "/stock/exit"


class RestStore(InventoryStore):
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            base_url: URL base de la API (p. ej. http://localhost:3000)
            timeout: segundos máximos por petición
            transport: transporte alternativo de httpx (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.client = httpx.Client(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    def close(self):
        self.client.close()

    # Utilidades internas
    def _request(
        self, method: str, url: str, not_found: str = "Recurso no encontrado", **kwargs
    ) -> Any:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise StoreUnavailable(f"No se pudo contactar con la API: {e}") from e

        if response.status_code == 404:
            raise NotFound(not_found)
        if response.status_code >= 500:
            raise StoreUnavailable(
                f"La API respondió {response.status_code} en {method} {url}"
            )
        if response.status_code >= 400:
            raise ValidationError(
                f"La API rechazó {method} {url}: {response.text or response.status_code}"
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreUnavailable(f"Respuesta no válida de la API en {method} {url}") from e

    def _parse(self, schema: Type[Schema], data: Any) -> Schema:
        """Valida un recurso recibido de la API. Datos que no encajan cuentan como fallo del almacén."""
        try:
            return schema.model_validate(data)
        except pydantic.ValidationError as e:
            raise StoreUnavailable(
                f"La API devolvió un {schema.__name__} inválido: {e.errors()[0]['msg']}"
            ) from e

    def _parse_list(self, schema: Type[Schema], data: Any) -> List[Schema]:
        if data is not None and not isinstance(data, list):
            raise StoreUnavailable(f"La API devolvió {type(data).__name__} en lugar de una lista")
        return [self._parse(schema, item) for item in data or []]

    @staticmethod
    def _body(model: BaseModel, **kwargs) -> dict:
        return model.model_dump(mode="json", by_alias=True, **kwargs)

    @contextmanager
    def transaction(self) -> Iterator["RestStore"]:
        try:
            yield self
        except Exception:
            logger.error(
                "Escritura interrumpida contra %s: puede haber un movimiento sin "
                "su actualización de stock, revisar a mano",
                self.base_url,
            )
            raise

    # Productos
    def list_products(self) -> List[ProductResponse]:
        return self._parse_list(ProductResponse, self._request("GET", PRODUCTS))

    def get_product(self, product_id: int) -> ProductResponse:
        data = self._request(
            "GET", f"{PRODUCTS}/{product_id}", not_found="Producto no encontrado"
        )
        return self._parse(ProductResponse, data)

    def create_product(self, data: ProductCreate) -> ProductResponse:
        return self._parse(ProductResponse, 
            self._request("POST", PRODUCTS, json=self._body(data))
        )

    def update_product(self, product_id: int, changes: ProductUpdate) -> ProductResponse:
        data = self._request(
            "PATCH",
            f"{PRODUCTS}/{product_id}",
            not_found="Producto no encontrado",
            json=self._body(changes, exclude_unset=True),
        )
        return self._parse(ProductResponse, data)

    def delete_product(self, product_id: int) -> ProductResponse:
        # La API no devuelve el recurso borrado
        product = self.get_product(product_id)
        self._request(
            "DELETE", f"{PRODUCTS}/{product_id}", not_found="Producto no encontrado"
        )
        return product

    def adjust_stock(
        self,
        product_id: int,
        delta: float,
        insufficient_message: str = "Stock insuficiente",
    ) -> ProductResponse:
        # La API no tiene escrituras condicionadas: se relee el stock justo antes del PATCH
        product = self.get_product(product_id)
        new_stock = round(product.stock + delta, QUANTITY_DECIMALS)
        if new_stock < 0:
            raise InsufficientStock(
                insufficient_message, available=product.stock, requested=abs(delta)
            )
        return self.update_product(product_id, ProductUpdate(stock=new_stock))

    # Entradas
    def list_entries(self) -> List[StockEntryResponse]:
        return self._parse_list(StockEntryResponse, self._request("GET", ENTRIES))

    def get_entry(self, entry_id: int) -> StockEntryResponse:
        data = self._request(
            "GET", f"{ENTRIES}/{entry_id}", not_found="Entrada no encontrada"
        )
        return self._parse(StockEntryResponse, data)

    def create_entry(self, record: StockEntryRecord) -> StockEntryResponse:
        return self._parse(StockEntryResponse, 
            self._request("POST", ENTRIES, json=self._body(record))
        )

    def delete_entry(self, entry_id: int) -> StockEntryResponse:
        entry = self.get_entry(entry_id)
        self._request("DELETE", f"{ENTRIES}/{entry_id}", not_found="Entrada no encontrada")
        return entry

    # Salidas
    def list_exits(self) -> List[StockExitResponse]:
        return self._parse_list(StockExitResponse, self._request("GET", EXITS))

    def get_exit(self, exit_id: int) -> StockExitResponse:
        data = self._request("GET", f"{EXITS}/{exit_id}", not_found="Salida no encontrada")
        return self._parse(StockExitResponse, data)

    def create_exit(self, record: StockExitRecord) -> StockExitResponse:
        return self._parse(StockExitResponse, 
            self._request("POST", EXITS, json=self._body(record))
        )

    def delete_exit(self, exit_id: int) -> StockExitResponse:
        exit_ = self.get_exit(exit_id)
        self._request("DELETE", f"{EXITS}/{exit_id}", not_found="Salida no encontrada")
        return exit_

    # Carga en paralelo
    def snapshot(self) -> InventorySnapshot:
        """Pide productos, entradas y salidas a la vez; cada fallo se reporta por separado."""
        return anyio.run(self._snapshot_async)

    async def _snapshot_async(self) -> InventorySnapshot:
        snapshot = InventorySnapshot()

        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:

            async def fetch(attr: str, url: str, schema: Type[Schema], message: str):
                try:
                    response = await client.get(url)
                    response.raise_for_status()
                    setattr(snapshot, attr, self._parse_list(schema, response.json()))
                except (httpx.HTTPError, StoreUnavailable, ValueError) as e:
                    logger.warning("%s: %s", message, e)
                    snapshot.errors.append(message)

            async with anyio.create_task_group() as tg:
                tg.start_soon(
                    fetch, "products", PRODUCTS, ProductResponse,
                    "Error al cargar los productos",
                )
                tg.start_soon(
                    fetch, "entries", ENTRIES, StockEntryResponse,
                    "Error al cargar las entradas",
                )
                tg.start_soon(
                    fetch, "exits", EXITS, StockExitResponse,
                    "Error al cargar las salidas",
                )

        return snapshot
