import logging
from contextlib import contextmanager
from typing import Iterator, List, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from fruteria.errors import InsufficientStock, NotFound, StoreUnavailable
from fruteria.models.product import Product
from fruteria.models.stock_entry import StockEntry
from fruteria.models.stock_exit import StockExit
from fruteria.schemas.movement import (
    StockEntryRecord,
    StockEntryResponse,
    StockExitRecord,
    StockExitResponse,
)
from fruteria.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from fruteria.services.ledger import QUANTITY_DECIMALS
from fruteria.store.base import InventoryStore

logger = logging.getLogger(__name__)

Row = TypeVar("Row", bound=SQLModel)
Schema = TypeVar("Schema", bound=BaseModel)


def _to_schema(schema: Type[Schema], row: SQLModel) -> Schema:
    return schema.model_validate(row.model_dump())


class SQLStore(InventoryStore):
    """
    Almacén sobre una sesión de SQLModel.

    Fuera de `transaction()` cada escritura se confirma al momento. Dentro,
    las escrituras solo se vuelcan (flush) y se confirman juntas al salir;
    cualquier excepción hace rollback de todas.
    """

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    # Utilidades internas
    def _get(self, model: Type[Row], row_id: int, not_found: str) -> Row:
        try:
            row = self.session.get(model, row_id)
        except SQLAlchemyError as e:
            raise StoreUnavailable("Error de conexión con la base de datos") from e
        if row is None:
            raise NotFound(not_found)
        return row

    def _list(self, model: Type[Row]) -> List[Row]:
        try:
            return list(self.session.exec(select(model).order_by(model.id)).all())
        except SQLAlchemyError as e:
            raise StoreUnavailable("Error de conexión con la base de datos") from e

    def _commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreUnavailable("Error al guardar en la base de datos") from e

    def _write(self, row: SQLModel, delete: bool = False):
        """Añade (o borra) una fila; confirma solo si no hay transacción abierta."""
        try:
            if delete:
                self.session.delete(row)
            else:
                self.session.add(row)
            self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreUnavailable("Error al guardar en la base de datos") from e
        if self._depth == 0:
            self._commit()
        if not delete:
            self.session.refresh(row)

    @contextmanager
    def transaction(self) -> Iterator["SQLStore"]:
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                self._commit()
        except Exception:
            if self._depth == 1:
                logger.warning("Transacción cancelada, se deshacen los cambios")
                self.session.rollback()
            raise
        finally:
            self._depth -= 1

    # Productos
    def list_products(self) -> List[ProductResponse]:
        return [_to_schema(ProductResponse, p) for p in self._list(Product)]

    def get_product(self, product_id: int) -> ProductResponse:
        return _to_schema(
            ProductResponse, self._get(Product, product_id, "Producto no encontrado")
        )

    def create_product(self, data: ProductCreate) -> ProductResponse:
        product = Product(**data.model_dump())
        self._write(product)
        return _to_schema(ProductResponse, product)

    def update_product(self, product_id: int, changes: ProductUpdate) -> ProductResponse:
        product = self._get(Product, product_id, "Producto no encontrado")
        # Aplicar cambios solo si se envían
        for field, value in changes.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        self._write(product)
        return _to_schema(ProductResponse, product)

    def delete_product(self, product_id: int) -> ProductResponse:
        product = self._get(Product, product_id, "Producto no encontrado")
        deleted = _to_schema(ProductResponse, product)
        self._write(product, delete=True)
        return deleted

    def adjust_stock(
        self,
        product_id: int,
        delta: float,
        insufficient_message: str = "Stock insuficiente",
    ) -> ProductResponse:
        new_stock = func.round(Product.stock + delta, QUANTITY_DECIMALS)
        # UPDATE condicionado: la comprobación y la escritura son una sola sentencia
        statement = (
            update(Product)
            .where(Product.id == product_id, new_stock >= 0)
            .values(stock=new_stock)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(statement)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreUnavailable("Error al guardar en la base de datos") from e

        product = self._get(Product, product_id, "Producto no encontrado")
        self.session.refresh(product)
        if result.rowcount == 0:
            raise InsufficientStock(
                insufficient_message, available=product.stock, requested=abs(delta)
            )

        if self._depth == 0:
            self._commit()
            self.session.refresh(product)
        return _to_schema(ProductResponse, product)

    # Entradas
    def list_entries(self) -> List[StockEntryResponse]:
        return [_to_schema(StockEntryResponse, e) for e in self._list(StockEntry)]

    def get_entry(self, entry_id: int) -> StockEntryResponse:
        return _to_schema(
            StockEntryResponse, self._get(StockEntry, entry_id, "Entrada no encontrada")
        )

    def create_entry(self, record: StockEntryRecord) -> StockEntryResponse:
        entry = StockEntry(**record.model_dump())
        self._write(entry)
        return _to_schema(StockEntryResponse, entry)

    def delete_entry(self, entry_id: int) -> StockEntryResponse:
        entry = self._get(StockEntry, entry_id, "Entrada no encontrada")
        deleted = _to_schema(StockEntryResponse, entry)
        self._write(entry, delete=True)
        return deleted

    # Salidas
    def list_exits(self) -> List[StockExitResponse]:
        return [_to_schema(StockExitResponse, e) for e in self._list(StockExit)]

    def get_exit(self, exit_id: int) -> StockExitResponse:
        return _to_schema(
            StockExitResponse, self._get(StockExit, exit_id, "Salida no encontrada")
        )

    def create_exit(self, record: StockExitRecord) -> StockExitResponse:
        exit_ = StockExit(**record.model_dump())
        self._write(exit_)
        return _to_schema(StockExitResponse, exit_)

    def delete_exit(self, exit_id: int) -> StockExitResponse:
        exit_ = self._get(StockExit, exit_id, "Salida no encontrada")
        deleted = _to_schema(StockExitResponse, exit_)
        self._write(exit_, delete=True)
        return deleted
