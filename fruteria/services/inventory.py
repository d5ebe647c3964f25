import datetime
import logging
from typing import Callable, List, Optional

from fruteria.errors import InsufficientStock, InventoryError, NotFound
from fruteria.schemas.movement import (
    StockEntryCreate,
    StockEntryResponse,
    StockExitCreate,
    StockExitResponse,
)
from fruteria.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from fruteria.schemas.report import (
    DashboardResponse,
    ExpiryGroup,
    ExpiryReport,
    ExpiryStatus,
    ProductExpiry,
)
from fruteria.services import expiry, ledger
from fruteria.store.base import InventoryStore
from fruteria.utils.formatting import format_currency, format_date, format_quantity

logger = logging.getLogger(__name__)

# Número de movimientos de cada tipo que muestra la vista rápida
RECENT_MOVEMENTS = 5

# Orden en el que se presentan los grupos de caducidad
EXPIRY_ORDER = (ExpiryStatus.VALID, ExpiryStatus.EXPIRING_SOON, ExpiryStatus.EXPIRED)


class InventoryService:
    """
    Punto único de escritura del inventario.

    Cada operación del libro (entrada, salida o borrado de un movimiento)
    lee el producto, valida con las reglas de `ledger` y guarda el movimiento
    y el ajuste de stock dentro de una misma `store.transaction()`. El ajuste
    vuelve a comprobar el stock al escribir, por si otra operación lo consumió.
    """

    def __init__(
        self,
        store: InventoryStore,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self._notify_callback = notify

    def _notify(self, message: str):
        """Avisa a los clientes conectados. Un fallo aquí nunca anula la operación."""
        if self._notify_callback is None:
            return
        try:
            self._notify_callback(message)
        except Exception as e:
            logger.warning("No se pudo emitir la notificación: %s", e)

    # Productos
    def list_products(self) -> List[ProductResponse]:
        return self.store.list_products()

    def get_product(self, product_id: int) -> ProductResponse:
        return self.store.get_product(product_id)

    def create_product(self, data: ProductCreate) -> ProductResponse:
        with self.store.transaction():
            product = self.store.create_product(data)
        logger.info("Producto creado: %s (id=%s)", product.name, product.id)
        return product

    def update_product(self, product_id: int, changes: ProductUpdate) -> ProductResponse:
        with self.store.transaction():
            product = self.store.update_product(product_id, changes)
        logger.info(
            "Producto actualizado: %s (campos: %s)",
            product.id,
            ", ".join(sorted(changes.model_dump(exclude_unset=True))) or "ninguno",
        )
        return product

    def delete_product(self, product_id: int) -> ProductResponse:
        """Borra el producto. Sus movimientos se conservan con la copia del nombre."""
        with self.store.transaction():
            product = self.store.delete_product(product_id)
        logger.info("Producto eliminado: %s (id=%s)", product.name, product.id)
        return product

    # Entradas
    def list_entries(self) -> List[StockEntryResponse]:
        return self.store.list_entries()

    def get_entry(self, entry_id: int) -> StockEntryResponse:
        return self.store.get_entry(entry_id)

    def register_entry(self, data: StockEntryCreate) -> StockEntryResponse:
        with self.store.transaction():
            product = self.store.get_product(data.product_id)
            try:
                _, record = ledger.record_entry(
                    product,
                    data.quantity,
                    purchase_price=data.purchase_price,
                    date=data.date,
                    supplier=data.supplier,
                )
            except InventoryError as e:
                logger.warning("Entrada rechazada para %s: %s", product.name, e)
                raise

            entry = self.store.create_entry(record)
            stored = self.store.adjust_stock(product.id, entry.quantity)

        logger.info(
            "Entrada %s registrada: %s +%s (stock %s -> %s)",
            entry.id,
            product.name,
            format_quantity(entry.quantity),
            format_quantity(product.stock),
            format_quantity(stored.stock),
        )
        self._notify(
            f"Nueva entrada: {entry.product_name} +{format_quantity(entry.quantity)} "
            f"{product.unit}, {format_currency(entry.total)} ({format_date(entry.date)})"
        )
        return entry

    def delete_entry(self, entry_id: int) -> StockEntryResponse:
        with self.store.transaction():
            entry = self.store.get_entry(entry_id)
            product = self._find_product(entry.product_id)

            if product is None:
                # Movimiento huérfano: no hay stock que reconciliar
                self.store.delete_entry(entry_id)
                logger.warning(
                    "Entrada %s eliminada sin ajustar stock: el producto %s ya no existe",
                    entry_id,
                    entry.product_id,
                )
                return entry

            try:
                ledger.reverse(entry, product)
                self.store.delete_entry(entry_id)
                stored = self.store.adjust_stock(
                    product.id,
                    -entry.quantity,
                    insufficient_message="No se puede revertir: Stock insuficiente",
                )
            except InsufficientStock as e:
                logger.warning("No se puede revertir la entrada %s: %s", entry_id, e)
                raise

        logger.info(
            "Entrada %s eliminada y stock revertido: %s (stock %s -> %s)",
            entry_id,
            product.name,
            format_quantity(product.stock),
            format_quantity(stored.stock),
        )
        self._notify(f"Entrada eliminada: {entry.product_name} -{format_quantity(entry.quantity)}")
        return entry

    # Salidas
    def list_exits(self) -> List[StockExitResponse]:
        return self.store.list_exits()

    def get_exit(self, exit_id: int) -> StockExitResponse:
        return self.store.get_exit(exit_id)

    def register_exit(self, data: StockExitCreate) -> StockExitResponse:
        with self.store.transaction():
            product = self.store.get_product(data.product_id)
            try:
                _, record = ledger.record_exit(
                    product,
                    data.quantity,
                    date=data.date,
                    reason=data.reason,
                    customer=data.customer,
                )
                exit_ = self.store.create_exit(record)
                # La comprobación se repite al escribir: otra salida pudo consumir el stock
                stored = self.store.adjust_stock(
                    product.id,
                    -exit_.quantity,
                    insufficient_message="Stock insuficiente para realizar la salida",
                )
            except InventoryError as e:
                logger.warning("Salida rechazada para %s: %s", product.name, e)
                raise

        logger.info(
            "Salida %s registrada (%s): %s -%s (stock %s -> %s)",
            exit_.id,
            exit_.reason,
            product.name,
            format_quantity(exit_.quantity),
            format_quantity(product.stock),
            format_quantity(stored.stock),
        )
        self._notify(
            f"Nueva salida ({exit_.reason}): {exit_.product_name} "
            f"-{format_quantity(exit_.quantity)} {product.unit} ({format_date(exit_.date)})"
        )
        return exit_

    def delete_exit(self, exit_id: int) -> StockExitResponse:
        with self.store.transaction():
            exit_ = self.store.get_exit(exit_id)
            product = self._find_product(exit_.product_id)

            if product is None:
                self.store.delete_exit(exit_id)
                logger.warning(
                    "Salida %s eliminada sin ajustar stock: el producto %s ya no existe",
                    exit_id,
                    exit_.product_id,
                )
                return exit_

            ledger.reverse(exit_, product)
            self.store.delete_exit(exit_id)
            stored = self.store.adjust_stock(product.id, exit_.quantity)

        logger.info(
            "Salida %s eliminada y stock revertido: %s (stock %s -> %s)",
            exit_id,
            product.name,
            format_quantity(product.stock),
            format_quantity(stored.stock),
        )
        self._notify(f"Salida eliminada: {exit_.product_name} +{format_quantity(exit_.quantity)}")
        return exit_

    def _find_product(self, product_id: int) -> Optional[ProductResponse]:
        try:
            return self.store.get_product(product_id)
        except NotFound:
            return None

    # Vistas derivadas
    def expiry_report(
        self, reference_date: Optional[datetime.date] = None
    ) -> ExpiryReport:
        """Control de caducidad: vigentes, por caducar y caducados."""
        reference = reference_date or datetime.date.today()
        products = self.store.list_products()
        groups = expiry.group_by_status(products, reference)
        # Evita dividir por cero con el inventario vacío
        total = len(products) or 1

        return ExpiryReport(
            reference_date=reference,
            total=len(products),
            groups=[
                ExpiryGroup(
                    status=status,
                    count=len(groups[status]),
                    percentage=round(len(groups[status]) / total * 100, 2),
                    products=[
                        ProductExpiry(
                            **product.model_dump(),
                            status=status,
                            days_remaining=expiry.days_remaining(
                                product.expiry_date, reference
                            ),
                            label=expiry.describe(product.expiry_date, reference),
                        )
                        for product in groups[status]
                    ],
                )
                for status in EXPIRY_ORDER
            ],
        )

    def dashboard(
        self, reference_date: Optional[datetime.date] = None
    ) -> DashboardResponse:
        """Vista rápida. Si una colección falla se muestra el resto y se informa del error."""
        reference = reference_date or datetime.date.today()
        snapshot = self.store.snapshot()
        products = snapshot.products or []
        # Últimos movimientos, del más reciente al más antiguo
        recent_entries = list(reversed((snapshot.entries or [])[-RECENT_MOVEMENTS:]))
        recent_exits = list(reversed((snapshot.exits or [])[-RECENT_MOVEMENTS:]))

        return DashboardResponse(
            reference_date=reference,
            total_stock=round(sum(p.stock for p in products), ledger.QUANTITY_DECIMALS),
            expiring_soon_count=sum(
                1
                for p in products
                if expiry.classify(p.expiry_date, reference)
                is ExpiryStatus.EXPIRING_SOON
            ),
            recent_movements_count=len(recent_entries) + len(recent_exits),
            recent_entries=recent_entries,
            recent_exits=recent_exits,
            errors=snapshot.errors,
        )
