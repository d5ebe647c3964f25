"""
Reglas del libro de movimientos (entradas y salidas de stock).

Son funciones puras: reciben el producto tal como está en el almacén y
devuelven el producto actualizado y el movimiento a guardar, sin tocar nada.
Todas las comprobaciones se hacen antes de construir el resultado, así que
un rechazo nunca deja efectos a medias. Guardar el resultado es tarea de
`InventoryService`.
"""
import datetime
from typing import Tuple

import pydantic

from fruteria.errors import InsufficientStock, ValidationError
from fruteria.schemas.movement import (
    ExitReason,
    Movement,
    StockEntryRecord,
    StockEntryResponse,
    StockExitRecord,
)
from fruteria.schemas.product import ProductResponse

# Las cantidades admiten decimales (kg); se redondea para no arrastrar errores de coma flotante
QUANTITY_DECIMALS = 3


def _round(value: float) -> float:
    return round(value, QUANTITY_DECIMALS)


def _check_quantity(quantity: float):
    if quantity is None or quantity <= 0:
        raise ValidationError(f"La cantidad debe ser mayor a 0 (recibido: {quantity})")


def _build(model, **fields):
    """Construye el movimiento; los errores de pydantic pasan a ser errores del dominio."""
    try:
        return model(**fields)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Movimiento inválido: {e.errors()[0]['msg']}") from e


def _with_stock(product: ProductResponse, stock: float) -> ProductResponse:
    return product.model_copy(update={"stock": _round(stock)})


def record_entry(
    product: ProductResponse,
    quantity: float,
    *,
    purchase_price: float,
    date: datetime.date,
    supplier: str,
) -> Tuple[ProductResponse, StockEntryRecord]:
    """
    Registra una entrada: el stock sube en `quantity`, sin límite superior.
    La entrada guarda una copia del nombre actual del producto.
    """
    _check_quantity(quantity)
    if purchase_price is None or purchase_price < 0.01:
        raise ValidationError("El costo unitario debe ser de al menos 0.01")

    entry = _build(
        StockEntryRecord,
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        purchase_price=purchase_price,
        date=date,
        supplier=supplier,
    )
    return _with_stock(product, product.stock + quantity), entry


def record_exit(
    product: ProductResponse,
    quantity: float,
    *,
    date: datetime.date,
    reason: ExitReason,
    customer: str,
) -> Tuple[ProductResponse, StockExitRecord]:
    """Registra una salida. Se rechaza si `quantity` supera el stock disponible."""
    _check_quantity(quantity)
    if quantity > product.stock:
        raise InsufficientStock(
            "Stock insuficiente para realizar la salida",
            available=product.stock,
            requested=quantity,
        )

    exit_ = _build(
        StockExitRecord,
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        date=date,
        reason=reason,
        customer=customer,
    )
    return _with_stock(product, product.stock - quantity), exit_


def reverse(movement: Movement, product: ProductResponse) -> ProductResponse:
    """
    Calcula el stock del producto tras borrar `movement`.

    - Entrada: se resta su cantidad; falla si el stock ya se consumió.
    - Salida: se devuelve su cantidad; siempre es posible y no hay tope.
    """
    if movement.product_id != product.id:
        raise ValidationError(
            f"El movimiento {movement.id} no pertenece al producto {product.id}"
        )

    if isinstance(movement, StockEntryResponse):
        if product.stock < movement.quantity:
            raise InsufficientStock(
                "No se puede revertir: Stock insuficiente",
                available=product.stock,
                requested=movement.quantity,
            )
        return _with_stock(product, product.stock - movement.quantity)

    return _with_stock(product, product.stock + movement.quantity)
