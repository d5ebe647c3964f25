"""
Clasificación de caducidad.

Todas las funciones trabajan con días naturales: fecha y referencia se
truncan a medianoche antes de restar, así la hora nunca cambia el resultado.
"""
import datetime
from typing import Dict, Iterable, List, Optional, Union

from dateutil.parser import isoparse

from fruteria.schemas.product import ProductResponse
from fruteria.schemas.report import ExpiryStatus

# Días (inclusive) en los que un producto se considera próximo a vencer
EXPIRING_SOON_DAYS = 7

DateLike = Union[datetime.date, datetime.datetime, str]


def _to_date(value: DateLike) -> datetime.date:
    """Normaliza `date`, `datetime` o texto ISO ('2026-10-19', '2026-10-19T18:30') a `date`."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return isoparse(value).date()


def days_remaining(
    expiry_date: DateLike, reference_date: Optional[DateLike] = None
) -> int:
    """Días enteros desde la referencia (hoy por defecto) hasta la caducidad. Negativo si ya caducó."""
    reference = (
        _to_date(reference_date) if reference_date is not None else datetime.date.today()
    )
    return (_to_date(expiry_date) - reference).days


def classify(
    expiry_date: DateLike, reference_date: Optional[DateLike] = None
) -> ExpiryStatus:
    days = days_remaining(expiry_date, reference_date)
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days <= EXPIRING_SOON_DAYS:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.VALID


def describe(expiry_date: DateLike, reference_date: Optional[DateLike] = None) -> str:
    """Texto corto para mostrar junto al producto."""
    days = days_remaining(expiry_date, reference_date)
    status = classify(expiry_date, reference_date)
    if status is ExpiryStatus.EXPIRED:
        return f"Expiró hace {abs(days)}d"
    if status is ExpiryStatus.EXPIRING_SOON:
        return f"Vence en {days}d"
    return f"{days} días restantes"


def group_by_status(
    products: Iterable[ProductResponse], reference_date: Optional[DateLike] = None
) -> Dict[ExpiryStatus, List[ProductResponse]]:
    """Reparte los productos por estado. Siempre devuelve las tres claves."""
    groups: Dict[ExpiryStatus, List[ProductResponse]] = {
        status: [] for status in ExpiryStatus
    }
    for product in products:
        groups[classify(product.expiry_date, reference_date)].append(product)
    return groups
