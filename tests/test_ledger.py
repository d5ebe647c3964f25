"""
Tests de las reglas del libro de movimientos (funciones puras)
"""
import datetime

import pytest

from fruteria.errors import InsufficientStock, ValidationError
from fruteria.schemas.movement import StockEntryResponse, StockExitResponse
from fruteria.schemas.product import ProductResponse
from fruteria.services.ledger import record_entry, record_exit, reverse

DAY = datetime.date(2026, 10, 19)


def product(stock=10, id=1, name="Plátano"):
    return ProductResponse(
        id=id,
        name=name,
        category="Frutas",
        unit="kg",
        supplier="Finca Sur",
        price=22,
        stock=stock,
        expiry_date=DAY + datetime.timedelta(days=10),
    )


def entry(p, quantity):
    updated, record = record_entry(
        p, quantity, purchase_price=12.5, date=DAY, supplier="Finca Sur"
    )
    return updated, StockEntryResponse(id=1, **record.model_dump())


def exit_(p, quantity, reason="Venta"):
    updated, record = record_exit(
        p, quantity, date=DAY, reason=reason, customer="Mostrador"
    )
    return updated, StockExitResponse(id=1, **record.model_dump())


class TestRecordEntry:
    @pytest.mark.parametrize("stock, quantity", [(0, 1), (10, 20), (3.5, 0.25)])
    def test_adds_quantity(self, stock, quantity):
        updated, _ = entry(product(stock), quantity)
        assert updated.stock == stock + quantity

    def test_snapshots_product_name_and_keeps_input(self):
        p = product(10)
        updated, movement = entry(p, 5)

        assert movement.product_name == "Plátano"
        assert movement.product_id == p.id
        assert movement.total == 62.5
        assert p.stock == 10
        assert updated.id == p.id

    def test_no_upper_bound(self):
        updated, _ = entry(product(1_000_000), 1_000_000)
        assert updated.stock == 2_000_000

    def test_float_noise_is_rounded(self):
        updated, _ = entry(product(0.1), 0.2)
        assert updated.stock == 0.3

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, quantity):
        with pytest.raises(ValidationError):
            entry(product(), quantity)

    def test_rejects_purchase_price_below_one_cent(self):
        with pytest.raises(ValidationError):
            record_entry(product(), 1, purchase_price=0, date=DAY, supplier="Finca Sur")

    def test_rejects_short_supplier(self):
        with pytest.raises(ValidationError):
            record_entry(product(), 1, purchase_price=1, date=DAY, supplier="ab")


class TestRecordExit:
    def test_subtracts_quantity(self):
        updated, movement = exit_(product(10), 4, reason="Merma")
        assert updated.stock == 6
        assert movement.reason == "Merma"
        assert movement.customer == "Mostrador"

    def test_can_empty_the_stock(self):
        updated, _ = exit_(product(10), 10)
        assert updated.stock == 0

    def test_rejects_more_than_available(self):
        p = product(10)
        with pytest.raises(InsufficientStock) as excinfo:
            exit_(p, 15)

        assert excinfo.value.available == 10
        assert excinfo.value.requested == 15
        assert p.stock == 10

    def test_rejects_non_positive_quantity(self):
        with pytest.raises(ValidationError):
            exit_(product(10), 0)

    def test_rejects_unknown_reason(self):
        with pytest.raises(ValidationError):
            record_exit(product(10), 1, date=DAY, reason="Robo", customer="Mostrador")


class TestReverse:
    def test_entry_round_trip(self):
        p = product(10)
        updated, movement = entry(p, 7)
        assert reverse(movement, updated).stock == 10

    def test_exit_round_trip(self):
        p = product(10)
        updated, movement = exit_(p, 7)
        assert reverse(movement, updated).stock == 10

    def test_exit_reversal_always_succeeds(self):
        _, movement = exit_(product(10), 10)
        assert reverse(movement, product(0)).stock == 10

    def test_entry_reversal_after_consumption_is_rejected(self):
        """Entrada de 20 (10 -> 30), salida de 25 (-> 5): ya no se puede deshacer la entrada"""
        p = product(10)
        after_entry, entry_movement = entry(p, 20)
        assert after_entry.stock == 30
        after_exit, _ = exit_(after_entry, 25)
        assert after_exit.stock == 5

        with pytest.raises(InsufficientStock):
            reverse(entry_movement, after_exit)
        assert after_exit.stock == 5

    def test_movement_must_belong_to_product(self):
        _, movement = entry(product(10, id=1), 2)
        with pytest.raises(ValidationError):
            reverse(movement, product(10, id=2))
