"""
Tests del cliente REST con httpx.MockTransport simulando la API original
(guarda recursos tal cual, sin tocar el stock).
"""
import datetime
import json

import httpx
import pytest

from fruteria.errors import InsufficientStock, NotFound, StoreUnavailable
from fruteria.schemas.movement import StockEntryCreate, StockExitCreate
from fruteria.services.inventory import InventoryService
from fruteria.store.rest import RestStore

TODAY = datetime.date.today()


class FakeApi:
    """API de recursos en memoria: GET, POST, PATCH y DELETE por id."""

    def __init__(self):
        self.resources = {
            "products": {
                1: {
                    "id": 1,
                    "name": "Naranja",
                    "category": "Frutas",
                    "unit": "kg",
                    "supplier": "Citricos del Golfo",
                    "price": 18.0,
                    "stock": 10,
                    "expiryDate": (TODAY + datetime.timedelta(days=20)).isoformat(),
                }
            },
            "stock/entry": {},
            "stock/exit": {},
        }
        self.calls = []
        self.failing = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.strip("/")
        self.calls.append((request.method, "/" + path))
        resource, _, item = path.rpartition("/")
        if path in self.resources:
            resource, item = path, ""
        if resource in self.failing:
            return httpx.Response(500, json={"error": "caída"})

        items = self.resources[resource]
        if request.method == "GET" and not item:
            return httpx.Response(200, json=list(items.values()))
        if request.method == "POST":
            body = json.loads(request.content)
            body["id"] = max(items, default=0) + 1
            items[body["id"]] = body
            return httpx.Response(201, json=body)

        item_id = int(item)
        if item_id not in items:
            return httpx.Response(404, json={})
        if request.method == "GET":
            return httpx.Response(200, json=items[item_id])
        if request.method == "PATCH":
            items[item_id].update(json.loads(request.content))
            return httpx.Response(200, json=items[item_id])
        if request.method == "DELETE":
            del items[item_id]
            return httpx.Response(200, json={})
        return httpx.Response(405)


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def rest_store(api):
    store = RestStore("http://api.test/", transport=httpx.MockTransport(api))
    yield store
    store.close()


class TestRestStore:
    def test_reads_camel_case_products(self, rest_store):
        products = rest_store.list_products()
        assert len(products) == 1
        assert products[0].expiry_date == TODAY + datetime.timedelta(days=20)

    def test_missing_product(self, rest_store):
        with pytest.raises(NotFound):
            rest_store.get_product(99)

    def test_server_error_is_store_unavailable(self, rest_store, api):
        api.failing.add("products")
        with pytest.raises(StoreUnavailable):
            rest_store.list_products()

    def test_connection_error_is_store_unavailable(self):
        def offline(request):
            raise httpx.ConnectError("sin red", request=request)

        store = RestStore("http://api.test", transport=httpx.MockTransport(offline))
        with pytest.raises(StoreUnavailable):
            store.list_exits()
        store.close()

    def test_malformed_records_are_store_unavailable(self, rest_store, api):
        api.resources["stock/exit"][1] = {"id": 1, "productId": 1}
        with pytest.raises(StoreUnavailable):
            rest_store.list_exits()
        with pytest.raises(StoreUnavailable):
            rest_store.get_exit(1)

    def test_non_json_body_is_store_unavailable(self):
        def html(request):
            return httpx.Response(200, text="<html>mantenimiento</html>")

        store = RestStore("http://api.test", transport=httpx.MockTransport(html))
        with pytest.raises(StoreUnavailable):
            store.list_products()
        store.close()

    def test_adjust_stock_rejects_negative_result(self, rest_store, api):
        with pytest.raises(InsufficientStock) as exc_info:
            rest_store.adjust_stock(1, -11)

        assert exc_info.value.available == 10
        assert api.resources["products"][1]["stock"] == 10
        assert all(method == "GET" for method, _ in api.calls)


class TestServiceOverRest:
    def test_entry_writes_movement_then_stock(self, rest_store, api):
        service = InventoryService(rest_store)

        entry = service.register_entry(
            StockEntryCreate(product_id=1, quantity=5, purchase_price=9.5, supplier="Citricos")
        )

        assert entry.product_name == "Naranja"
        assert api.resources["products"][1]["stock"] == 15
        writes = [call for call in api.calls if call[0] != "GET"]
        assert writes == [("POST", "/stock/entry"), ("PATCH", "/products/1")]

    def test_exit_rejected_before_any_write(self, rest_store, api):
        service = InventoryService(rest_store)

        with pytest.raises(InsufficientStock):
            service.register_exit(StockExitCreate(product_id=1, quantity=11, customer="Juguería"))

        assert all(method == "GET" for method, _ in api.calls)
        assert api.resources["stock/exit"] == {}

    def test_delete_exit_restores_stock(self, rest_store, api):
        service = InventoryService(rest_store)
        exit_ = service.register_exit(StockExitCreate(product_id=1, quantity=4, customer="Juguería"))
        assert api.resources["products"][1]["stock"] == 6

        service.delete_exit(exit_.id)

        assert api.resources["products"][1]["stock"] == 10
        assert api.resources["stock/exit"] == {}

    def test_dashboard_reports_partial_failure(self, rest_store, api):
        api.failing.add("stock/exit")
        service = InventoryService(rest_store)

        dashboard = service.dashboard(TODAY)

        assert dashboard.total_stock == 10
        assert dashboard.recent_exits == []
        assert dashboard.errors == ["Error al cargar las salidas"]

    def test_dashboard_reports_malformed_collection(self, rest_store, api):
        """Una colección con registros incompletos se reporta como error y el resto carga"""
        api.resources["stock/exit"][1] = {"id": 1, "productId": 1}
        service = InventoryService(rest_store)

        dashboard = service.dashboard(TODAY)

        assert dashboard.total_stock == 10
        assert dashboard.recent_exits == []
        assert dashboard.errors == ["Error al cargar las salidas"]
