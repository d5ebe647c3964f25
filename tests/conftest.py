"""
Fixtures comunes.
La base de datos es SQLite en memoria, nueva para cada test.
"""
import datetime
import os

# Antes de importar la app: base de datos en memoria y almacén local
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORE_BACKEND"] = "sql"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from fruteria.dependencies import get_store
from fruteria.main import app
from fruteria.models import product, stock_entry, stock_exit  # noqa: F401
from fruteria.schemas.product import ProductCreate
from fruteria.services.inventory import InventoryService
from fruteria.store.sql import SQLStore

TODAY = datetime.date.today()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session):
    return SQLStore(session)


@pytest.fixture
def service(store):
    return InventoryService(store)


@pytest.fixture
def make_product(service):
    """Crea productos con valores por defecto razonables."""

    def _make(**overrides):
        data = {
            "name": "Manzana",
            "category": "Frutas",
            "unit": "kg",
            "supplier": "Huerta del Norte",
            "price": 35.5,
            "stock": 10,
            "expiry_date": TODAY + datetime.timedelta(days=30),
        }
        data.update(overrides)
        return service.create_product(ProductCreate(**data))

    return _make


@pytest.fixture
def client(store):
    """Cliente HTTP contra la app real, con el almacén del test."""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
