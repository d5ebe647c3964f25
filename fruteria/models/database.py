from sqlmodel import SQLModel, create_engine, Session
from fruteria.config import DATABASE_URL, DB_ECHO

# SQLite necesita compartir la conexión entre los hilos del servidor
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=DB_ECHO, connect_args=connect_args)


def get_db():
    """Obtiene una sesión de la base de datos."""
    with Session(engine) as session:
        yield session


def create_db_and_tables():
    # Importar las tablas para que queden registradas en los metadatos
    from fruteria.models import product, stock_entry, stock_exit  # noqa: F401

    SQLModel.metadata.create_all(engine)
