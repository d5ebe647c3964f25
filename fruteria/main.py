import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware  # CORS
from fruteria import config
from fruteria.models.database import create_db_and_tables
from fruteria.routers import products, reports, stock_entries, stock_exits
from fruteria.routers.websocket import router as websocket_router
from fruteria.utils.logging_config import setup_logging

setup_logging(config.LOG_LEVEL, config.LOG_DIR)
logger = logging.getLogger("fruteria")


# Crear las tablas al iniciar la aplicación
@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.STORE_BACKEND == "sql":
        create_db_and_tables()
    logger.info("Frutería API iniciada (almacén: %s)", config.STORE_BACKEND)
    yield


app = FastAPI(title="Frutería", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Incluir routers
app.include_router(products.router)
app.include_router(stock_entries.router)
app.include_router(stock_exits.router)
app.include_router(reports.router)
# Websocket
app.include_router(websocket_router)


@app.get("/")
def read_root():
    return {"message": "API funcionando correctamente"}
