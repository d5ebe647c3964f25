import os
from fruteria.utils.getenv import get_bool_env

# Base de datos (SQLite local por defecto)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fruteria.db")
DB_ECHO = get_bool_env("DB_ECHO", False)

# "sql" usa la base de datos local, "rest" delega en la API remota (API_BASE_URL)
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql").lower()
API_TIMEOUT = float(os.getenv("API_TIMEOUT", 10))

# Orígenes permitidos para CORS, separados por comas
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR")  # Si se define, además se escribe a fichero
