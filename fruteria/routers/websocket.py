import logging
from typing import List

import anyio
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionManager:
    """Esta clase guarda todas las conexiones activas en una lista.
    Cada vez que alguien se conecta al WebSocket, se añade a esta lista."""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: str):
        """Envía un mensaje de texto a todos los clientes conectados.
        Un cliente que no responde se da de baja y el resto sigue recibiendo."""
        for connection in list(self.active_connections):
            try:
                await connection.send_text(message)
            except Exception as e:
                logger.warning("No se pudo enviar a un cliente WebSocket, se desconecta: %s", e)
                self.disconnect(connection)


# Instanciamos para poder usarla en cualquier parte del código
manager = ConnectionManager()


def notify_movement(message: str):
    """
    Emite `message` desde una ruta sincrónica (hilo de trabajo de FastAPI).
    AnyIO devuelve la llamada al event loop del servidor.
    """
    if not manager.active_connections:
        return
    anyio.from_thread.run(manager.broadcast, message)


@router.websocket("/ws/movements")
async def websocket_endpoint(websocket: WebSocket):
    await manager.connect(websocket)
    logger.info("Cliente WebSocket conectado (%s activos)", len(manager.active_connections))

    try:
        # Mantenemos la conexión viva hasta que el cliente se desconecte
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
        logger.info("Cliente WebSocket desconectado")
